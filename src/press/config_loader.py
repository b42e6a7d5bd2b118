"""Load PressConfig from press.yaml or press.toml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from press._errors import ConfigError
from press.config import PressConfig

_CONFIG_KEYS = frozenset({
    "src", "data", "dest", "metadata_buffer", "templating", "markdown", "watch_debounce",
})


def load_config(root: Path, **overrides: object) -> PressConfig:
    """Load PressConfig from root, optionally merging press.yaml.

    Looks for press.yaml, press.yml, or press.toml in root. If found, loads
    and merges with overrides. Overrides take precedence.

    Raises:
        ConfigError: If the config file is malformed or names unknown keys.

    """
    file_config = _read_press_config(root)
    merged = {**file_config, **overrides}
    unknown = set(merged) - _CONFIG_KEYS
    if unknown:
        msg = f"Unknown config keys: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    if "dest" in merged and not isinstance(merged["dest"], Path):
        merged["dest"] = Path(str(merged["dest"]))
    return PressConfig(root=root, **merged)


def _read_press_config(root: Path) -> dict[str, object]:
    """Read press config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("press.yaml", "press.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "press.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_press_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_press_section(data)


def _flatten_press_section(data: dict[str, object]) -> dict[str, object]:
    """Extract press.* keys into top-level config."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k != "press" and k in _CONFIG_KEYS:
            result[k] = v
    section = data.get("press")
    if isinstance(section, dict):
        result.update(section)
    return result
