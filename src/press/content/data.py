"""Data sources — named values that pages read while rendering.

Each file under the data root becomes one DataEntry named after its filename
stem; two sources with the same stem are an error. The value is produced by a
provider chosen by file suffix. Providers are soft-failing: a source that does
not parse yields ``{}`` with a warning, so one malformed file cannot abort a
whole load. A file that cannot be read at all is
an I/O failure and propagates.
"""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import json
import sys
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import yaml

from press._errors import ContentError, DataError
from press.config import DATA_SUFFIXES, PressConfig

if TYPE_CHECKING:
    from press.observability.collector import BuildCollector


@dataclass(frozen=True, slots=True)
class DataEntry:
    """One named data source.

    Attributes:
        name: Filename stem; the key pages use to address the value.
        value: Parsed content.
        path: Source file the value was read from.

    """

    name: str
    value: Any
    path: Path


def data_name(path: Path) -> str:
    """Addressing key for a data source path."""
    return path.stem


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class DataProvider(Protocol):
    """Resolves a data source file to its value."""

    suffixes: frozenset[str]

    async def resolve(self, path: Path) -> Any:
        """Return the parsed value.

        Raises:
            ContentError: If the file cannot be read.
            DataError: If the file content cannot be parsed.

        """
        ...


def _read_text(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"Cannot read data source {path.name}: {exc}"
        raise ContentError(msg) from exc
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"{path.name} is not valid UTF-8: {exc}"
        raise DataError(msg) from exc


class JsonDataProvider:
    suffixes = frozenset({".json"})

    async def resolve(self, path: Path) -> Any:
        content = _read_text(path)
        try:
            return json.loads(content)
        except json.JSONDecodeError as exc:
            msg = f"JSON error in {path.name}: {exc}"
            raise DataError(msg) from exc


class YamlDataProvider:
    suffixes = frozenset({".yaml", ".yml"})

    async def resolve(self, path: Path) -> Any:
        content = _read_text(path)
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as exc:
            msg = f"YAML error in {path.name}: {exc}"
            raise DataError(msg) from exc


class ModuleDataProvider:
    """Runs a Python data module and returns what its ``load`` produces.

    The module must define ``load``. Three shapes are accepted::

        def load(): return {...}
        async def load(): return {...}
        def load(done): done(None, {...})   # completion callback

    The module is executed fresh on every resolve, so edits are always seen.
    A callback that is never invoked leaves the load pending.

    """

    suffixes = frozenset({".py"})

    async def resolve(self, path: Path) -> Any:
        if not path.is_file():
            msg = f"Cannot read data source {path.name}: file not found"
            raise ContentError(msg)

        module_name = f"press_data_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f"Cannot import data module {path.name}"
            raise DataError(msg)
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as exc:
            msg = f"Data module {path.name} failed to import: {exc}"
            raise DataError(msg) from exc

        load = getattr(module, "load", None)
        if not callable(load):
            msg = f"Data module {path.name} does not define load()"
            raise DataError(msg)

        try:
            if _takes_callback(load):
                return await _call_with_callback(load)
            result = load()
            if inspect.isawaitable(result):
                result = await result
        except DataError:
            raise
        except Exception as exc:
            msg = f"Data module {path.name} raised: {exc}"
            raise DataError(msg) from exc
        return result


def _takes_callback(func: Any) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return False
    return any(p.default is inspect.Parameter.empty for p in params)


async def _call_with_callback(load: Any) -> Any:
    loop = asyncio.get_running_loop()
    future: asyncio.Future[Any] = loop.create_future()

    def done(error: object = None, data: Any = None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(DataError(f"load() reported an error: {error}"))
        else:
            future.set_result(data)

    load(done)
    return await future


class DataProviders:
    """Provider registry keyed by file suffix."""

    def __init__(self, providers: Iterable[DataProvider] | None = None) -> None:
        self._by_suffix: dict[str, DataProvider] = {}
        if providers is None:
            providers = (ModuleDataProvider(), JsonDataProvider(), YamlDataProvider())
        for provider in providers:
            self.register(provider)

    def register(self, provider: DataProvider) -> None:
        """Add a provider; later registrations win for shared suffixes."""
        for suffix in provider.suffixes:
            self._by_suffix[suffix] = provider

    def for_path(self, path: Path) -> DataProvider | None:
        return self._by_suffix.get(path.suffix)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


async def load_data_entry(
    path: Path,
    providers: DataProviders,
    collector: BuildCollector | None = None,
) -> DataEntry:
    """Resolve one data source, soft-failing parse errors to ``{}``.

    Raises:
        ContentError: If the file cannot be read or no provider handles it.

    """
    name = data_name(path)
    provider = providers.for_path(path)
    if provider is None:
        msg = f"No data provider for {path.name}"
        raise ContentError(msg)

    ok = True
    try:
        value = await provider.resolve(path)
    except DataError as exc:
        print(f"  Data parse error: {path.name}: {exc}", file=sys.stderr)
        value, ok = {}, False
    if value is None:
        value = {}

    if collector is not None:
        collector.record_data_loaded(name, str(path), ok=ok)
    return DataEntry(name=name, value=value, path=path)


def discover_data(config: PressConfig) -> list[Path]:
    """List data sources under the data root."""
    root = config.data_path
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file() and p.suffix in DATA_SUFFIXES)


def _check_unique_names(paths: list[Path], root: Path) -> None:
    seen: dict[str, Path] = {}
    for path in paths:
        name = data_name(path)
        other = seen.get(name)
        if other is not None:
            msg = (
                f"Data sources {other.relative_to(root).as_posix()} and "
                f"{path.relative_to(root).as_posix()} are both named {name!r}"
            )
            raise ContentError(msg)
        seen[name] = path


async def load_data(
    config: PressConfig,
    providers: DataProviders,
    collector: BuildCollector | None = None,
) -> list[DataEntry]:
    """Load every data source concurrently; completes when all have loaded.

    Raises:
        ContentError: If two sources share a name, or a source cannot be read.

    """
    paths = [p for p in discover_data(config) if providers.for_path(p) is not None]
    _check_unique_names(paths, config.data_path)
    entries = await asyncio.gather(
        *(load_data_entry(p, providers, collector) for p in paths)
    )
    return list(entries)


class DataStore:
    """Data values keyed by name."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[DataEntry] = ()) -> None:
        self._entries: dict[str, DataEntry] = {}
        for entry in entries:
            self.set(entry)

    def set(self, entry: DataEntry) -> None:
        self._entries[entry.name] = entry

    def get(self, name: str) -> DataEntry | None:
        return self._entries.get(name)

    def remove(self, name: str) -> DataEntry | None:
        return self._entries.pop(name, None)

    def value(self, name: str, default: Any = None) -> Any:
        entry = self._entries.get(name)
        return default if entry is None else entry.value

    def replace_all(self, entries: Iterable[DataEntry]) -> None:
        self._entries.clear()
        for entry in entries:
            self.set(entry)

    def as_dict(self) -> dict[str, Any]:
        """Snapshot of ``name -> value``."""
        return {name: entry.value for name, entry in self._entries.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
