"""Tests for press package exports and metadata."""

import pytest

import press


class TestPackageMetadata:
    """Package-level exports and metadata."""

    def test_version_string(self) -> None:
        assert isinstance(press.__version__, str)
        assert "0.1.0" in press.__version__

    def test_all_exports_resolvable(self) -> None:
        for name in press.__all__:
            getattr(press, name)

    def test_lazy_exports_are_the_real_objects(self) -> None:
        from press.app import Press, create_press
        from press.config import PressConfig
        from press.config_loader import load_config

        assert press.Press is Press
        assert press.create_press is create_press
        assert press.PressConfig is PressConfig
        assert press.load_config is load_config

    def test_invalid_attribute_raises(self) -> None:
        with pytest.raises(AttributeError, match="no attribute"):
            press.nonexistent_thing  # type: ignore[attr-defined]  # noqa: B018
