"""Tests for press._errors."""

from press._errors import (
    BuildError,
    ConfigError,
    ContentError,
    DataError,
    PipelineError,
    PressError,
    TemplateError,
)


class TestErrorHierarchy:
    """All press errors inherit from PressError."""

    def test_press_error_is_exception(self) -> None:
        assert issubclass(PressError, Exception)

    def test_config_error_inherits(self) -> None:
        assert issubclass(ConfigError, PressError)

    def test_content_error_inherits(self) -> None:
        assert issubclass(ContentError, PressError)

    def test_template_error_inherits(self) -> None:
        assert issubclass(TemplateError, PressError)

    def test_build_error_inherits(self) -> None:
        assert issubclass(BuildError, PressError)

    def test_data_error_inherits(self) -> None:
        assert issubclass(DataError, PressError)

    def test_catch_all_press_errors(self) -> None:
        """All specific errors are catchable via PressError."""
        for error_cls in (ConfigError, ContentError, TemplateError, BuildError, DataError):
            try:
                raise error_cls("test")
            except PressError:
                pass


class TestPipelineError:
    def test_carries_step_name(self) -> None:
        exc = PipelineError("pretty_urls", "Extension step 'pretty_urls' failed: boom")
        assert exc.step == "pretty_urls"
        assert "boom" in str(exc)

    def test_inherits(self) -> None:
        assert issubclass(PipelineError, PressError)
