"""Press error hierarchy.

All press-specific errors inherit from PressError for easy catching.
"""


class PressError(Exception):
    """Base error for all press operations."""


class ConfigError(PressError):
    """Invalid or missing configuration."""


class ContentError(PressError):
    """A page or data source could not be read or its front matter parsed."""


class TemplateError(PressError):
    """A template name could not be resolved against the page tree."""


class PipelineError(PressError):
    """An extension step failed, aborting the rest of the pipeline.

    Attributes:
        step: Name of the step that raised.

    """

    def __init__(self, step: str, message: str) -> None:
        super().__init__(message)
        self.step = step


class BuildError(PressError):
    """Rendering or writing pages failed."""


class DataError(PressError):
    """A data source could not be parsed.

    Raised by data providers; the loader soft-fails it to an empty value.
    """
