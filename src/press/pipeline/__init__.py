"""Pipeline layer — build context, extension steps and build scheduling."""

from press.pipeline.context import BuildContext
from press.pipeline.extensions import ExtensionPipeline, step_name
from press.pipeline.queue import BuildQueue

__all__ = [
    "BuildContext",
    "BuildQueue",
    "ExtensionPipeline",
    "step_name",
]
