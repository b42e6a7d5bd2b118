"""Extension pipeline — ordered steps run one at a time before rendering.

Steps live in two segments. The main segment holds the early built-ins and
everything registered through the public API, in registration order. The tail
segment holds the late built-ins and always runs after the main segment, so a
``metadata()`` call made after setup still runs before URLs are prettified.

Each run works on a snapshot of both segments: a step registered while a run
is in flight takes effect on the next run. A step is awaited to completion
before the next starts; a step that never completes stalls the build.
"""

from __future__ import annotations

import inspect
import time
from typing import TYPE_CHECKING, Any

from press._errors import PipelineError

if TYPE_CHECKING:
    from press._types import Step
    from press.observability.collector import BuildCollector
    from press.pipeline.context import BuildContext


def step_name(step: Any) -> str:
    """Human-readable name of a step for errors and events."""
    name = getattr(step, "__name__", None)
    if isinstance(name, str):
        return name
    return type(step).__name__


class ExtensionPipeline:
    """Strictly sequential queue of async or sync steps.

    Args:
        collector: Receives a StepCompleted event per finished step.

    """

    __slots__ = ("_collector", "_steps", "_tail")

    def __init__(self, collector: BuildCollector | None = None) -> None:
        self._collector = collector
        self._steps: list[Step] = []
        self._tail: list[Step] = []

    def add(self, step: Step) -> None:
        """Append a step to the main segment."""
        self._steps.append(step)

    def add_late(self, step: Step) -> None:
        """Append a step to the tail segment."""
        self._tail.append(step)

    @property
    def steps(self) -> tuple[Step, ...]:
        """All steps in run order."""
        return (*self._steps, *self._tail)

    def __len__(self) -> int:
        return len(self._steps) + len(self._tail)

    async def run(self, context: BuildContext) -> None:
        """Run every step in order against ``context``.

        Raises:
            PipelineError: When a step raises; later steps do not run.

        """
        for step in self.steps:
            name = step_name(step)
            t0 = time.perf_counter()
            try:
                result = step(context)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                msg = f"Extension step {name!r} failed: {exc}"
                raise PipelineError(name, msg) from exc
            if self._collector is not None:
                self._collector.record_step(name, duration_ms=(time.perf_counter() - t0) * 1000)
