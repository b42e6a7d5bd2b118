"""Tests for press.pipeline.extensions — sequential extension steps."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from press._errors import PipelineError
from press.config import PressConfig
from press.observability.collector import BuildCollector
from press.observability.events import StepCompleted
from press.pipeline.context import BuildContext
from press.pipeline.extensions import ExtensionPipeline, step_name


@pytest.fixture
def context(tmp_path: Path) -> BuildContext:
    return BuildContext.create(PressConfig(root=tmp_path))


# ---------------------------------------------------------------------------
# step_name
# ---------------------------------------------------------------------------


class TestStepName:
    def test_function(self) -> None:
        def pretty(context: BuildContext) -> None:
            pass

        assert step_name(pretty) == "pretty"

    def test_callable_object(self) -> None:
        class Sitemap:
            def __call__(self, context: BuildContext) -> None:
                pass

        assert step_name(Sitemap()) == "Sitemap"


# ---------------------------------------------------------------------------
# ExtensionPipeline
# ---------------------------------------------------------------------------


class TestExtensionPipeline:
    @pytest.mark.asyncio
    async def test_runs_in_registration_order(self, context: BuildContext) -> None:
        order: list[str] = []
        pipeline = ExtensionPipeline()
        pipeline.add(lambda ctx: order.append("a"))
        pipeline.add(lambda ctx: order.append("b"))
        pipeline.add(lambda ctx: order.append("c"))
        await pipeline.run(context)
        assert order == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_async_steps_run_one_at_a_time(self, context: BuildContext) -> None:
        """Each step starts only after the previous one has finished."""
        log: list[str] = []

        def make(name: str, delay: float):
            async def step(ctx: BuildContext) -> None:
                log.append(f"start {name}")
                await asyncio.sleep(delay)
                log.append(f"end {name}")

            return step

        pipeline = ExtensionPipeline()
        pipeline.add(make("slow", 0.02))
        pipeline.add(make("fast", 0))
        await pipeline.run(context)
        assert log == ["start slow", "end slow", "start fast", "end fast"]

    @pytest.mark.asyncio
    async def test_steps_share_context(self, context: BuildContext) -> None:
        pipeline = ExtensionPipeline()
        pipeline.add(lambda ctx: ctx.globals.update(count=1))
        pipeline.add(lambda ctx: ctx.globals.update(count=ctx.globals["count"] + 1))
        await pipeline.run(context)
        assert context.globals["count"] == 2

    @pytest.mark.asyncio
    async def test_failure_aborts_remaining_steps(self, context: BuildContext) -> None:
        ran: list[str] = []

        def explode(ctx: BuildContext) -> None:
            raise RuntimeError("boom")

        pipeline = ExtensionPipeline()
        pipeline.add(lambda ctx: ran.append("first"))
        pipeline.add(explode)
        pipeline.add(lambda ctx: ran.append("never"))

        with pytest.raises(PipelineError, match="boom") as exc_info:
            await pipeline.run(context)
        assert exc_info.value.step == "explode"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert ran == ["first"]

    @pytest.mark.asyncio
    async def test_async_failure(self, context: BuildContext) -> None:
        async def fetch(ctx: BuildContext) -> None:
            raise ValueError("offline")

        pipeline = ExtensionPipeline()
        pipeline.add(fetch)
        with pytest.raises(PipelineError) as exc_info:
            await pipeline.run(context)
        assert exc_info.value.step == "fetch"

    @pytest.mark.asyncio
    async def test_late_segment_runs_last(self, context: BuildContext) -> None:
        order: list[str] = []
        pipeline = ExtensionPipeline()
        pipeline.add(lambda ctx: order.append("early"))
        pipeline.add_late(lambda ctx: order.append("late"))
        pipeline.add(lambda ctx: order.append("user"))
        await pipeline.run(context)
        assert order == ["early", "user", "late"]
        assert len(pipeline) == 3

    @pytest.mark.asyncio
    async def test_steps_added_during_run_wait_for_next_run(self, context: BuildContext) -> None:
        ran: list[str] = []
        pipeline = ExtensionPipeline()

        def registers(ctx: BuildContext) -> None:
            ran.append("registers")
            pipeline.add(lambda c: ran.append("added"))

        pipeline.add(registers)
        await pipeline.run(context)
        assert ran == ["registers"]

        ran.clear()
        await pipeline.run(context)
        assert ran == ["registers", "added"]

    @pytest.mark.asyncio
    async def test_records_step_events(self, context: BuildContext) -> None:
        collector = BuildCollector()

        def tagger(ctx: BuildContext) -> None:
            pass

        pipeline = ExtensionPipeline(collector)
        pipeline.add(tagger)
        await pipeline.run(context)
        events = collector.log.query(event_type=StepCompleted)
        assert [e.step for e in events] == ["tagger"]

    @pytest.mark.asyncio
    async def test_empty_pipeline(self, context: BuildContext) -> None:
        await ExtensionPipeline().run(context)
