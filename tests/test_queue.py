"""Tests for press.pipeline.queue — serialized, coalesced builds."""

from __future__ import annotations

import asyncio

import pytest

from press._errors import BuildError
from press.pipeline.queue import BuildQueue


class _Recorder:
    """Build function that records start/end and can be held open."""

    def __init__(self) -> None:
        self.calls = 0
        self.running = 0
        self.max_running = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def __call__(self) -> None:
        self.calls += 1
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await self.gate.wait()
        finally:
            self.running -= 1


class TestBuildQueue:
    @pytest.mark.asyncio
    async def test_single_request_runs_once(self) -> None:
        build = _Recorder()
        queue = BuildQueue(build)
        await queue.request()
        assert build.calls == 1
        assert not queue.is_busy

    @pytest.mark.asyncio
    async def test_requests_during_build_coalesce(self) -> None:
        build = _Recorder()
        build.gate.clear()
        queue = BuildQueue(build)

        first = queue.request()
        await asyncio.sleep(0)
        assert build.calls == 1

        for _ in range(5):
            assert queue.request() is first
        assert queue.is_busy

        build.gate.set()
        await queue.wait_idle()
        assert build.calls == 2
        assert build.max_running == 1

    @pytest.mark.asyncio
    async def test_requests_before_start_coalesce(self) -> None:
        build = _Recorder()
        queue = BuildQueue(build)
        queue.request()
        queue.request()
        queue.request()
        await queue.wait_idle()
        assert build.calls == 1

    @pytest.mark.asyncio
    async def test_new_request_after_idle_starts_new_task(self) -> None:
        build = _Recorder()
        queue = BuildQueue(build)
        first = queue.request()
        await queue.wait_idle()
        second = queue.request()
        await queue.wait_idle()
        assert first is not second
        assert build.calls == 2

    @pytest.mark.asyncio
    async def test_failed_build_is_reported_not_raised(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        async def failing() -> None:
            raise BuildError("template exploded")

        queue = BuildQueue(failing)
        await queue.request()
        assert "Build failed: template exploded" in capsys.readouterr().err
        assert not queue.is_busy

    @pytest.mark.asyncio
    async def test_failure_does_not_drop_pending_build(self) -> None:
        calls = 0
        gate = asyncio.Event()

        async def flaky() -> None:
            nonlocal calls
            calls += 1
            if calls == 1:
                await gate.wait()
                raise BuildError("first pass failed")

        queue = BuildQueue(flaky)
        queue.request()
        await asyncio.sleep(0)
        queue.request()
        gate.set()
        await queue.wait_idle()
        assert calls == 2

    @pytest.mark.asyncio
    async def test_wait_idle_without_requests(self) -> None:
        await BuildQueue(_Recorder()).wait_idle()

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        build = _Recorder()
        build.gate.clear()
        queue = BuildQueue(build)
        task = queue.request()
        await asyncio.sleep(0)
        queue.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert not queue.is_busy
