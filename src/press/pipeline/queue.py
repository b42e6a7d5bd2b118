"""Build queue — serializes and coalesces reactively triggered builds.

Watcher handlers request builds instead of running them. At most one build
runs at a time; any number of requests that arrive while a build is running
collapse into a single follow-up build, which starts after the running one
finishes and therefore sees every mutation made in between.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Awaitable, Callable

from press._errors import PressError


class BuildQueue:
    """Runs ``build`` on request, one pass at a time.

    Args:
        build: Coroutine function performing one full build pass.

    """

    def __init__(self, build: Callable[[], Awaitable[object]]) -> None:
        self._build = build
        self._pending = False
        self._task: asyncio.Task[None] | None = None

    @property
    def is_busy(self) -> bool:
        """Whether a build is running or waiting to run."""
        return self._task is not None and not self._task.done()

    def request(self) -> asyncio.Task[None]:
        """Ask for a build; returns the task that will perform it."""
        self._pending = True
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._drain())
        return self._task

    async def wait_idle(self) -> None:
        """Wait until no build is running or pending."""
        while self._task is not None and not self._task.done():
            await self._task

    def cancel(self) -> None:
        """Cancel the queue task; a build in flight is interrupted."""
        self._pending = False
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def _drain(self) -> None:
        while self._pending:
            self._pending = False
            try:
                await self._build()
            except PressError as exc:
                # Reactive builds have no caller to raise to
                print(f"  Build failed: {exc}", file=sys.stderr)
