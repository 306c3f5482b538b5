"""Simulated progress shown while a model call is in flight.

The percentage is not derived from the request; it only gives feedback while
waiting for a response of unknown duration.
"""

import asyncio
from typing import Optional

from stylist import config

PROGRESS_CAP = 95


def next_progress(value: int) -> int:
    """Advance the simulated percentage, slowing down as it nears the cap."""
    if value >= PROGRESS_CAP:
        return PROGRESS_CAP
    increment = max(1, 10 - value // 10)
    return min(value + increment, PROGRESS_CAP)


class ProgressSimulator:
    def __init__(
        self,
        tick_seconds: float = config.PROGRESS_TICK_SECONDS,
        reset_seconds: float = config.PROGRESS_RESET_SECONDS,
    ) -> None:
        self.tick_seconds = tick_seconds
        self.reset_seconds = reset_seconds
        self.value = 0
        self._task: Optional[asyncio.Task] = None
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Restart the simulation from 0. Must be called from a running event loop."""
        self._cancel()
        self.value = 0
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Jump to 100 and schedule the reset back to 0."""
        self._cancel()
        self.value = 100
        self._reset_handle = asyncio.get_running_loop().call_later(
            self.reset_seconds, self._reset
        )

    async def _run(self) -> None:
        while self.value < PROGRESS_CAP:
            await asyncio.sleep(self.tick_seconds)
            self.value = next_progress(self.value)

    def _reset(self) -> None:
        self._reset_handle = None
        self.value = 0

    def _cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
