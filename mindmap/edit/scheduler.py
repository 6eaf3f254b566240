"""
Deferred-call scheduling for the single-click debounce.

The controller only needs `call_later(delay_s, callback)` returning a handle
with `cancel()`. asyncio's TimerHandle already has that shape; the NiceGUI
app wraps `ui.timer(..., once=True)` the same way.
"""

import asyncio
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class DeferredCall(Protocol):
    def cancel(self) -> None:
        ...


@runtime_checkable
class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> DeferredCall:
        """Run `callback` once after `delay_s` seconds unless cancelled."""
        ...


class AsyncioScheduler:
    """Schedules on the running (or given) asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop = None):
        self._loop = loop

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_s, callback)
