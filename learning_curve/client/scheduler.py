"""Delayed callbacks with cancellation handles.

The tracker and the notifier never sleep; they ask a Scheduler to run a
callback later and keep the returned handle so they can cancel it.
AsyncioScheduler runs on the event loop; tests drive a manual fake.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
