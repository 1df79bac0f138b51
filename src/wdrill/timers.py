"""Schedulers used by the engine for its delayed transitions.

The engine never sleeps. It asks a scheduler to run a callback later and keeps
the returned handle so the callback can be cancelled when the session goes away.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple


class TimerHandle(ABC):
    @abstractmethod
    def cancel(self) -> None:
        pass


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        pass


class _AsyncioHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioScheduler(Scheduler):
    """Runs callbacks on an asyncio event loop (the one serving HTTP requests)."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioHandle(loop.call_later(delay_ms / 1000, callback))


class _ManualHandle(TimerHandle):
    def __init__(self):
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Virtual clock: callbacks only run when the owner advances time."""

    def __init__(self):
        self.now_ms = 0
        self._seq = itertools.count()
        self._queue: List[Tuple[int, int, _ManualHandle, Callable[[], None]]] = []

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle()
        heapq.heappush(
            self._queue, (self.now_ms + delay_ms, next(self._seq), handle, callback)
        )
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h, _ in self._queue if not h.cancelled)

    def advance(self, delay_ms: int) -> int:
        """Move the clock forward, running every callback that falls due. Returns how many ran."""
        target = self.now_ms + delay_ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback = heapq.heappop(self._queue)
            self.now_ms = due
            if handle.cancelled:
                continue
            callback()
            ran += 1
        self.now_ms = target
        return ran

    def run_all(self) -> int:
        """Run everything queued, including callbacks scheduled by those callbacks."""
        ran = 0
        while self._queue:
            ran += self.advance(self._queue[0][0] - self.now_ms)
        return ran
