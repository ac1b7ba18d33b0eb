"""
Frame and timer scheduling for the navigation state machine.

The navigator never touches a clock or an event loop directly; it goes
through a FrameScheduler. ManualScheduler gives tests a deterministic
fake clock, AsyncioScheduler drives the navigator from a running loop.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

FRAME_INTERVAL_MS = 16

Callback = Callable[[], None]


class FrameScheduler(ABC):
    """Abstract source of time, animation frames and timeouts."""

    @abstractmethod
    def now(self) -> float:
        """
        Current time.

        Returns:
            Milliseconds on a monotonic clock
        """
        pass

    @abstractmethod
    def schedule_frame(self, callback: Callback) -> Any:
        """
        Run ``callback`` at the next animation frame.

        Args:
            callback: Called with no arguments

        Returns:
            Handle accepted by ``cancel``
        """
        pass

    @abstractmethod
    def schedule_timeout(self, delay_ms: float, callback: Callback) -> Any:
        """
        Run ``callback`` once after ``delay_ms`` milliseconds.

        Returns:
            Handle accepted by ``cancel``
        """
        pass

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        """Cancel a pending frame or timeout. Unknown or fired handles are ignored."""
        pass


class ManualScheduler(FrameScheduler):
    """
    Deterministic scheduler driven by ``advance``.

    Frames fire on 16 ms boundaries; callbacks due at the same instant
    run in the order they were scheduled.

    Example:
        scheduler = ManualScheduler()
        navigator = ZoomNavigator(scheduler, sheets)
        navigator.on_wheel(500, 400)
        scheduler.advance(150)
    """

    def __init__(self, start_ms: float = 0.0):
        self._now = start_ms
        self._queue: List[Tuple[float, int, int]] = []
        self._callbacks: Dict[int, Callback] = {}
        self._sequence = itertools.count()
        self._handles = itertools.count(1)

    def now(self) -> float:
        return self._now

    def schedule_frame(self, callback: Callback) -> int:
        next_frame = (self._now // FRAME_INTERVAL_MS + 1) * FRAME_INTERVAL_MS
        return self._push(next_frame, callback)

    def schedule_timeout(self, delay_ms: float, callback: Callback) -> int:
        return self._push(self._now + max(delay_ms, 0), callback)

    def cancel(self, handle: Any) -> None:
        self._callbacks.pop(handle, None)

    @property
    def pending(self) -> int:
        """Number of callbacks still waiting to run."""
        return len(self._callbacks)

    def advance(self, ms: float) -> None:
        """Move the clock forward, running every callback that falls due."""
        target = self._now + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            callback = self._callbacks.pop(handle, None)
            if callback is None:
                continue
            self._now = max(self._now, due)
            callback()
        self._now = target

    def run_until_idle(self, limit_ms: float = 10_000) -> None:
        """Advance until nothing is pending or ``limit_ms`` has elapsed."""
        deadline = self._now + limit_ms
        while self._callbacks and self._now < deadline:
            self.advance(FRAME_INTERVAL_MS)

    def _push(self, due: float, callback: Callback) -> int:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        heapq.heappush(self._queue, (due, next(self._sequence), handle))
        return handle


class AsyncioScheduler(FrameScheduler):
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None,
                 frame_interval_ms: float = FRAME_INTERVAL_MS):
        self._loop = loop
        self.frame_interval_ms = frame_interval_ms

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000

    def schedule_frame(self, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(self.frame_interval_ms / 1000, callback)

    def schedule_timeout(self, delay_ms: float, callback: Callback) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay_ms, 0) / 1000, callback)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()
