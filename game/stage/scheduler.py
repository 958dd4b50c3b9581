"""
Frame schedulers. A scheduler calls back once per frame with the frame
timestamp in seconds; a session re-schedules itself after every frame.
"""

from __future__ import annotations

import itertools
from typing import Callable, Dict, Protocol

FrameCallback = Callable[[float], None]


class FrameScheduler(Protocol):
    def schedule(self, callback: FrameCallback) -> int: ...

    def unschedule(self, token: int) -> None: ...


class ManualScheduler:
    """
    Headless scheduler with its own clock.

    ``advance(seconds)`` moves the clock forward and runs the callbacks that
    were pending at that moment; callbacks scheduled while running wait for
    the next ``advance``.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._pending: Dict[int, FrameCallback] = {}
        self._tokens = itertools.count(1)

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule(self, callback: FrameCallback) -> int:
        token = next(self._tokens)
        self._pending[token] = callback
        return token

    def unschedule(self, token: int) -> None:
        self._pending.pop(token, None)

    def advance(self, seconds: float) -> int:
        """Advance the clock and fire due frames. Returns how many ran."""
        self._now += seconds
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback(self._now)
        return len(due)

    def run_frames(self, n: int, frame_dt: float) -> int:
        return sum(self.advance(frame_dt) for _ in range(n))
