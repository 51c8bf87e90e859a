from __future__ import annotations

"""Deferred-callback schedulers for the auto-advance timer.

The session never touches threads: a scheduler only has to run a callback
later and be able to cancel it. ``LoopScheduler`` is driven by an explicit
loop (terminal front end, tests with a fake clock); ``TkScheduler`` rides on
the Tk event loop.
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


@dataclass(eq=False)
class TimerHandle:
    due: float
    callback: Callable[[], None]
    seq: int
    cancelled: bool = False
    fired: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.fired)


class LoopScheduler:
    """Single-threaded scheduler with an injectable clock.

    Args:
        clock: Returns the current time in seconds. Defaults to
            ``time.monotonic``.
        sleep: Blocks for the given number of seconds. Defaults to
            ``time.sleep``. A fake clock pairs ``clock`` and ``sleep`` so that
            sleeping moves time forward.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self._clock = clock or time.monotonic
        self._sleep = sleep or time.sleep
        self._timers: List[TimerHandle] = []
        self._seq = 0

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle:
        self._seq += 1
        handle = TimerHandle(due=self._clock() + max(0.0, float(delay_s)), callback=callback, seq=self._seq)
        self._timers.append(handle)
        return handle

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is None:
            return
        handle.cancelled = True
        if handle in self._timers:
            self._timers.remove(handle)

    def pending(self) -> List[TimerHandle]:
        return sorted(self._timers, key=lambda h: (h.due, h.seq))

    def _fire(self, handle: TimerHandle) -> None:
        self._timers.remove(handle)
        handle.fired = True
        handle.callback()

    def _sleep_until(self, when: float) -> None:
        wait = when - self._clock()
        if wait > 0:
            self._sleep(wait)

    def run_once(self) -> bool:
        """Sleep until the earliest timer is due and fire it.

        Returns False when nothing is pending.
        """
        if not self._timers:
            return False
        handle = self.pending()[0]
        self._sleep_until(handle.due)
        self._fire(handle)
        return True

    def advance(self, seconds: float) -> int:
        """Let ``seconds`` elapse, firing every timer that falls due.

        Timers scheduled by callbacks during the window fire too if they are
        due before it ends. Returns the number of callbacks fired.
        """
        target = self._clock() + seconds
        fired = 0
        while self._timers:
            handle = self.pending()[0]
            if handle.due > target:
                break
            self._sleep_until(handle.due)
            self._fire(handle)
            fired += 1
        self._sleep_until(target)
        return fired


class TkScheduler:
    """Scheduler backed by a Tk widget's ``after``/``after_cancel``."""

    def __init__(self, widget: Any) -> None:
        self._widget = widget

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> Any:
        return self._widget.after(int(round(max(0.0, float(delay_s)) * 1000)), callback)

    def cancel(self, handle: Any) -> None:
        if handle is None:
            return
        # after_cancel tolerates ids that already fired
        self._widget.after_cancel(handle)
