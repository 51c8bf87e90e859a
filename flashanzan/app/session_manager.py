from __future__ import annotations

"""Session Manager: the flash anzan presentation state machine.

Owns mode, phase, interval and the current sequence. Front ends call the
command methods and read back state through properties or ``snapshot()``;
they re-render on the ``state_changed`` event. Auto mode is driven by a
single deferred advance held in ``_timer`` and rebuilt after every change.
"""

import math
from typing import Any, List, Optional, Tuple

from ..drills.sequence import RandIntSource, SEQUENCE_LENGTH, generate_numbers
from .events import EventBus
from .explain import trace as xtrace
from .scheduler import Scheduler
from .schema import MODES, Mode, Phase, SessionSnapshot

STATE_CHANGED = "state_changed"


class SessionManager:
    def __init__(
        self,
        scheduler: Scheduler,
        *,
        mode: Mode = "home",
        interval_s: float = 1.0,
        rng: Optional[RandIntSource] = None,
        events: Optional[EventBus] = None,
    ) -> None:
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        self.scheduler = scheduler
        self.events = events or EventBus()
        self._rng = rng
        self._mode: Mode = mode
        self._interval_s = self._check_interval(interval_s)
        self._phase: Phase = "idle"
        self._numbers: Tuple[int, ...] = ()
        self._index = 0
        self._current: Optional[int] = None
        self._answer: Optional[int] = None
        self._timer: Any = None

    # --- read-back ---

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def current_number(self) -> Optional[int]:
        return self._current

    @property
    def numbers(self) -> Tuple[int, ...]:
        return self._numbers

    @property
    def answer(self) -> Optional[int]:
        return self._answer

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            mode=self._mode,
            phase=self._phase,
            interval_s=self._interval_s,
            current_index=self._index,
            current_number=self._current,
            numbers=list(self._numbers),
            answer=self._answer,
            timer_pending=self.timer_pending,
        )

    # --- commands ---

    def start_game(self) -> bool:
        numbers = generate_numbers(self._rng)
        self._numbers = tuple(numbers)
        self._index = 0
        self._current = self._numbers[0]
        self._answer = None
        self._phase = "running"
        xtrace("game_started", {"mode": self._mode, "interval_s": self._interval_s})
        self._changed()
        return True

    def advance(self) -> bool:
        if self._phase != "running":
            return self._ignored("advance")
        if self._index < SEQUENCE_LENGTH - 1:
            self._index += 1
            self._current = self._numbers[self._index]
            xtrace("advanced", {"index": self._index})
        else:
            self._current = None
            self._phase = "finished"
            xtrace("finished", {"index": self._index})
        self._changed()
        return True

    def reveal_answer(self) -> bool:
        if self._phase != "finished":
            return self._ignored("reveal_answer")
        self._answer = sum(self._numbers)
        self._phase = "showingAnswer"
        xtrace("answer_revealed", {"answer": self._answer})
        self._changed()
        return True

    def inspect_numbers(self) -> bool:
        if self._phase != "showingAnswer":
            return self._ignored("inspect_numbers")
        self._phase = "showingNumbers"
        xtrace("numbers_inspected", {"numbers": list(self._numbers)})
        self._changed()
        return True

    def back_from_inspect(self) -> bool:
        if self._phase != "showingNumbers":
            return self._ignored("back_from_inspect")
        self._phase = "showingAnswer"
        xtrace("inspect_closed")
        self._changed()
        return True

    def reset(self) -> bool:
        self._clear()
        xtrace("reset")
        self._changed()
        return True

    def go_home(self) -> bool:
        self._clear()
        self._mode = "home"
        xtrace("went_home")
        self._changed()
        return True

    def set_mode(self, mode: Mode) -> bool:
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {mode}")
        if mode == self._mode:
            return False
        self._mode = mode
        xtrace("mode_changed", {"mode": mode})
        self._changed()
        return True

    def set_interval(self, seconds: float) -> bool:
        seconds = self._check_interval(seconds)
        if seconds == self._interval_s:
            return False
        self._interval_s = seconds
        xtrace("interval_changed", {"interval_s": seconds})
        self._changed()
        return True

    # --- internals ---

    @staticmethod
    def _check_interval(seconds: float) -> float:
        value = float(seconds)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Interval must be a finite number >= 0 seconds, got {seconds}")
        return value

    def _clear(self) -> None:
        self._numbers = ()
        self._index = 0
        self._current = None
        self._answer = None
        self._phase = "idle"

    def _ignored(self, command: str) -> bool:
        xtrace("command_ignored", {"command": command, "phase": self._phase})
        return False

    def _changed(self) -> None:
        self._reschedule()
        self.events.emit(STATE_CHANGED, self.snapshot())

    def _cancel_timer(self) -> None:
        if self._timer is None:
            return
        self.scheduler.cancel(self._timer)
        self._timer = None
        xtrace("timer_cancelled", {"index": self._index})

    def _reschedule(self) -> None:
        self._cancel_timer()
        if self._phase == "running" and self._mode == "auto":
            # The callback only acts if its handle is still the current one
            box: List[Any] = []
            handle = self.scheduler.call_later(self._interval_s, lambda: self._on_timer(box[0]))
            box.append(handle)
            self._timer = handle
            xtrace("timer_scheduled", {"index": self._index, "delay_s": self._interval_s})

    def _on_timer(self, handle: Any) -> None:
        if handle is not self._timer:
            return
        self._timer = None
        xtrace("timer_fired", {"index": self._index})
        self.advance()
