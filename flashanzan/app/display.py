from __future__ import annotations

"""Text formatting shared by the terminal and Tkinter front ends."""

from typing import Iterable, List

from ..drills.sequence import SEQUENCE_LENGTH
from .schema import SessionSnapshot


def format_signed(n: int) -> str:
    return f"+{n}" if n > 0 else str(n)


def format_progress(index: int, total: int = SEQUENCE_LENGTH) -> str:
    return f"Number {index + 1} of {total}"


def format_interval(seconds: float) -> str:
    return f"{round(float(seconds), 1)}s"


def format_numbers(numbers: Iterable[int]) -> str:
    """One line per value, e.g. ``+12 (#1)``."""
    lines: List[str] = []
    for idx, num in enumerate(numbers):
        lines.append(f"{format_signed(num)} (#{idx + 1})")
    return "\n".join(lines)


def format_summary(snapshot: SessionSnapshot) -> str:
    if snapshot.answer is None:
        return "Answer not revealed yet."
    return f"The answer is: {snapshot.answer}"


def screen_for(snapshot: SessionSnapshot) -> str:
    """Pick the screen that matches a snapshot."""
    if snapshot.mode == "home":
        return "home"
    if snapshot.phase == "idle":
        return "setup"
    return snapshot.phase
