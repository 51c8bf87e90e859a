from __future__ import annotations

"""Pydantic model for the read-back view of a drill session."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..drills.sequence import MAX_ABS, SEQUENCE_LENGTH

Mode = Literal["home", "auto", "manual"]
Phase = Literal["idle", "running", "finished", "showingAnswer", "showingNumbers"]

MODES = ("home", "auto", "manual")


class SessionSnapshot(BaseModel):
    mode: Mode
    phase: Phase
    interval_s: float = Field(ge=0)
    current_index: int = Field(default=0, ge=0, le=SEQUENCE_LENGTH - 1)
    current_number: Optional[int] = Field(default=None, ge=-MAX_ABS, le=MAX_ABS)
    numbers: List[int] = Field(default_factory=list)
    answer: Optional[int] = None
    timer_pending: bool = False

    @model_validator(mode="after")
    def _check_numbers(self) -> "SessionSnapshot":
        if self.numbers and len(self.numbers) != SEQUENCE_LENGTH:
            raise ValueError(f"numbers must hold {SEQUENCE_LENGTH} values, got {len(self.numbers)}")
        if self.answer is not None and self.answer != sum(self.numbers):
            raise ValueError("answer does not match the sum of numbers")
        return self

    @property
    def total(self) -> int:
        return len(self.numbers) or SEQUENCE_LENGTH
