# clock.py
from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date: ...


class SystemClock:
    """Текущая дата по системным часам."""

    def today(self) -> date:
        return datetime.now().date()


class FixedClock:
    """Часы, которые всегда показывают одну и ту же дату (демо, тесты)."""

    def __init__(self, fixed: date) -> None:
        self._fixed = fixed

    def today(self) -> date:
        return self._fixed

    def set(self, value: date) -> None:
        self._fixed = value
