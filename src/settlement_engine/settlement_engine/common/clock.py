from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def today(self) -> date:
        raise NotImplementedError

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Wall clock in local time."""

    def today(self) -> date:
        return date.today()

    def now(self) -> datetime:
        return datetime.now()
