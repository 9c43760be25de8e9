from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..model import LeaveApplication, ManualSalaryAdjustment, PayrollComputation


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def unpaid_leave_days(
        self,
        leaves: Iterable[LeaveApplication],
        *,
        month_start: date,
        month_end: date,
    ) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def compute(
        self,
        *,
        base_salary: Optional[int],
        leaves: Iterable[LeaveApplication],
        adjustments: Iterable[ManualSalaryAdjustment],
        month_start: date,
        month_end: date,
    ) -> PayrollComputation:
        raise NotImplementedError
