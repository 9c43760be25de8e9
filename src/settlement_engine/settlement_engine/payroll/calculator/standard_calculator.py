from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ...common.datetime_utils import iter_days, overlap
from ...common.money import round_minor
from ...core.constants import FULL_DAY_LEAVE, HALF_DAY_LEAVE, PAYROLL_DAY_DIVISOR
from ...core.enums import LeaveStatus
from ..model import LeaveApplication, ManualSalaryAdjustment, PayrollComputation
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: base - round(unpaid_days * base / 30) + manual adjustments.

    Only approved leave counts; each day of the leave that falls inside the
    month counts 1 (or 0.5 for half-day leave). The daily rate always uses a
    30-day month.
    """

    def unpaid_leave_days(
        self,
        leaves: Iterable[LeaveApplication],
        *,
        month_start: date,
        month_end: date,
    ) -> Decimal:
        total = Decimal(0)
        for leave in leaves:
            if leave.status != LeaveStatus.APPROVED:
                continue
            window = overlap(leave.start_date, leave.end_date, month_start, month_end)
            if window is None:
                continue
            per_day = HALF_DAY_LEAVE if leave.is_half_day else FULL_DAY_LEAVE
            for _ in iter_days(*window):
                total += per_day
        return total

    def compute(
        self,
        *,
        base_salary: Optional[int],
        leaves: Iterable[LeaveApplication],
        adjustments: Iterable[ManualSalaryAdjustment],
        month_start: date,
        month_end: date,
    ) -> PayrollComputation:
        if base_salary is None:
            return PayrollComputation(
                base_salary=None,
                unpaid_leave_days=Decimal(0),
                leave_deductions=None,
                manual_adjustments_total=0,
                net_payable=None,
            )

        days = self.unpaid_leave_days(leaves, month_start=month_start, month_end=month_end)
        deductions = round_minor(days * Decimal(base_salary) / PAYROLL_DAY_DIVISOR)
        manual_total = sum(int(a.amount) for a in adjustments)
        return PayrollComputation(
            base_salary=base_salary,
            unpaid_leave_days=days,
            leave_deductions=deductions,
            manual_adjustments_total=manual_total,
            net_payable=round_minor(base_salary - deductions + manual_total),
        )
