"""Payroll record state machine.

    (none) ──compute──> SalaryNotSet | Pending
    SalaryNotSet <──recompute──> Pending        (follows salary configuration)
    Pending ──mark_paid──> Paid                 (terminal)

Callers apply these functions explicitly; nothing recomputes on read.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..common.ids import new_id
from ..core.enums import PayrollStatus
from ..core.exceptions import InvalidStateError
from .model import PayrollComputation, PayrollRecord


def recompute(
    existing: Optional[PayrollRecord],
    computation: PayrollComputation,
    *,
    branch_id: str,
    staff_id: str,
    month: str,
) -> PayrollRecord:
    """Next stored record for (staff_id, month) given a fresh computation.

    A Paid record is returned unchanged.
    """
    if existing is not None and existing.status == PayrollStatus.PAID:
        return existing

    status = PayrollStatus.PENDING if computation.salary_set else PayrollStatus.SALARY_NOT_SET
    return PayrollRecord(
        record_id=existing.record_id if existing else new_id("pay-rec"),
        branch_id=branch_id,
        staff_id=staff_id,
        month=month,
        base_salary=computation.base_salary,
        unpaid_leave_days=computation.unpaid_leave_days,
        leave_deductions=computation.leave_deductions,
        manual_adjustments_total=computation.manual_adjustments_total,
        net_payable=computation.net_payable,
        status=status,
    )


def mark_paid(record: PayrollRecord, *, paid_at: datetime, paid_by: str) -> PayrollRecord:
    if record.status != PayrollStatus.PENDING:
        raise InvalidStateError(f"Payroll record {record.record_id} is {record.status.value}, not Pending")
    return replace(record, status=PayrollStatus.PAID, paid_at=paid_at, paid_by=paid_by)
