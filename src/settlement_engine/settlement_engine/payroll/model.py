from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import LeaveStatus, PayrollStatus, Role


@dataclass(frozen=True)
class Branch:
    branch_id: str
    name: str
    principal_id: Optional[str] = None


@dataclass(frozen=True)
class StaffProfile:
    """Staff member; base_salary None means salary not configured (not zero)."""

    staff_id: str
    branch_id: str
    name: str
    role: Role
    base_salary: Optional[int]


@dataclass(frozen=True)
class LeaveApplication:
    leave_id: str
    applicant_id: str
    status: LeaveStatus
    start_date: date
    end_date: date
    is_half_day: bool = False
    leave_type: str = "Casual"


@dataclass(frozen=True)
class ManualSalaryAdjustment:
    adjustment_id: str
    branch_id: str
    staff_id: str
    month: str
    amount: int
    reason: str
    adjusted_by: str
    adjusted_at: datetime


@dataclass(frozen=True)
class PayrollComputation:
    """Output of the calculator for one staff member and month."""

    base_salary: Optional[int]
    unpaid_leave_days: Decimal
    leave_deductions: Optional[int]
    manual_adjustments_total: int
    net_payable: Optional[int]

    @property
    def salary_set(self) -> bool:
        return self.base_salary is not None


@dataclass(frozen=True)
class PayrollRecord:
    record_id: str
    branch_id: str
    staff_id: str
    month: str
    base_salary: Optional[int]
    unpaid_leave_days: Decimal
    leave_deductions: Optional[int]
    manual_adjustments_total: int
    net_payable: Optional[int]
    status: PayrollStatus
    paid_at: Optional[datetime] = None
    paid_by: Optional[str] = None


@dataclass(frozen=True)
class PayrollStaffDetails:
    """Payroll record joined with the staff member's display fields."""

    record: PayrollRecord
    staff_name: str
    staff_role: Role

    @property
    def record_id(self) -> str:
        return self.record.record_id

    @property
    def status(self) -> PayrollStatus:
        return self.record.status

    def to_dict(self) -> dict:
        r = self.record
        return {
            "id": r.record_id,
            "branch_id": r.branch_id,
            "staff_id": r.staff_id,
            "staff_name": self.staff_name,
            "staff_role": self.staff_role.value,
            "month": r.month,
            "base_salary": r.base_salary,
            "unpaid_leave_days": float(r.unpaid_leave_days),
            "leave_deductions": r.leave_deductions,
            "manual_adjustments_total": r.manual_adjustments_total,
            "net_payable": r.net_payable,
            "status": r.status.value,
            "paid_at": r.paid_at.isoformat() if r.paid_at else None,
            "paid_by": r.paid_by,
        }
