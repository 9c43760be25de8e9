from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles known to payroll."""

    PRINCIPAL = "Principal"
    TEACHER = "Teacher"
    REGISTRAR = "Registrar"
    LIBRARIAN = "Librarian"
    SUPPORT_STAFF = "SupportStaff"


PAYROLL_ROLES = frozenset({Role.TEACHER, Role.REGISTRAR, Role.LIBRARIAN, Role.SUPPORT_STAFF})


class AdjustmentType(str, Enum):
    CONCESSION = "concession"
    CHARGE = "charge"


class LeaveStatus(str, Enum):
    """Approval state of a leave application (owned by the approval workflow)."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class PayrollStatus(str, Enum):
    SALARY_NOT_SET = "Salary Not Set"
    PENDING = "Pending"
    PAID = "Paid"


class BillingCycle(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    HALF_YEARLY = "half_yearly"
    YEARLY = "yearly"

    @property
    def months(self) -> int:
        return _CYCLE_MONTHS[self]


_CYCLE_MONTHS = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.HALF_YEARLY: 6,
    BillingCycle.YEARLY: 12,
}


class AttendanceMark(str, Enum):
    """Student attendance marks read for the health score."""

    PRESENT = "Present"
    ABSENT = "Absent"
    TARDY = "Tardy"


PRESENT_MARKS = frozenset({AttendanceMark.PRESENT, AttendanceMark.TARDY})
