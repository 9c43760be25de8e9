from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AdjustmentType


@dataclass(frozen=True)
class FeeRecord:
    """Per-student fee balance for the current session.

    total_amount is derived: template_amount plus the deltas of all active adjustments.
    """

    student_id: str
    branch_id: str
    template_amount: int
    total_amount: int
    paid_amount: int
    due_date: Optional[date] = None
    previous_session_dues: int = 0


@dataclass(frozen=True)
class FeeAdjustment:
    """Concession (negative delta) or charge (positive delta) against a fee record."""

    adjustment_id: str
    student_id: str
    type: AdjustmentType
    amount: int
    reason: str
    adjusted_by: str
    adjusted_on: date
    reversed_at: Optional[datetime] = None
    reversed_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.reversed_at is None


@dataclass(frozen=True)
class FeePayment:
    payment_id: str
    student_id: str
    amount: int
    paid_date: date


@dataclass(frozen=True)
class FeeBalance:
    student_id: str
    total: int
    paid: int
    pending: int
    previous_session_dues: int = 0


@dataclass(frozen=True)
class ReconcileReport:
    student_id: str
    stored_total: int
    expected_total: int
    repaired: bool = False

    @property
    def drift(self) -> int:
        return self.stored_total - self.expected_total

    @property
    def consistent(self) -> bool:
        return self.drift == 0


@dataclass(frozen=True)
class CollectionSummary:
    """Branch-wide fee totals read by dashboards and the health score."""

    branch_id: str
    total_billed: int
    total_paid: int
    defaulters: int
    records: int
