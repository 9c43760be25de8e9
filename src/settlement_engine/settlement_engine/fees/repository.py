from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import FeeAdjustment, FeePayment, FeeRecord, ReconcileReport


class FeeRepository(Protocol):
    def get_record(self, student_id: str) -> Optional[FeeRecord]:
        raise NotImplementedError

    def list_records_for_branch(self, branch_id: str) -> Sequence[FeeRecord]:
        raise NotImplementedError

    def get_adjustment(self, adjustment_id: str) -> Optional[FeeAdjustment]:
        raise NotImplementedError

    def list_adjustments(self, student_id: str) -> Sequence[FeeAdjustment]:
        """All adjustments for the student (reversed ones included), oldest first."""

        raise NotImplementedError

    def list_payments(self, student_id: str) -> Sequence[FeePayment]:
        raise NotImplementedError

    def add_adjustment(self, adjustment: FeeAdjustment) -> FeeRecord:
        """Insert the adjustment and add its delta to total_amount in one transaction.

        Returns the updated fee record.
        """

        raise NotImplementedError

    def reverse_adjustment(
        self,
        *,
        adjustment_id: str,
        reversed_at: datetime,
        reversed_by: str,
    ) -> Optional[FeeAdjustment]:
        """Stamp the adjustment reversed and re-derive total_amount in one transaction.

        The new total is template_amount plus the active deltas read under the
        fee record lock. Returns None when the adjustment was already reversed.
        """

        raise NotImplementedError

    def add_payment(self, payment: FeePayment) -> FeeRecord:
        """Append the payment and add its amount to paid_amount in one transaction."""

        raise NotImplementedError

    def reconcile_total(self, *, student_id: str, repair: bool) -> ReconcileReport:
        """Compare total_amount with template_amount plus active deltas under the record lock.

        With repair, a drifted total is overwritten in the same transaction and
        the report is marked repaired.
        """

        raise NotImplementedError
