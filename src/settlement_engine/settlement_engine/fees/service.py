from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.clock import Clock, SystemClock
from ..common.ids import new_id
from ..common.locks import KeyedLock
from ..common.validators import require_non_empty, require_positive_amount
from ..core.enums import AdjustmentType
from ..core.exceptions import (
    InconsistentLedgerError,
    InvalidStateError,
    NoFeeRecordError,
    NotFoundError,
    ValidationError,
)
from .model import (
    CollectionSummary,
    FeeAdjustment,
    FeeBalance,
    FeePayment,
    FeeRecord,
    ReconcileReport,
)
from .repository import FeeRepository

logger = logging.getLogger(__name__)


def signed_delta(adjustment_type: AdjustmentType, amount: int) -> int:
    """Concessions reduce the bill, charges increase it."""
    if adjustment_type == AdjustmentType.CONCESSION:
        return -abs(amount)
    return abs(amount)


class FeeLedgerService:
    """Per-student fee ledger: adjustments, payments, balances and reconciliation."""

    def __init__(
        self,
        fees: FeeRepository,
        *,
        clock: Optional[Clock] = None,
        locks: Optional[KeyedLock] = None,
    ):
        self._fees = fees
        self._clock = clock or SystemClock()
        self._locks = locks or KeyedLock()

    def _require_record(self, student_id: str) -> FeeRecord:
        record = self._fees.get_record(student_id)
        if not record:
            raise NoFeeRecordError(f"No fee record for student {student_id}")
        return record

    @staticmethod
    def _parse_type(value) -> AdjustmentType:
        try:
            return AdjustmentType(value)
        except ValueError:
            raise ValidationError(f"Unknown adjustment type: {value!r}")

    def apply_adjustment(
        self,
        *,
        student_id: str,
        adjustment_type: AdjustmentType | str,
        amount: int,
        reason: str,
        actor: str,
    ) -> FeeAdjustment:
        adjustment_type = self._parse_type(adjustment_type)
        amount = require_positive_amount(amount)
        reason = require_non_empty(reason, "Reason")
        actor = require_non_empty(actor, "Adjusted by")

        with self._locks.hold(student_id):
            self._require_record(student_id)
            adjustment = FeeAdjustment(
                adjustment_id=new_id("adj"),
                student_id=student_id,
                type=adjustment_type,
                amount=signed_delta(adjustment_type, amount),
                reason=reason,
                adjusted_by=actor,
                adjusted_on=self._clock.today(),
            )
            record = self._fees.add_adjustment(adjustment)

        logger.info(
            f"Applied {adjustment_type.value} {adjustment.amount} to student {student_id} "
            f"by {actor}; total now {record.total_amount}"
        )
        return adjustment

    def reverse_adjustment(self, *, adjustment_id: str, actor: str) -> FeeAdjustment:
        """Soft-reverse an adjustment; the total is re-derived from what stays active."""
        actor = require_non_empty(actor, "Reversed by")
        adjustment = self._fees.get_adjustment(adjustment_id)
        if not adjustment:
            raise NotFoundError(f"Fee adjustment {adjustment_id} not found")
        if not adjustment.is_active:
            raise InvalidStateError(f"Fee adjustment {adjustment_id} is already reversed")

        with self._locks.hold(adjustment.student_id):
            self._require_record(adjustment.student_id)
            reversed_adj = self._fees.reverse_adjustment(
                adjustment_id=adjustment_id,
                reversed_at=self._clock.now(),
                reversed_by=actor,
            )
        if reversed_adj is None:
            raise InvalidStateError(f"Fee adjustment {adjustment_id} is already reversed")

        logger.info(
            f"Reversed adjustment {adjustment_id} ({adjustment.amount}) "
            f"for student {adjustment.student_id} by {actor}"
        )
        return reversed_adj

    def record_payment(
        self,
        *,
        student_id: str,
        amount: int,
        paid_date: Optional[date] = None,
    ) -> FeePayment:
        amount = require_positive_amount(amount)

        with self._locks.hold(student_id):
            self._require_record(student_id)
            payment = FeePayment(
                payment_id=new_id("fee-pay"),
                student_id=student_id,
                amount=amount,
                paid_date=paid_date or self._clock.today(),
            )
            record = self._fees.add_payment(payment)

        if record.paid_amount > record.total_amount:
            logger.info(f"Student {student_id} is in credit by {record.paid_amount - record.total_amount}")
        logger.info(f"Recorded fee payment {payment.payment_id} of {amount} for student {student_id}")
        return payment

    def get_balance(self, student_id: str) -> FeeBalance:
        record = self._require_record(student_id)
        # Negative pending is a credit and is reported as such.
        return FeeBalance(
            student_id=student_id,
            total=record.total_amount,
            paid=record.paid_amount,
            pending=record.total_amount - record.paid_amount,
            previous_session_dues=record.previous_session_dues,
        )

    def reconcile(self, student_id: str, *, repair: bool = True) -> ReconcileReport:
        with self._locks.hold(student_id):
            self._require_record(student_id)
            report = self._fees.reconcile_total(student_id=student_id, repair=repair)

        if report.consistent:
            return report
        if not report.repaired:
            raise InconsistentLedgerError(
                f"Fee total for student {student_id} is {report.stored_total}, "
                f"adjustment history gives {report.expected_total}"
            )

        logger.warning(
            f"Ledger drift of {report.drift} for student {student_id}: "
            f"stored {report.stored_total}, corrected to {report.expected_total}"
        )
        return report

    def list_adjustments(self, student_id: str) -> Sequence[FeeAdjustment]:
        self._require_record(student_id)
        return sorted(self._fees.list_adjustments(student_id), key=lambda a: a.adjusted_on)

    def list_payments(self, student_id: str) -> Sequence[FeePayment]:
        self._require_record(student_id)
        return sorted(self._fees.list_payments(student_id), key=lambda p: p.paid_date)

    def collection_summary(self, branch_id: str) -> CollectionSummary:
        records = self._fees.list_records_for_branch(branch_id)
        return CollectionSummary(
            branch_id=branch_id,
            total_billed=sum(r.total_amount for r in records),
            total_paid=sum(r.paid_amount for r in records),
            defaulters=sum(1 for r in records if r.paid_amount < r.total_amount),
            records=len(records),
        )
