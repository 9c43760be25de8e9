from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AdjustmentType
from ..core.exceptions import NoFeeRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_int, db_cursor, fetchall, fetchone
from .model import FeeAdjustment, FeePayment, FeeRecord, ReconcileReport
from .repository import FeeRepository

_RECORD_COLUMNS = """
    student_id, branch_id, template_amount, total_amount, paid_amount,
    due_date, previous_session_dues
"""

_ADJUSTMENT_COLUMNS = """
    adjustment_id, student_id, type, amount, reason, adjusted_by,
    adjusted_on, reversed_at, reversed_by
"""


def _to_record(r: dict) -> FeeRecord:
    return FeeRecord(
        student_id=str(r["student_id"]),
        branch_id=str(r["branch_id"]),
        template_amount=as_int(r["template_amount"]),
        total_amount=as_int(r["total_amount"]),
        paid_amount=as_int(r["paid_amount"]),
        due_date=as_date(r.get("due_date")),
        previous_session_dues=as_int(r.get("previous_session_dues")) or 0,
    )


def _to_adjustment(r: dict) -> FeeAdjustment:
    return FeeAdjustment(
        adjustment_id=str(r["adjustment_id"]),
        student_id=str(r["student_id"]),
        type=AdjustmentType(r["type"]),
        amount=as_int(r["amount"]),
        reason=r["reason"],
        adjusted_by=r["adjusted_by"],
        adjusted_on=as_date(r["adjusted_on"]),
        reversed_at=r.get("reversed_at"),
        reversed_by=r.get("reversed_by"),
    )


class MySQLFeeRepository(FeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _lock_record(cur, student_id: str) -> FeeRecord:
        cur.execute(
            f"SELECT {_RECORD_COLUMNS} FROM fee_records WHERE student_id=%s FOR UPDATE",
            (student_id,),
        )
        r = fetchone(cur)
        if not r:
            raise NoFeeRecordError(f"No fee record for student {student_id}")
        return _to_record(r)

    def get_record(self, student_id: str) -> Optional[FeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM fee_records WHERE student_id=%s", (student_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records_for_branch(self, branch_id: str) -> Sequence[FeeRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM fee_records WHERE branch_id=%s ORDER BY student_id",
                (branch_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_adjustment(self, adjustment_id: str) -> Optional[FeeAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_ADJUSTMENT_COLUMNS} FROM fee_adjustments WHERE adjustment_id=%s",
                (adjustment_id,),
            )
            r = fetchone(cur)
            return _to_adjustment(r) if r else None

    def list_adjustments(self, student_id: str) -> Sequence[FeeAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_ADJUSTMENT_COLUMNS}
                FROM fee_adjustments
                WHERE student_id=%s
                ORDER BY adjusted_on ASC, adjustment_id ASC
                """,
                (student_id,),
            )
            return [_to_adjustment(r) for r in fetchall(cur)]

    def list_payments(self, student_id: str) -> Sequence[FeePayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payment_id, student_id, amount, paid_date
                FROM fee_payments
                WHERE student_id=%s
                ORDER BY paid_date ASC, payment_id ASC
                """,
                (student_id,),
            )
            return [
                FeePayment(
                    payment_id=str(r["payment_id"]),
                    student_id=str(r["student_id"]),
                    amount=as_int(r["amount"]),
                    paid_date=as_date(r["paid_date"]),
                )
                for r in fetchall(cur)
            ]

    def add_adjustment(self, adjustment: FeeAdjustment) -> FeeRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            record = self._lock_record(cur, adjustment.student_id)
            cur.execute(
                """
                INSERT INTO fee_adjustments(
                    adjustment_id, student_id, type, amount, reason, adjusted_by, adjusted_on
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    adjustment.adjustment_id,
                    adjustment.student_id,
                    adjustment.type.value,
                    int(adjustment.amount),
                    adjustment.reason,
                    adjustment.adjusted_by,
                    adjustment.adjusted_on,
                ),
            )
            new_total = record.total_amount + int(adjustment.amount)
            cur.execute(
                "UPDATE fee_records SET total_amount=%s WHERE student_id=%s",
                (new_total, adjustment.student_id),
            )
            return replace(record, total_amount=new_total)

    @staticmethod
    def _active_delta(cur, student_id: str) -> int:
        cur.execute(
            """
            SELECT COALESCE(SUM(amount), 0) AS total
            FROM fee_adjustments
            WHERE student_id=%s AND reversed_at IS NULL
            """,
            (student_id,),
        )
        r = fetchone(cur)
        return as_int(r["total"]) if r else 0

    def reverse_adjustment(
        self,
        *,
        adjustment_id: str,
        reversed_at: datetime,
        reversed_by: str,
    ) -> Optional[FeeAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT student_id FROM fee_adjustments WHERE adjustment_id=%s", (adjustment_id,))
            r = fetchone(cur)
            if not r:
                return None

            # fee_records first, same lock order as add_adjustment.
            record = self._lock_record(cur, str(r["student_id"]))
            cur.execute(
                """
                UPDATE fee_adjustments
                SET reversed_at=%s, reversed_by=%s
                WHERE adjustment_id=%s AND reversed_at IS NULL
                """,
                (reversed_at, reversed_by, adjustment_id),
            )
            if cur.rowcount != 1:
                return None

            new_total = record.template_amount + self._active_delta(cur, record.student_id)
            cur.execute(
                "UPDATE fee_records SET total_amount=%s WHERE student_id=%s",
                (new_total, record.student_id),
            )
            cur.execute(
                f"SELECT {_ADJUSTMENT_COLUMNS} FROM fee_adjustments WHERE adjustment_id=%s",
                (adjustment_id,),
            )
            return _to_adjustment(fetchone(cur))

    def add_payment(self, payment: FeePayment) -> FeeRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            record = self._lock_record(cur, payment.student_id)
            cur.execute(
                """
                INSERT INTO fee_payments(payment_id, student_id, amount, paid_date)
                VALUES(%s,%s,%s,%s)
                """,
                (payment.payment_id, payment.student_id, int(payment.amount), payment.paid_date),
            )
            cur.execute(
                "UPDATE fee_records SET paid_amount = paid_amount + %s WHERE student_id=%s",
                (int(payment.amount), payment.student_id),
            )
            return replace(record, paid_amount=record.paid_amount + int(payment.amount))

    def reconcile_total(self, *, student_id: str, repair: bool) -> ReconcileReport:
        with db_cursor(self._conn_factory) as (_, cur):
            record = self._lock_record(cur, student_id)
            expected = record.template_amount + self._active_delta(cur, student_id)
            report = ReconcileReport(
                student_id=student_id,
                stored_total=record.total_amount,
                expected_total=expected,
            )
            if report.consistent or not repair:
                return report

            cur.execute(
                "UPDATE fee_records SET total_amount=%s WHERE student_id=%s",
                (expected, student_id),
            )
            return replace(report, repaired=True)
