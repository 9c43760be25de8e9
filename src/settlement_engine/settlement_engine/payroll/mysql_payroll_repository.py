from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, PayrollStatus, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_int, db_cursor, fetchall, fetchone
from .model import Branch, LeaveApplication, ManualSalaryAdjustment, PayrollRecord, StaffProfile
from .repository import PayrollRepository

_RECORD_COLUMNS = """
    record_id, branch_id, staff_id, month, base_salary, unpaid_leave_days,
    leave_deductions, manual_adjustments_total, net_payable, status, paid_at, paid_by
"""


def _to_staff(r: dict) -> StaffProfile:
    return StaffProfile(
        staff_id=str(r["staff_id"]),
        branch_id=str(r["branch_id"]),
        name=r["name"],
        role=Role(r["role"]),
        base_salary=as_int(r.get("base_salary")),
    )


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        record_id=str(r["record_id"]),
        branch_id=str(r["branch_id"]),
        staff_id=str(r["staff_id"]),
        month=r["month"],
        base_salary=as_int(r.get("base_salary")),
        unpaid_leave_days=Decimal(str(r.get("unpaid_leave_days") or 0)),
        leave_deductions=as_int(r.get("leave_deductions")),
        manual_adjustments_total=as_int(r.get("manual_adjustments_total")) or 0,
        net_payable=as_int(r.get("net_payable")),
        status=PayrollStatus(r["status"]),
        paid_at=r.get("paid_at"),
        paid_by=r.get("paid_by"),
    )


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_branch(self, branch_id: str) -> Optional[Branch]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT branch_id, name, principal_id FROM branches WHERE branch_id=%s", (branch_id,))
            r = fetchone(cur)
            if not r:
                return None
            return Branch(branch_id=str(r["branch_id"]), name=r["name"], principal_id=r.get("principal_id"))

    def get_staff(self, staff_id: str) -> Optional[StaffProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT staff_id, branch_id, name, role, base_salary FROM staff WHERE staff_id=%s",
                (staff_id,),
            )
            r = fetchone(cur)
            return _to_staff(r) if r else None

    def list_staff(self, branch_id: str) -> Sequence[StaffProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT staff_id, branch_id, name, role, base_salary
                FROM staff
                WHERE branch_id=%s
                ORDER BY name, staff_id
                """,
                (branch_id,),
            )
            return [_to_staff(r) for r in fetchall(cur)]

    def list_leaves(self, applicant_id: str) -> Sequence[LeaveApplication]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT leave_id, applicant_id, status, start_date, end_date, is_half_day, leave_type
                FROM leave_applications
                WHERE applicant_id=%s
                ORDER BY start_date
                """,
                (applicant_id,),
            )
            return [
                LeaveApplication(
                    leave_id=str(r["leave_id"]),
                    applicant_id=str(r["applicant_id"]),
                    status=LeaveStatus(r["status"]),
                    start_date=as_date(r["start_date"]),
                    end_date=as_date(r["end_date"]),
                    is_half_day=bool(r["is_half_day"]),
                    leave_type=r.get("leave_type") or "Casual",
                )
                for r in fetchall(cur)
            ]

    def list_manual_adjustments(self, *, staff_id: str, month: str) -> Sequence[ManualSalaryAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT adjustment_id, branch_id, staff_id, month, amount, reason, adjusted_by, adjusted_at
                FROM manual_salary_adjustments
                WHERE staff_id=%s AND month=%s
                ORDER BY adjusted_at
                """,
                (staff_id, month),
            )
            return [
                ManualSalaryAdjustment(
                    adjustment_id=str(r["adjustment_id"]),
                    branch_id=str(r["branch_id"]),
                    staff_id=str(r["staff_id"]),
                    month=r["month"],
                    amount=as_int(r["amount"]),
                    reason=r["reason"],
                    adjusted_by=r["adjusted_by"],
                    adjusted_at=r["adjusted_at"],
                )
                for r in fetchall(cur)
            ]

    def add_manual_adjustment(self, adjustment: ManualSalaryAdjustment) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO manual_salary_adjustments(
                    adjustment_id, branch_id, staff_id, month, amount, reason, adjusted_by, adjusted_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    adjustment.adjustment_id,
                    adjustment.branch_id,
                    adjustment.staff_id,
                    adjustment.month,
                    int(adjustment.amount),
                    adjustment.reason,
                    adjustment.adjusted_by,
                    adjustment.adjusted_at,
                ),
            )

    def get_record(self, *, staff_id: str, month: str) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM payroll_records WHERE staff_id=%s AND month=%s",
                (staff_id, month),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_record_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_RECORD_COLUMNS} FROM payroll_records WHERE record_id=%s", (record_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(self, *, branch_id: str, month: str) -> Sequence[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM payroll_records
                WHERE branch_id=%s AND month=%s
                ORDER BY staff_id
                """,
                (branch_id, month),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save_record(self, record: PayrollRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT status FROM payroll_records WHERE staff_id=%s AND month=%s FOR UPDATE",
                (record.staff_id, record.month),
            )
            current = fetchone(cur)
            values = (
                record.base_salary,
                record.unpaid_leave_days,
                record.leave_deductions,
                int(record.manual_adjustments_total),
                record.net_payable,
                record.status.value,
            )
            if current is None:
                cur.execute(
                    """
                    INSERT INTO payroll_records(
                        record_id, branch_id, staff_id, month,
                        base_salary, unpaid_leave_days, leave_deductions,
                        manual_adjustments_total, net_payable, status
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (record.record_id, record.branch_id, record.staff_id, record.month) + values,
                )
                return True

            if current["status"] == PayrollStatus.PAID.value:
                return False

            cur.execute(
                """
                UPDATE payroll_records
                SET base_salary=%s, unpaid_leave_days=%s, leave_deductions=%s,
                    manual_adjustments_total=%s, net_payable=%s, status=%s
                WHERE staff_id=%s AND month=%s AND status<>%s
                """,
                values + (record.staff_id, record.month, PayrollStatus.PAID.value),
            )
            return True

    def mark_paid(self, *, record_id: str, paid_at: datetime, paid_by: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payroll_records
                SET status=%s, paid_at=%s, paid_by=%s
                WHERE record_id=%s AND status=%s
                """,
                (PayrollStatus.PAID.value, paid_at, paid_by, record_id, PayrollStatus.PENDING.value),
            )
            return cur.rowcount == 1
