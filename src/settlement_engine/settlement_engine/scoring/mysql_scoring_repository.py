from __future__ import annotations

from typing import Sequence

from ..core.enums import AttendanceMark
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .repository import ScoringRepository


class MySQLScoringRepository(ScoringRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def tenant_exists(self, tenant_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM branches WHERE branch_id=%s", (tenant_id,))
            return fetchone(cur) is not None

    def list_grade_scores(self, tenant_id: str) -> Sequence[float]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT g.score
                FROM grades g
                JOIN students s ON s.student_id = g.student_id
                WHERE s.branch_id=%s
                """,
                (tenant_id,),
            )
            return [float(r["score"]) for r in fetchall(cur)]

    def list_attendance_marks(self, tenant_id: str) -> Sequence[AttendanceMark]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.status
                FROM student_attendance a
                JOIN students s ON s.student_id = a.student_id
                WHERE s.branch_id=%s
                """,
                (tenant_id,),
            )
            return [AttendanceMark(r["status"]) for r in fetchall(cur)]
