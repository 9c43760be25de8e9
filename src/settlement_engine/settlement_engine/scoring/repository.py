from __future__ import annotations

from typing import Protocol, Sequence

from ..core.enums import AttendanceMark


class ScoringRepository(Protocol):
    """Read-only access to academic and attendance data owned elsewhere."""

    def tenant_exists(self, tenant_id: str) -> bool:
        raise NotImplementedError

    def list_grade_scores(self, tenant_id: str) -> Sequence[float]:
        """Grade scores (0-100) of every student in the tenant."""

        raise NotImplementedError

    def list_attendance_marks(self, tenant_id: str) -> Sequence[AttendanceMark]:
        raise NotImplementedError
