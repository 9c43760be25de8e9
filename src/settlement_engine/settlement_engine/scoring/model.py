from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class HealthScoreInput:
    """Per-tenant signals; academic and attendance in 0-100, collection rate in 0-1."""

    tenant_id: str
    avg_academic_score: float
    attendance_percentage: float
    fee_collection_rate: float


@dataclass(frozen=True)
class HealthScore:
    tenant_id: str
    score: float
    inputs: HealthScoreInput

    def to_dict(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "score": round(self.score, 1),
            "avg_academic_score": round(self.inputs.avg_academic_score, 1),
            "attendance_percentage": round(self.inputs.attendance_percentage, 1),
            "fee_collection_rate": round(self.inputs.fee_collection_rate, 4),
        }
