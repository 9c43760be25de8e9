from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from ..core.constants import (
    ACADEMIC_WEIGHT,
    ATTENDANCE_WEIGHT,
    COLLECTION_WEIGHT,
    MAX_HEALTH_SCORE,
    MIN_HEALTH_SCORE,
)
from ..core.enums import PRESENT_MARKS
from ..core.exceptions import NotFoundError
from ..fees.service import FeeLedgerService
from .model import HealthScore, HealthScoreInput
from .repository import ScoringRepository

logger = logging.getLogger(__name__)


def composite_score(inputs: HealthScoreInput) -> float:
    """0.5 academic + 0.3 attendance + 0.2 collection, clamped to [0, 100]."""
    raw = (
        ACADEMIC_WEIGHT * Decimal(str(inputs.avg_academic_score))
        + ATTENDANCE_WEIGHT * Decimal(str(inputs.attendance_percentage))
        + COLLECTION_WEIGHT * Decimal(str(inputs.fee_collection_rate)) * 100
    )
    return min(MAX_HEALTH_SCORE, max(MIN_HEALTH_SCORE, float(raw)))


class HealthScoreService:
    """Composite tenant health from grades, attendance and fee collection.

    Every call recomputes from the repositories; nothing is cached.
    """

    def __init__(self, scoring: ScoringRepository, fees: FeeLedgerService):
        self._scoring = scoring
        self._fees = fees

    def compute_inputs(self, tenant_id: str) -> HealthScoreInput:
        if not self._scoring.tenant_exists(tenant_id):
            raise NotFoundError(f"Tenant {tenant_id} not found")

        grades = list(self._scoring.list_grade_scores(tenant_id))
        avg_academic = sum(grades) / len(grades) if grades else 0.0

        marks = list(self._scoring.list_attendance_marks(tenant_id))
        if marks:
            attendance = sum(1 for m in marks if m in PRESENT_MARKS) / len(marks) * 100
        else:
            attendance = 100.0

        collection = self._fees.collection_summary(tenant_id)
        if collection.total_billed <= 0:
            rate = 1.0
        else:
            # Overpayment does not lift the rate past full collection.
            rate = min(1.0, max(0.0, collection.total_paid / collection.total_billed))

        return HealthScoreInput(
            tenant_id=tenant_id,
            avg_academic_score=avg_academic,
            attendance_percentage=attendance,
            fee_collection_rate=rate,
        )

    def compute_score(self, tenant_id: str) -> HealthScore:
        inputs = self.compute_inputs(tenant_id)
        score = composite_score(inputs)
        logger.debug(f"Health score for tenant {tenant_id}: {score:.1f} ({inputs})")
        return HealthScore(tenant_id=tenant_id, score=score, inputs=inputs)

    def rank_tenants(self, tenant_ids: Iterable[str]) -> list[HealthScore]:
        """Highest score first; equal scores ordered by tenant id."""
        scores = [self.compute_score(tenant_id) for tenant_id in dict.fromkeys(tenant_ids)]
        return sorted(scores, key=lambda s: (-s.score, s.tenant_id))
