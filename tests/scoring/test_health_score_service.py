from __future__ import annotations

from datetime import date

import pytest

from src.settlement_engine.settlement_engine.core.enums import AttendanceMark
from src.settlement_engine.settlement_engine.core.exceptions import NotFoundError
from src.settlement_engine.settlement_engine.fees.model import FeeRecord
from src.settlement_engine.settlement_engine.fees.service import FeeLedgerService
from src.settlement_engine.settlement_engine.scoring.model import HealthScoreInput
from src.settlement_engine.settlement_engine.scoring.service import HealthScoreService, composite_score

P, A, T = AttendanceMark.PRESENT, AttendanceMark.ABSENT, AttendanceMark.TARDY


class BranchFees:
    def __init__(self, records):
        self.records = records

    def list_records_for_branch(self, branch_id):
        return [r for r in self.records if r.branch_id == branch_id]


class InMemoryScoring:
    def __init__(self, grades=None, marks=None):
        self.grades = grades or {}
        self.marks = marks or {}

    def tenant_exists(self, tenant_id):
        return tenant_id in self.grades or tenant_id in self.marks

    def list_grade_scores(self, tenant_id):
        return self.grades.get(tenant_id, [])

    def list_attendance_marks(self, tenant_id):
        return self.marks.get(tenant_id, [])


def _fee(branch_id, total, paid):
    return FeeRecord(
        student_id=f"{branch_id}-{total}-{paid}",
        branch_id=branch_id,
        template_amount=total,
        total_amount=total,
        paid_amount=paid,
        due_date=date(2025, 4, 10),
    )


def _service(grades, marks, fee_records=()):
    fees = FeeLedgerService(BranchFees(list(fee_records)))
    return HealthScoreService(InMemoryScoring(grades, marks), fees)


def test_composite_score_weights():
    inputs = HealthScoreInput("t", avg_academic_score=80, attendance_percentage=90, fee_collection_rate=0.5)
    assert composite_score(inputs) == pytest.approx(77.0)


def test_composite_score_is_clamped():
    high = HealthScoreInput("t", avg_academic_score=150, attendance_percentage=100, fee_collection_rate=1)
    low = HealthScoreInput("t", avg_academic_score=-50, attendance_percentage=0, fee_collection_rate=0)
    assert composite_score(high) == 100.0
    assert composite_score(low) == 0.0


def test_inputs_from_grades_attendance_and_fees():
    svc = _service(
        grades={"t-1": [70, 90]},
        marks={"t-1": [P, T, A, P]},
        fee_records=[_fee("t-1", 1000, 250), _fee("t-1", 1000, 750), _fee("t-2", 500, 0)],
    )

    score = svc.compute_score("t-1")

    assert score.inputs.avg_academic_score == 80
    assert score.inputs.attendance_percentage == 75
    assert score.inputs.fee_collection_rate == 0.5
    assert score.score == pytest.approx(0.5 * 80 + 0.3 * 75 + 0.2 * 50)


def test_defaults_without_data():
    svc = _service(grades={"t-1": []}, marks={})

    inputs = svc.compute_inputs("t-1")

    assert inputs.avg_academic_score == 0.0
    assert inputs.attendance_percentage == 100.0
    assert inputs.fee_collection_rate == 1.0
    assert svc.compute_score("t-1").score == pytest.approx(50.0)


def test_overpaid_fees_cap_collection_rate():
    svc = _service(grades={"t-1": [100]}, marks={"t-1": [P]}, fee_records=[_fee("t-1", 1000, 1500)])
    assert svc.compute_inputs("t-1").fee_collection_rate == 1.0
    assert svc.compute_score("t-1").score == 100.0


def test_unknown_tenant():
    svc = _service(grades={}, marks={})
    with pytest.raises(NotFoundError):
        svc.compute_score("nope")


def test_ranking_orders_by_score_then_tenant_id():
    svc = _service(
        grades={"b": [60], "a": [60], "c": [90]},
        marks={"b": [P], "a": [P], "c": [P]},
    )

    ranking = svc.rank_tenants(["b", "c", "a", "b"])

    assert [s.tenant_id for s in ranking] == ["c", "a", "b"]
    assert ranking[1].score == ranking[2].score
