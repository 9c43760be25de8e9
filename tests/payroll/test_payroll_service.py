from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.settlement_engine.settlement_engine.core.enums import LeaveStatus, PayrollStatus, Role
from src.settlement_engine.settlement_engine.core.exceptions import (
    InvalidAmountError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from src.settlement_engine.settlement_engine.payroll.model import Branch, LeaveApplication, StaffProfile
from src.settlement_engine.settlement_engine.payroll.service import PayrollService


class FixedClock:
    def today(self):
        return date(2025, 4, 1)

    def now(self):
        return datetime(2025, 4, 1, 9, 30)


class InMemoryPayroll:
    def __init__(self, branches=(), staff=(), leaves=()):
        self.branches = {b.branch_id: b for b in branches}
        self.staff = {s.staff_id: s for s in staff}
        self.leaves = list(leaves)
        self.adjustments = []
        self.records = {}

    def get_branch(self, branch_id):
        return self.branches.get(branch_id)

    def get_staff(self, staff_id):
        return self.staff.get(staff_id)

    def list_staff(self, branch_id):
        return [s for s in self.staff.values() if s.branch_id == branch_id]

    def list_leaves(self, applicant_id):
        return [l for l in self.leaves if l.applicant_id == applicant_id]

    def list_manual_adjustments(self, *, staff_id, month):
        return [a for a in self.adjustments if a.staff_id == staff_id and a.month == month]

    def add_manual_adjustment(self, adjustment):
        self.adjustments.append(adjustment)

    def get_record(self, *, staff_id, month):
        return self.records.get((staff_id, month))

    def get_record_by_id(self, record_id):
        return next((r for r in self.records.values() if r.record_id == record_id), None)

    def list_records(self, *, branch_id, month):
        return [r for r in self.records.values() if r.branch_id == branch_id and r.month == month]

    def save_record(self, record):
        current = self.records.get((record.staff_id, record.month))
        if current and current.status == PayrollStatus.PAID:
            return False
        self.records[(record.staff_id, record.month)] = record
        return True

    def mark_paid(self, *, record_id, paid_at, paid_by):
        for key, r in self.records.items():
            if r.record_id == record_id and r.status == PayrollStatus.PENDING:
                self.records[key] = replace(r, status=PayrollStatus.PAID, paid_at=paid_at, paid_by=paid_by)
                return True
        return False


def _staff(staff_id, role=Role.TEACHER, salary=75000, branch_id="br-1"):
    return StaffProfile(staff_id=staff_id, branch_id=branch_id, name=staff_id.upper(), role=role, base_salary=salary)


def _setup(staff=None, leaves=()):
    repo = InMemoryPayroll(
        branches=[Branch(branch_id="br-1", name="Main", principal_id="p-1")],
        staff=staff
        if staff is not None
        else [
            _staff("p-1", role=Role.PRINCIPAL, salary=150000),
            _staff("t-1"),
            _staff("t-2", salary=None),
        ],
        leaves=leaves,
    )
    return PayrollService(repo, clock=FixedClock()), repo


def test_compute_for_month_covers_payroll_staff_only():
    svc, _ = _setup()

    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")

    assert {r.record.staff_id for r in rows} == {"t-1", "t-2"}
    by_staff = {r.record.staff_id: r for r in rows}
    assert by_staff["t-1"].status == PayrollStatus.PENDING
    assert by_staff["t-1"].record.net_payable == 75000
    assert by_staff["t-2"].status == PayrollStatus.SALARY_NOT_SET
    assert by_staff["t-2"].record.net_payable is None


def test_branch_principal_is_excluded_whatever_the_role():
    svc, _ = _setup(staff=[_staff("p-1"), _staff("t-1")])

    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")

    assert [r.record.staff_id for r in rows] == ["t-1"]


def test_half_day_leave_scenario():
    leave = LeaveApplication(
        leave_id="lv-1",
        applicant_id="t-1",
        status=LeaveStatus.APPROVED,
        start_date=date(2025, 3, 12),
        end_date=date(2025, 3, 12),
        is_half_day=True,
    )
    svc, _ = _setup(staff=[_staff("t-1")], leaves=[leave])

    (row,) = svc.compute_for_month(branch_id="br-1", month="2025-03")

    assert row.record.leave_deductions == 1250
    assert row.record.net_payable == 73750
    assert row.to_dict()["unpaid_leave_days"] == 0.5


def test_unknown_branch_and_bad_month():
    svc, _ = _setup()
    with pytest.raises(NotFoundError):
        svc.compute_for_month(branch_id="nope", month="2025-03")
    with pytest.raises(ValidationError):
        svc.compute_for_month(branch_id="br-1", month="2025-13")


def test_recompute_updates_salary_not_set_once_salary_configured():
    svc, repo = _setup()
    first = {r.record.staff_id: r.record for r in svc.compute_for_month(branch_id="br-1", month="2025-03")}

    repo.staff["t-2"] = _staff("t-2", salary=60000)
    second = {r.record.staff_id: r.record for r in svc.compute_for_month(branch_id="br-1", month="2025-03")}

    assert second["t-2"].record_id == first["t-2"].record_id
    assert second["t-2"].status == PayrollStatus.PENDING
    assert second["t-2"].net_payable == 60000


def test_paid_record_is_frozen_against_recompute():
    svc, repo = _setup()
    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")
    pending = [r for r in rows if r.status == PayrollStatus.PENDING]
    svc.process_payroll(pending, "accountant")

    repo.staff["t-1"] = _staff("t-1", salary=99999)
    again = {r.record.staff_id: r.record for r in svc.compute_for_month(branch_id="br-1", month="2025-03")}

    assert again["t-1"].status == PayrollStatus.PAID
    assert again["t-1"].net_payable == 75000
    assert again["t-1"].paid_by == "accountant"
    assert again["t-1"].paid_at == datetime(2025, 4, 1, 9, 30)


def test_process_payroll_pays_pending_only_and_is_idempotent():
    svc, repo = _setup()
    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")
    ids = [r.record_id for r in rows]

    paid = svc.process_payroll(ids, "accountant")
    assert len(paid) == 1
    assert repo.get_record_by_id(paid[0]).staff_id == "t-1"

    assert svc.process_payroll(ids, "accountant") == []
    statuses = sorted(r.status.value for r in repo.records.values())
    assert statuses == ["Paid", "Salary Not Set"]


def test_process_payroll_requires_actor():
    svc, _ = _setup()
    with pytest.raises(ValidationError):
        svc.process_payroll([], " ")


def test_manual_adjustment_flows_into_next_computation():
    svc, _ = _setup(staff=[_staff("t-1")])

    adj = svc.add_manual_adjustment(
        branch_id="br-1", staff_id="t-1", month="2025-03", amount=-2500, reason="Advance", adjusted_by="admin"
    )
    assert adj.adjusted_at == datetime(2025, 4, 1, 9, 30)

    (row,) = svc.compute_for_month(branch_id="br-1", month="2025-03")
    assert row.record.manual_adjustments_total == -2500
    assert row.record.net_payable == 72500


def test_manual_adjustment_rules():
    svc, _ = _setup()
    with pytest.raises(InvalidAmountError):
        svc.add_manual_adjustment(branch_id="br-1", staff_id="t-1", month="2025-03", amount=0, reason="x", adjusted_by="a")
    with pytest.raises(NotFoundError):
        svc.add_manual_adjustment(branch_id="br-1", staff_id="ghost", month="2025-03", amount=5, reason="x", adjusted_by="a")
    with pytest.raises(ValidationError):
        svc.add_manual_adjustment(branch_id="br-2", staff_id="t-1", month="2025-03", amount=5, reason="x", adjusted_by="a")

    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")
    svc.process_payroll(rows, "acct")
    with pytest.raises(InvalidStateError):
        svc.add_manual_adjustment(branch_id="br-1", staff_id="t-1", month="2025-03", amount=5, reason="x", adjusted_by="a")


def test_payroll_totals():
    svc, _ = _setup(staff=[_staff("t-1"), _staff("t-2", salary=40000), _staff("t-3", salary=None)])
    rows = svc.compute_for_month(branch_id="br-1", month="2025-03")
    svc.process_payroll([r for r in rows if r.record.staff_id == "t-1"], "acct")

    totals = svc.payroll_totals(branch_id="br-1", month="2025-03")

    assert totals.paid_total == 75000
    assert totals.pending_total == 40000
    assert totals.salary_not_set == 1


class CountingPayroll(InMemoryPayroll):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.mark_paid_calls = []

    def mark_paid(self, *, record_id, paid_at, paid_by):
        self.mark_paid_calls.append(record_id)
        return super().mark_paid(record_id=record_id, paid_at=paid_at, paid_by=paid_by)


def test_process_payroll_only_persists_records_the_transition_accepts():
    repo = CountingPayroll(
        branches=[Branch(branch_id="br-1", name="Main", principal_id=None)],
        staff=[_staff("t-1"), _staff("t-2", salary=None)],
    )
    svc = PayrollService(repo, clock=FixedClock())
    rows = {r.record.staff_id: r for r in svc.compute_for_month(branch_id="br-1", month="2025-03")}

    paid = svc.process_payroll([rows["t-2"], rows["t-1"], "pay-rec-unknown"], "acct")

    assert paid == [rows["t-1"].record_id]
    assert repo.mark_paid_calls == [rows["t-1"].record_id]


def test_process_payroll_skips_record_paid_after_it_was_read():
    class StaleReads(InMemoryPayroll):
        def get_record_by_id(self, record_id):
            # Snapshot taken before another run paid the record.
            return replace(super().get_record_by_id(record_id), status=PayrollStatus.PENDING)

    repo = StaleReads(branches=[Branch(branch_id="br-1", name="Main")], staff=[_staff("t-1")])
    svc = PayrollService(repo, clock=FixedClock())
    (row,) = svc.compute_for_month(branch_id="br-1", month="2025-03")
    assert svc.process_payroll([row.record_id], "first") == [row.record_id]

    assert svc.process_payroll([row.record_id], "second") == []
    assert repo.get_record(staff_id="t-1", month="2025-03").paid_by == "first"
