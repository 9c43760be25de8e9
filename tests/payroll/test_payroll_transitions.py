from datetime import datetime
from decimal import Decimal

import pytest

from src.settlement_engine.settlement_engine.core.enums import PayrollStatus
from src.settlement_engine.settlement_engine.core.exceptions import InvalidStateError
from src.settlement_engine.settlement_engine.payroll import transitions
from src.settlement_engine.settlement_engine.payroll.model import PayrollComputation


def _computation(base):
    if base is None:
        return PayrollComputation(None, Decimal(0), None, 0, None)
    return PayrollComputation(base, Decimal(0), 0, 0, base)


def _new(base):
    return transitions.recompute(None, _computation(base), branch_id="b", staff_id="s", month="2025-03")


def test_new_record_status_follows_salary():
    assert _new(1000).status == PayrollStatus.PENDING
    assert _new(None).status == PayrollStatus.SALARY_NOT_SET


def test_recompute_keeps_record_id_and_moves_between_unpaid_states():
    missing = _new(None)
    pending = transitions.recompute(missing, _computation(900), branch_id="b", staff_id="s", month="2025-03")

    assert pending.record_id == missing.record_id
    assert pending.status == PayrollStatus.PENDING
    assert pending.net_payable == 900


def test_paid_is_terminal():
    paid = transitions.mark_paid(_new(1000), paid_at=datetime(2025, 4, 1), paid_by="acct")
    assert paid.status == PayrollStatus.PAID
    assert paid.paid_by == "acct"

    again = transitions.recompute(paid, _computation(5), branch_id="b", staff_id="s", month="2025-03")
    assert again is paid

    with pytest.raises(InvalidStateError):
        transitions.mark_paid(paid, paid_at=datetime(2025, 4, 2), paid_by="acct")


def test_salary_not_set_cannot_be_paid():
    with pytest.raises(InvalidStateError):
        transitions.mark_paid(_new(None), paid_at=datetime(2025, 4, 1), paid_by="acct")
