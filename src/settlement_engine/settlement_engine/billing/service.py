from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import add_months, month_key, months_between
from ..common.ids import new_id
from ..common.locks import KeyedLock
from ..common.money import percent_factor, round_minor
from ..common.validators import require_non_empty, require_positive_amount
from ..core.constants import (
    DEFAULT_MANUAL_PAYMENT_NOTE,
    DEFAULT_PRICE_PER_UNIT,
    MANUAL_PAYMENT_DUE_DAY,
    MANUAL_PAYMENT_REF_PREFIX,
)
from ..core.enums import BillingCycle
from ..core.exceptions import NotFoundError
from .model import (
    BillingMonth,
    OwedSummary,
    SubscriptionPayment,
    SystemBillingSummary,
    TenantBillingContract,
    TenantBillingStatus,
)
from .repository import BillingRepository

logger = logging.getLogger(__name__)


def advance_due_date(current: Optional[date], cycle: BillingCycle) -> Optional[date]:
    """One billing cycle past the stored due date; unset stays unset."""
    if current is None:
        return None
    return add_months(current, cycle.months)


def manual_due_date(period_end: date) -> date:
    """Day 10 of the month after the period a manual payment covers."""
    return add_months(period_end.replace(day=1), 1).replace(day=MANUAL_PAYMENT_DUE_DAY)


class SubscriptionBillingService:
    """Tenant subscription billing: owed amounts, payments and due-date roll-forward."""

    def __init__(
        self,
        billing: BillingRepository,
        *,
        clock: Optional[Clock] = None,
        locks: Optional[KeyedLock] = None,
        default_price_per_unit: int = DEFAULT_PRICE_PER_UNIT,
    ):
        self._billing = billing
        self._clock = clock or SystemClock()
        self._locks = locks or KeyedLock()
        self._default_price = int(default_price_per_unit)

    def _require_contract(self, tenant_id: str) -> TenantBillingContract:
        contract = self._billing.get_contract(tenant_id)
        if not contract:
            raise NotFoundError(f"No billing contract for tenant {tenant_id}")
        return contract

    def _price(self, contract: TenantBillingContract) -> int:
        if contract.price_per_active_unit is None:
            return self._default_price
        return contract.price_per_active_unit

    def _monthly_charge(self, contract: TenantBillingContract, units: int) -> Decimal:
        return Decimal(units) * Decimal(self._price(contract)) * percent_factor(contract.concession_percent)

    def compute_owed(self, tenant_id: str, as_of: Optional[date] = None) -> OwedSummary:
        """Whole calendar months since session start, times units, price and concession.

        Partial months are not billed. Overpayment does not show as negative pending.
        """
        as_of = as_of or self._clock.today()
        contract = self._require_contract(tenant_id)
        units = self._billing.count_active_units(tenant_id)
        months = months_between(contract.session_start_date, as_of)

        total_billed = round_minor(months * self._monthly_charge(contract, units))
        total_paid = sum(p.amount for p in self._billing.list_payments(tenant_id))
        return OwedSummary(
            tenant_id=tenant_id,
            total_billed=total_billed,
            total_paid=total_paid,
            pending_amount=max(0, total_billed - total_paid),
            months_elapsed=months,
            active_units=units,
        )

    def _append_payment(self, payment: SubscriptionPayment, rule) -> Optional[date]:
        with self._locks.hold(payment.tenant_id):
            self._require_contract(payment.tenant_id)
            return self._billing.add_payment(payment, due_date_rule=rule)

    def record_payment(
        self,
        *,
        tenant_id: str,
        amount: int,
        transaction_ref: str,
        payment_date: Optional[date] = None,
    ) -> SubscriptionPayment:
        amount = require_positive_amount(amount)
        transaction_ref = require_non_empty(transaction_ref, "Transaction reference")
        contract = self._require_contract(tenant_id)

        payment = SubscriptionPayment(
            payment_id=new_id("erp-pay"),
            tenant_id=tenant_id,
            amount=amount,
            payment_date=payment_date or self._clock.today(),
            transaction_ref=transaction_ref,
        )
        # Advance from the stored due date, never from the payment date.
        new_due = self._append_payment(payment, lambda current: advance_due_date(current, contract.billing_cycle))

        if new_due is None:
            logger.warning(f"Tenant {tenant_id} has no due date set; payment {payment.payment_id} recorded only")
        logger.info(f"Recorded subscription payment {payment.payment_id} of {amount} for tenant {tenant_id}; next due {new_due}")
        return payment

    def record_manual_payment(
        self,
        *,
        tenant_id: str,
        amount: int,
        payment_date: date,
        period_end_date: date,
        notes: str = "",
        actor: str = "",
    ) -> SubscriptionPayment:
        """Offline payment covering everything up to period_end_date."""
        amount = require_positive_amount(amount)
        note = (notes or "").strip() or DEFAULT_MANUAL_PAYMENT_NOTE

        payment = SubscriptionPayment(
            payment_id=new_id("erp-pay"),
            tenant_id=tenant_id,
            amount=amount,
            payment_date=payment_date,
            transaction_ref=f"{MANUAL_PAYMENT_REF_PREFIX}{note}",
        )
        due = manual_due_date(period_end_date)
        self._append_payment(payment, lambda _current: due)

        logger.info(f"Manual subscription payment of {amount} for tenant {tenant_id} by {actor or 'unknown'}; next due {due}")
        return payment

    def is_current(self, tenant_id: str, as_of: Optional[date] = None) -> bool:
        as_of = as_of or self._clock.today()
        contract = self._require_contract(tenant_id)
        if contract.next_due_date is None:
            return False
        return as_of <= contract.next_due_date

    def days_overdue(self, tenant_id: str, as_of: Optional[date] = None) -> int:
        as_of = as_of or self._clock.today()
        contract = self._require_contract(tenant_id)
        if contract.next_due_date is None or as_of <= contract.next_due_date:
            return 0
        return (as_of - contract.next_due_date).days

    def collection_rate(self, tenant_id: str, as_of: Optional[date] = None) -> float:
        owed = self.compute_owed(tenant_id, as_of)
        if owed.total_billed <= 0:
            return 100.0
        return owed.total_paid / owed.total_billed * 100

    def billing_history(self, tenant_id: str, as_of: Optional[date] = None) -> list[BillingMonth]:
        """Per-month bill, with total payments applied to the oldest months first."""
        as_of = as_of or self._clock.today()
        contract = self._require_contract(tenant_id)
        units = self._billing.count_active_units(tenant_id)
        months = months_between(contract.session_start_date, as_of)
        per_month = round_minor(self._monthly_charge(contract, units))

        remaining = sum(p.amount for p in self._billing.list_payments(tenant_id))
        history: list[BillingMonth] = []
        for i in range(months):
            paid = min(remaining, per_month)
            remaining -= paid
            history.append(
                BillingMonth(
                    month=month_key(add_months(contract.session_start_date, i)),
                    amount_billed=per_month,
                    amount_paid=paid,
                )
            )
        return history

    def tenant_status(self, tenant_id: str, as_of: Optional[date] = None) -> TenantBillingStatus:
        as_of = as_of or self._clock.today()
        contract = self._require_contract(tenant_id)
        return TenantBillingStatus(
            tenant_id=tenant_id,
            owed=self.compute_owed(tenant_id, as_of),
            next_due_date=contract.next_due_date,
            days_overdue=self.days_overdue(tenant_id, as_of),
            is_current=self.is_current(tenant_id, as_of),
        )

    def system_summary(
        self,
        tenant_ids: Optional[Iterable[str]] = None,
        as_of: Optional[date] = None,
    ) -> SystemBillingSummary:
        as_of = as_of or self._clock.today()
        ids = list(tenant_ids) if tenant_ids is not None else list(self._billing.list_tenant_ids())
        statuses = [self.tenant_status(tenant_id, as_of) for tenant_id in ids]
        return SystemBillingSummary(
            total_billed=sum(s.owed.total_billed for s in statuses),
            total_paid=sum(s.owed.total_paid for s in statuses),
            pending_amount=sum(s.owed.pending_amount for s in statuses),
            pending_tenants=sum(1 for s in statuses if s.owed.pending_amount > 0),
            tenants=statuses,
        )
