from __future__ import annotations

from datetime import date
from typing import Callable, Optional, Protocol, Sequence

from .model import SubscriptionPayment, TenantBillingContract

DueDateRule = Callable[[Optional[date]], Optional[date]]


class BillingRepository(Protocol):
    def get_contract(self, tenant_id: str) -> Optional[TenantBillingContract]:
        raise NotImplementedError

    def list_tenant_ids(self) -> Sequence[str]:
        raise NotImplementedError

    def count_active_units(self, tenant_id: str) -> int:
        """Billable units for the tenant (active students)."""

        raise NotImplementedError

    def list_payments(self, tenant_id: str) -> Sequence[SubscriptionPayment]:
        raise NotImplementedError

    def add_payment(self, payment: SubscriptionPayment, *, due_date_rule: DueDateRule) -> Optional[date]:
        """Append the payment and move next_due_date in one transaction.

        due_date_rule receives the stored (locked) next_due_date and returns the
        value to store. Returns the stored value.
        """

        raise NotImplementedError
