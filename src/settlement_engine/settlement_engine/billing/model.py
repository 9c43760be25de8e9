from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from ..core.enums import BillingCycle


@dataclass(frozen=True)
class TenantBillingContract:
    tenant_id: str
    price_per_active_unit: Optional[int]
    billing_cycle: BillingCycle
    session_start_date: date
    next_due_date: Optional[date] = None
    concession_percent: Decimal = Decimal(0)


@dataclass(frozen=True)
class SubscriptionPayment:
    payment_id: str
    tenant_id: str
    amount: int
    payment_date: date
    transaction_ref: str


@dataclass(frozen=True)
class OwedSummary:
    tenant_id: str
    total_billed: int
    total_paid: int
    pending_amount: int
    months_elapsed: int
    active_units: int


@dataclass(frozen=True)
class BillingMonth:
    month: str
    amount_billed: int
    amount_paid: int


@dataclass(frozen=True)
class TenantBillingStatus:
    tenant_id: str
    owed: OwedSummary
    next_due_date: Optional[date]
    days_overdue: int
    is_current: bool


@dataclass(frozen=True)
class SystemBillingSummary:
    total_billed: int
    total_paid: int
    pending_amount: int
    pending_tenants: int
    tenants: list[TenantBillingStatus] = field(default_factory=list)
