from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import BillingCycle
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_date, as_int, db_cursor, fetchall, fetchone
from .model import SubscriptionPayment, TenantBillingContract
from .repository import BillingRepository, DueDateRule


class MySQLBillingRepository(BillingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_contract(self, tenant_id: str) -> Optional[TenantBillingContract]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tenant_id, price_per_active_unit, billing_cycle, session_start_date,
                       next_due_date, concession_percent
                FROM billing_contracts
                WHERE tenant_id=%s
                """,
                (tenant_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TenantBillingContract(
                tenant_id=str(r["tenant_id"]),
                price_per_active_unit=as_int(r.get("price_per_active_unit")),
                billing_cycle=BillingCycle(r["billing_cycle"]),
                session_start_date=as_date(r["session_start_date"]),
                next_due_date=as_date(r.get("next_due_date")),
                concession_percent=Decimal(str(r.get("concession_percent") or 0)),
            )

    def list_tenant_ids(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT tenant_id FROM billing_contracts ORDER BY tenant_id")
            return [str(r["tenant_id"]) for r in fetchall(cur)]

    def count_active_units(self, tenant_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS total FROM students WHERE branch_id=%s AND status='active'",
                (tenant_id,),
            )
            r = fetchone(cur)
            return int(r["total"]) if r else 0

    def list_payments(self, tenant_id: str) -> Sequence[SubscriptionPayment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT payment_id, tenant_id, amount, payment_date, transaction_ref
                FROM subscription_payments
                WHERE tenant_id=%s
                ORDER BY payment_date DESC, payment_id
                """,
                (tenant_id,),
            )
            return [
                SubscriptionPayment(
                    payment_id=str(r["payment_id"]),
                    tenant_id=str(r["tenant_id"]),
                    amount=as_int(r["amount"]),
                    payment_date=as_date(r["payment_date"]),
                    transaction_ref=r["transaction_ref"],
                )
                for r in fetchall(cur)
            ]

    def add_payment(self, payment: SubscriptionPayment, *, due_date_rule: DueDateRule) -> Optional[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT next_due_date FROM billing_contracts WHERE tenant_id=%s FOR UPDATE",
                (payment.tenant_id,),
            )
            r = fetchone(cur)
            if not r:
                raise NotFoundError(f"No billing contract for tenant {payment.tenant_id}")

            cur.execute(
                """
                INSERT INTO subscription_payments(payment_id, tenant_id, amount, payment_date, transaction_ref)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    payment.payment_id,
                    payment.tenant_id,
                    int(payment.amount),
                    payment.payment_date,
                    payment.transaction_ref,
                ),
            )
            new_due = due_date_rule(as_date(r.get("next_due_date")))
            cur.execute(
                "UPDATE billing_contracts SET next_due_date=%s WHERE tenant_id=%s",
                (new_due, payment.tenant_id),
            )
            return new_due
