from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .billing.mysql_billing_repository import MySQLBillingRepository
from .billing.service import SubscriptionBillingService
from .common.clock import Clock, SystemClock
from .core.constants import DEFAULT_PRICE_PER_UNIT
from .database.connection import DBConfig, DatabaseConnection
from .fees.mysql_fee_repository import MySQLFeeRepository
from .fees.service import FeeLedgerService
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.service import PayrollService
from .scoring.mysql_scoring_repository import MySQLScoringRepository
from .scoring.service import HealthScoreService


@dataclass(frozen=True)
class Container:
    clock: Clock

    fee_ledger_service: FeeLedgerService
    payroll_service: PayrollService
    billing_service: SubscriptionBillingService
    health_score_service: HealthScoreService


def build_services(
    *,
    fees_repo,
    payroll_repo,
    billing_repo,
    scoring_repo,
    clock: Optional[Clock] = None,
    default_price_per_unit: int = DEFAULT_PRICE_PER_UNIT,
) -> Container:
    """Wire services over any repository implementations (MySQL in production, fakes in tests)."""
    clock = clock or SystemClock()
    fee_ledger_service = FeeLedgerService(fees_repo, clock=clock)
    payroll_service = PayrollService(payroll_repo, clock=clock)
    billing_service = SubscriptionBillingService(
        billing_repo,
        clock=clock,
        default_price_per_unit=default_price_per_unit,
    )
    health_score_service = HealthScoreService(scoring_repo, fee_ledger_service)

    return Container(
        clock=clock,
        fee_ledger_service=fee_ledger_service,
        payroll_service=payroll_service,
        billing_service=billing_service,
        health_score_service=health_score_service,
    )


def build_container(
    *,
    db_config: dict,
    clock: Optional[Clock] = None,
    default_price_per_unit: int = DEFAULT_PRICE_PER_UNIT,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        fees_repo=MySQLFeeRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        billing_repo=MySQLBillingRepository(conn),
        scoring_repo=MySQLScoringRepository(conn),
        clock=clock,
        default_price_per_unit=default_price_per_unit,
    )
