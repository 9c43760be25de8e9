"""Service layer without Flask: print the billing position of every tenant."""

import importlib

from config import get_settings_module

from src.settlement_engine.settlement_engine.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    summary = container.billing_service.system_summary()
    for status in summary.tenants:
        owed = status.owed
        print(f"{status.tenant_id}: billed={owed.total_billed} paid={owed.total_paid} pending={owed.pending_amount} overdue_days={status.days_overdue}")
    print(f"pending tenants: {summary.pending_tenants}, pending total: {summary.pending_amount}")


if __name__ == "__main__":
    main()
