from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .billing.controller import register as register_billing
from .container import Container, build_container
from .core.exceptions import (
    DomainError,
    InconsistentLedgerError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .fees.controller import register as register_fees
from .payroll.controller import register as register_payroll
from .scoring.controller import register as register_scoring

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (InconsistentLedgerError, 409),
    (ValidationError, 400),
)


def error_status(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = error_status(exc)
        logger.info(f"{type(exc).__name__} -> {status}: {exc}")
        return jsonify({"success": False, "error": type(exc).__name__, "message": str(exc)}), status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if container is None:
        logger.info(
            f"settings={settings_module} "
            f"db={db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info(f"schema ready (tables={len(list_tables(db_config))})")

        container = build_container(
            db_config=db_config,
            default_price_per_unit=int(getattr(settings, "DEFAULT_PRICE_PER_UNIT", 1000)),
        )

    register_error_handlers(app)
    register_fees(app, container)
    register_payroll(app, container)
    register_billing(app, container)
    register_scoring(app, container)

    return app
