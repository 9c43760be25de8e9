from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    billing = container.billing_service

    def _as_of():
        value = request.args.get("as_of")
        return parse_iso_date(value) if value else None

    @app.route("/api/tenants/<tenant_id>/billing", methods=["GET"], endpoint="billing_status")
    def status(tenant_id: str):
        return jsonify({"success": True, "billing": to_json(billing.tenant_status(tenant_id, _as_of()))})

    @app.route("/api/tenants/<tenant_id>/billing/history", methods=["GET"], endpoint="billing_history")
    def history(tenant_id: str):
        return jsonify({"success": True, "history": to_json(billing.billing_history(tenant_id, _as_of()))})

    @app.route("/api/tenants/billing/summary", methods=["GET"], endpoint="billing_summary")
    def summary():
        ids = [i for i in request.args.get("ids", "").split(",") if i] or None
        return jsonify({"success": True, "summary": to_json(billing.system_summary(ids, _as_of()))})

    @app.route("/api/tenants/<tenant_id>/billing/payments", methods=["POST"], endpoint="billing_record_payment")
    def record_payment(tenant_id: str):
        data = request.get_json(silent=True) or {}
        payment_date = parse_iso_date(data["payment_date"]) if data.get("payment_date") else None
        if data.get("period_end_date"):
            payment = billing.record_manual_payment(
                tenant_id=tenant_id,
                amount=data.get("amount"),
                payment_date=payment_date or container.clock.today(),
                period_end_date=parse_iso_date(data["period_end_date"]),
                notes=data.get("notes", ""),
                actor=data.get("recorded_by", ""),
            )
        else:
            payment = billing.record_payment(
                tenant_id=tenant_id,
                amount=data.get("amount"),
                transaction_ref=data.get("transaction_ref", ""),
                payment_date=payment_date,
            )
        return jsonify({"success": True, "payment": to_json(payment)}), 201
