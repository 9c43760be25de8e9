from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service

    @app.route("/api/branches/<branch_id>/payroll/<month>", methods=["GET"], endpoint="payroll_for_month")
    def payroll_for_month(branch_id: str, month: str):
        rows = payroll.compute_for_month(branch_id=branch_id, month=month)
        return jsonify({"success": True, "payroll": [r.to_dict() for r in rows]})

    @app.route("/api/branches/<branch_id>/payroll/<month>/totals", methods=["GET"], endpoint="payroll_totals")
    def payroll_totals(branch_id: str, month: str):
        return jsonify({"success": True, "totals": to_json(payroll.payroll_totals(branch_id=branch_id, month=month))})

    @app.route("/api/branches/<branch_id>/payroll/process", methods=["POST"], endpoint="payroll_process")
    def process(branch_id: str):
        data = request.get_json(silent=True) or {}
        paid = payroll.process_payroll(data.get("record_ids") or [], data.get("processed_by", ""))
        return jsonify({"success": True, "paid": paid, "message": "Payroll processed."})

    @app.route("/api/branches/<branch_id>/payroll/adjustments", methods=["POST"], endpoint="payroll_add_adjustment")
    def add_adjustment(branch_id: str):
        data = request.get_json(silent=True) or {}
        adjustment = payroll.add_manual_adjustment(
            branch_id=branch_id,
            staff_id=data.get("staff_id", ""),
            month=data.get("month", ""),
            amount=data.get("amount"),
            reason=data.get("reason", ""),
            adjusted_by=data.get("adjusted_by", ""),
        )
        return jsonify({"success": True, "adjustment": to_json(adjustment)}), 201
