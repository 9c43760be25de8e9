from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.serialization import to_json
from ..container import Container


def register(app: Flask, container: Container) -> None:
    fees = container.fee_ledger_service

    @app.route("/api/fees/<student_id>/adjustments", methods=["POST"], endpoint="fee_apply_adjustment")
    def apply_adjustment(student_id: str):
        data = request.get_json(silent=True) or {}
        adjustment = fees.apply_adjustment(
            student_id=student_id,
            adjustment_type=data.get("type", ""),
            amount=data.get("amount"),
            reason=data.get("reason", ""),
            actor=data.get("adjusted_by", ""),
        )
        return jsonify({"success": True, "adjustment": to_json(adjustment)}), 201

    @app.route("/api/fees/<student_id>/adjustments", methods=["GET"], endpoint="fee_list_adjustments")
    def list_adjustments(student_id: str):
        return jsonify({"success": True, "adjustments": to_json(fees.list_adjustments(student_id))})

    @app.route("/api/fees/adjustments/<adjustment_id>/reverse", methods=["POST"], endpoint="fee_reverse_adjustment")
    def reverse_adjustment(adjustment_id: str):
        data = request.get_json(silent=True) or {}
        adjustment = fees.reverse_adjustment(adjustment_id=adjustment_id, actor=data.get("reversed_by", ""))
        return jsonify({"success": True, "adjustment": to_json(adjustment)})

    @app.route("/api/fees/<student_id>/payments", methods=["POST"], endpoint="fee_record_payment")
    def record_payment(student_id: str):
        data = request.get_json(silent=True) or {}
        paid_date = parse_iso_date(data["paid_date"]) if data.get("paid_date") else None
        payment = fees.record_payment(student_id=student_id, amount=data.get("amount"), paid_date=paid_date)
        return jsonify({"success": True, "payment": to_json(payment)}), 201

    @app.route("/api/fees/<student_id>/balance", methods=["GET"], endpoint="fee_balance")
    def balance(student_id: str):
        return jsonify({"success": True, "balance": to_json(fees.get_balance(student_id))})

    @app.route("/api/fees/<student_id>/reconcile", methods=["POST"], endpoint="fee_reconcile")
    def reconcile(student_id: str):
        data = request.get_json(silent=True) or {}
        report = fees.reconcile(student_id, repair=bool(data.get("repair", True)))
        body = to_json(report)
        body["drift"] = report.drift
        return jsonify({"success": True, "report": body})
