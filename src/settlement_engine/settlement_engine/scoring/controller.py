from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    scoring = container.health_score_service

    @app.route("/api/tenants/health/ranking", methods=["GET"], endpoint="health_ranking")
    def ranking():
        ids = [i.strip() for i in request.args.get("ids", "").split(",") if i.strip()]
        return jsonify({"success": True, "ranking": [s.to_dict() for s in scoring.rank_tenants(ids)]})

    @app.route("/api/tenants/<tenant_id>/health", methods=["GET"], endpoint="health_score")
    def health(tenant_id: str):
        return jsonify({"success": True, "health": scoring.compute_score(tenant_id).to_dict()})
