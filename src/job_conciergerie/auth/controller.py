from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.logging import get_logger
from ..container import Container
from ..database.mysql_base import DatabaseError

LOG = get_logger("job_conciergerie.auth")


def register(app: Flask, container: Container) -> None:
    service = container.auth_service

    @app.route("/api/auth/", methods=["POST"], endpoint="api_auth")
    def api_auth():
        data = request.get_json(silent=True) or {}
        user_id = data.get("userId")
        if not user_id:
            return jsonify({"userType": None})

        try:
            user_type = service.get_existing_user_type(user_id)
        except DatabaseError:
            LOG.exception("error checking user status for %s", user_id)
            return jsonify({"error": "Failed to check user status"}), 500
        return jsonify({"userType": user_type.value if user_type else None})

    @app.route("/api/idCheck", methods=["GET"], endpoint="api_id_check")
    def api_id_check():
        result = service.check_company_id(request.args.get("user_id"))
        return jsonify(result.to_dict()), result.status_code
