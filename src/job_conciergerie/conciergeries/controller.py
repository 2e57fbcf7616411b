from __future__ import annotations

import re

from flask import Flask, abort, jsonify, make_response, redirect, render_template, request, url_for

from ..common.ids import generate_simple_id
from ..common.logging import get_logger
from ..container import Container
from ..core.constants import COOKIE_MAX_AGE, USER_ID_PATH_PATTERN
from ..core.enums import UserType
from ..core.exceptions import DomainError, NotFoundError

LOG = get_logger("job_conciergerie.conciergeries")

_USER_ID_PATH = re.compile(USER_ID_PATH_PATTERN)


def register(app: Flask, container: Container) -> None:
    service = container.conciergerie_service

    @app.route("/api/conciergeries", methods=["GET"], endpoint="api_list_conciergeries")
    def api_list_conciergeries():
        return jsonify([c.to_dict() for c in service.list_conciergeries()])

    @app.route("/api/conciergeries/<user_id>", methods=["GET"], endpoint="api_get_conciergerie")
    def api_get_conciergerie(user_id: str):
        conciergerie = service.get_by_id(user_id)
        if not conciergerie:
            raise NotFoundError("Conciergerie non trouvée")
        return jsonify(conciergerie.to_dict())

    @app.route("/api/conciergeries/register", methods=["POST"], endpoint="api_register_conciergerie")
    def api_register_conciergerie():
        data = request.get_json(silent=True) or {}
        user_id = request.cookies.get("user_id") or data.get("userId") or generate_simple_id()
        name = data.get("name")

        sent = service.register(user_id=user_id, name=name, base_url=request.host_url)

        resp = make_response(jsonify({"success": True, "emailSent": sent, "userId": user_id}))
        resp.set_cookie("user_id", user_id, max_age=COOKIE_MAX_AGE)
        resp.set_cookie("user_type", UserType.CONCIERGERIE.value, max_age=COOKIE_MAX_AGE)
        resp.set_cookie("conciergerie_name", name, max_age=COOKIE_MAX_AGE)
        return resp

    @app.route("/api/conciergeries/<user_id>", methods=["PATCH"], endpoint="api_update_conciergerie")
    def api_update_conciergerie(user_id: str):
        updated = service.update(user_id, request.get_json(silent=True) or {})
        if not updated:
            raise NotFoundError("Conciergerie non trouvée")
        return jsonify(updated.to_dict())

    @app.route("/api/conciergeries/<user_id>/settings", methods=["GET"], endpoint="api_conciergerie_settings")
    def api_conciergerie_settings(user_id: str):
        return jsonify(service.get_notification_settings(user_id).to_dict())

    @app.route("/api/conciergeries/<user_id>/settings", methods=["PUT"], endpoint="api_update_conciergerie_settings")
    def api_update_conciergerie_settings(user_id: str):
        settings = service.update_notification_settings(user_id, request.get_json(silent=True) or {})
        return jsonify(settings.to_dict())

    @app.route("/<path_id>", methods=["GET"], endpoint="verify_conciergerie")
    def verify_conciergerie(path_id: str):
        if not _USER_ID_PATH.match(f"/{path_id}"):
            abort(404)
        try:
            service.verify(
                path_id=path_id,
                cookie_id=request.cookies.get("user_id"),
                conciergerie_name=request.cookies.get("conciergerie_name"),
            )
        except DomainError as e:
            LOG.warning("conciergerie verification failed for %s: %s", path_id, e)
            return (
                render_template(
                    "error.html",
                    message="Une erreur est survenue lors de la validation de la conciergerie",
                ),
                400,
            )
        resp = make_response(redirect(url_for("missions_page")))
        resp.set_cookie("user_type", UserType.CONCIERGERIE.value, max_age=COOKIE_MAX_AGE)
        return resp
