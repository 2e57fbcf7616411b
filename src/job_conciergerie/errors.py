from __future__ import annotations

from flask import Flask, jsonify, render_template, request
from werkzeug.exceptions import HTTPException

from .common.logging import get_logger
from .core.exceptions import DomainError, ExternalServiceError

LOG = get_logger("job_conciergerie.errors")


def _wants_json() -> bool:
    return request.path.startswith("/api")


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = int(getattr(exc, "status_code", 400))
        if isinstance(exc, ExternalServiceError):
            LOG.error("%s %s: %s", request.method, request.path, exc)
        if _wants_json():
            body = {"success": False, "message": str(exc)}
            details = getattr(exc, "details", None)
            if details:
                body["details"] = details
            return jsonify(body), status
        return render_template("error.html", message=str(exc)), status

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        LOG.exception("unhandled error on %s %s", request.method, request.path)
        if _wants_json():
            return jsonify({"success": False, "message": "Erreur interne du serveur"}), 500
        return render_template("error.html"), 500
