from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import require_email, require_non_empty
from ..container import Container
from ..core.exceptions import AuthorizationError
from .model import Email


def register(app: Flask, container: Container) -> None:
    @app.route("/api/email", methods=["POST"], endpoint="api_send_email")
    def api_send_email():
        data = request.get_json(silent=True) or {}
        if not data.get("to") or not data.get("subject") or not data.get("html"):
            return jsonify({"error": "Champs requis manquants: to, subject, html"}), 400

        email = Email(
            to=require_email(data.get("to"), "Destinataire"),
            subject=require_non_empty(data.get("subject"), "Sujet"),
            html=str(data.get("html")),
        )
        if not container.notification_service.send(email):
            return jsonify({"error": "Échec de l'envoi de l'email, nouvel essai programmé"}), 500
        return jsonify({"success": True})

    @app.route("/api/email/retries", methods=["GET"], endpoint="api_email_retries")
    def api_email_retries():
        # A conciergerie only sees the queued emails addressed to itself
        conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
        if not conciergerie:
            raise AuthorizationError("Action réservée aux conciergeries")
        items = container.notification_service.pending_retries()
        return jsonify([item.to_dict() for item in items if item.recipient == conciergerie.email])
