from __future__ import annotations

from functools import wraps

from flask import Flask, g, jsonify, request

from ..container import Container
from ..core.exceptions import AuthorizationError, NotFoundError


def register(app: Flask, container: Container) -> None:
    service = container.home_service
    storage = container.storage

    def conciergerie_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
            if not conciergerie:
                raise AuthorizationError("Action réservée aux conciergeries")
            g.conciergerie = conciergerie
            return view(*args, **kwargs)

        return wrapper

    def _home_json(home) -> dict:
        data = home.to_dict()
        data["imageUrls"] = [storage.image_url(i) for i in home.images]
        return data

    @app.route("/api/homes", methods=["GET"], endpoint="api_list_homes")
    def api_list_homes():
        conciergerie_name = request.args.get("conciergerie")
        if conciergerie_name:
            homes = service.list_by_conciergerie(conciergerie_name)
        else:
            homes = service.list_homes()
        return jsonify([_home_json(h) for h in homes])

    @app.route("/api/homes/<home_id>", methods=["GET"], endpoint="api_get_home")
    def api_get_home(home_id: str):
        home = service.get_by_id(home_id)
        if not home:
            raise NotFoundError("Bien non trouvé")
        return jsonify(_home_json(home))

    @app.route("/api/homes", methods=["POST"], endpoint="api_create_home")
    @conciergerie_required
    def api_create_home():
        home = service.create(g.conciergerie.name, request.get_json(silent=True) or {})
        return jsonify(_home_json(home)), 201

    @app.route("/api/homes/<home_id>", methods=["PATCH"], endpoint="api_update_home")
    @conciergerie_required
    def api_update_home(home_id: str):
        home = service.update(g.conciergerie.name, home_id, request.get_json(silent=True) or {})
        if home is None:
            return jsonify({"success": False, "message": "Aucune modification"}), 400
        return jsonify(_home_json(home))

    @app.route("/api/homes/<home_id>", methods=["DELETE"], endpoint="api_delete_home")
    @conciergerie_required
    def api_delete_home(home_id: str):
        remove_mission = None
        if request.args.get("withMissions") in ("1", "true"):
            conciergerie = g.conciergerie

            def remove_mission(mission):
                container.mission_service.delete(conciergerie, mission.id)

        return jsonify({"success": service.delete(g.conciergerie.name, home_id, remove_mission=remove_mission)})
