from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, g, jsonify, request

from ..container import Container
from ..core.enums import UserType
from ..core.exceptions import AuthorizationError, NotFoundError
from .filters import (
    MissionFilters,
    apply_filters,
    calendar_missions,
    calendar_time_label,
    group_by_date,
    group_missions,
    parse_sort,
    sort_missions,
    visible_missions,
)
from .points import mission_points


def register(app: Flask, container: Container) -> None:
    service = container.mission_service

    def conciergerie_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
            if not conciergerie:
                raise AuthorizationError("Action réservée aux conciergeries")
            g.conciergerie = conciergerie
            return view(*args, **kwargs)

        return wrapper

    def _viewer() -> tuple[Optional[str], Optional[str]]:
        """(user_type, id used for visibility) of the current cookie holder."""
        user_id = request.cookies.get("user_id")
        user_type = request.cookies.get("user_type")
        if user_type == UserType.EMPLOYEE.value:
            employee = container.employee_service.get_by_device_id(user_id)
            return user_type, employee.id if employee else user_id
        return user_type, user_id

    def _mission_json(mission) -> dict:
        data = mission.to_dict()
        points = mission_points(mission)
        data["totalPoints"] = points.total_points
        data["pointsPerDay"] = points.points_per_day
        return data

    def _visible():
        user_type, viewer_id = _viewer()
        return visible_missions(service.list_missions(), user_type, viewer_id)

    @app.route("/api/missions", methods=["GET"], endpoint="api_list_missions")
    def api_list_missions():
        missions = _visible()
        homes = service.homes_for(missions)
        missions = apply_filters(missions, MissionFilters.from_args(request.args), homes)
        sort_field, direction = parse_sort(request.args)
        missions = sort_missions(missions, sort_field, direction, homes)

        if request.args.get("group"):
            groups = group_missions(missions, sort_field, homes)
            return jsonify([
                {"label": label, "missions": [_mission_json(m) for m in items]}
                for label, items in groups.items()
            ])
        return jsonify([_mission_json(m) for m in missions])

    @app.route("/api/missions/calendar", methods=["GET"], endpoint="api_missions_calendar")
    def api_missions_calendar():
        user_type, viewer_id = _viewer()
        conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
        missions = calendar_missions(
            service.list_missions(),
            user_type,
            viewer_id,
            conciergerie.name if conciergerie else None,
        )

        days = group_by_date(missions)
        return jsonify([
            {
                "date": day.isoformat(),
                "missions": [
                    {**_mission_json(m), "timeLabel": calendar_time_label(m, day)} for m in items
                ],
            }
            for day, items in days.items()
        ])

    @app.route("/api/missions/late", methods=["GET"], endpoint="api_late_missions")
    @conciergerie_required
    def api_late_missions():
        missions = [m for m in service.late_missions() if m.conciergerie_name == g.conciergerie.name]
        return jsonify([_mission_json(m) for m in missions])

    @app.route("/api/missions/<mission_id>", methods=["GET"], endpoint="api_get_mission")
    def api_get_mission(mission_id: str):
        mission = service.get_by_id(mission_id)
        if not mission:
            raise NotFoundError("Mission non trouvée")
        return jsonify(_mission_json(mission))

    @app.route("/api/missions", methods=["POST"], endpoint="api_create_mission")
    @conciergerie_required
    def api_create_mission():
        mission = service.create(g.conciergerie, request.get_json(silent=True) or {})
        return jsonify(_mission_json(mission)), 201

    @app.route("/api/missions/<mission_id>", methods=["PUT"], endpoint="api_update_mission")
    @conciergerie_required
    def api_update_mission(mission_id: str):
        mission = service.update(g.conciergerie, mission_id, request.get_json(silent=True) or {})
        return jsonify(_mission_json(mission))

    @app.route("/api/missions/<mission_id>", methods=["DELETE"], endpoint="api_delete_mission")
    @conciergerie_required
    def api_delete_mission(mission_id: str):
        return jsonify({"success": service.delete(g.conciergerie, mission_id)})

    @app.route("/api/missions/<mission_id>/cancel", methods=["POST"], endpoint="api_cancel_mission")
    @conciergerie_required
    def api_cancel_mission(mission_id: str):
        return jsonify(_mission_json(service.cancel(g.conciergerie, mission_id)))

    @app.route("/api/missions/<mission_id>/accept", methods=["POST"], endpoint="api_accept_mission")
    def api_accept_mission(mission_id: str):
        mission = service.accept(request.cookies.get("user_id"), mission_id)
        return jsonify(_mission_json(mission))

    @app.route("/api/missions/<mission_id>/start", methods=["POST"], endpoint="api_start_mission")
    def api_start_mission(mission_id: str):
        mission = service.start(request.cookies.get("user_id"), mission_id)
        return jsonify(_mission_json(mission))

    @app.route("/api/missions/<mission_id>/complete", methods=["POST"], endpoint="api_complete_mission")
    def api_complete_mission(mission_id: str):
        mission = service.complete(
            request.cookies.get("user_id"),
            request.cookies.get("user_type"),
            mission_id,
        )
        return jsonify(_mission_json(mission))
