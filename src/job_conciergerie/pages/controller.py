from __future__ import annotations

from flask import Flask, render_template, request

from ..container import Container
from ..core.enums import UserType
from ..missions.filters import (
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
from ..missions.points import mission_points


def register(app: Flask, container: Container) -> None:
    conciergeries = container.conciergerie_service
    employees = container.employee_service
    homes = container.home_service
    missions = container.mission_service
    storage = container.storage

    def _current_user():
        user_id = request.cookies.get("user_id")
        user_type = request.cookies.get("user_type")
        if user_type == UserType.CONCIERGERIE.value:
            return user_type, conciergeries.get_by_id(user_id)
        if user_type == UserType.EMPLOYEE.value:
            return user_type, employees.get_by_device_id(user_id)
        return user_type, None

    @app.route("/", methods=["GET"], endpoint="index_page")
    def index_page():
        return render_template("index.html", conciergeries=conciergeries.list_conciergeries())

    @app.route("/waiting", methods=["GET"], endpoint="waiting_page")
    def waiting_page():
        user_type, user = _current_user()
        return render_template("waiting.html", user_type=user_type, user=user)

    @app.route("/error", methods=["GET"], endpoint="error_page")
    def error_page():
        return render_template("error.html")

    @app.route("/missions", methods=["GET"], endpoint="missions_page")
    def missions_page():
        user_type, user = _current_user()
        items = visible_missions(missions.list_missions(), user_type, user.id if user else None)
        mission_homes = missions.homes_for(items)
        items = apply_filters(items, MissionFilters.from_args(request.args), mission_homes)
        sort_field, direction = parse_sort(request.args)
        items = sort_missions(items, sort_field, direction, mission_homes)

        return render_template(
            "missions.html",
            user_type=user_type,
            user=user,
            groups=group_missions(items, sort_field, mission_homes),
            homes={h.id: h for h in mission_homes},
            points={m.id: mission_points(m) for m in items},
            sort_field=sort_field.value,
            direction=direction,
        )

    @app.route("/homes", methods=["GET"], endpoint="homes_page")
    def homes_page():
        user_type, user = _current_user()
        items = homes.list_by_conciergerie(user.name) if user_type == UserType.CONCIERGERIE.value and user else []
        return render_template(
            "homes.html",
            homes=items,
            image_url=storage.image_url,
        )

    @app.route("/employees", methods=["GET"], endpoint="employees_page")
    def employees_page():
        user_type, user = _current_user()
        name = user.name if user_type == UserType.CONCIERGERIE.value and user else None
        return render_template(
            "employees.html",
            employees=employees.list_for_conciergerie(name, request.args.get("q")),
            term=request.args.get("q", ""),
        )

    @app.route("/calendar", methods=["GET"], endpoint="calendar_page")
    def calendar_page():
        user_type, user = _current_user()
        is_conciergerie = user_type == UserType.CONCIERGERIE.value
        items = calendar_missions(
            missions.list_missions(),
            user_type,
            user.id if user else None,
            user.name if is_conciergerie and user else None,
        )
        return render_template(
            "calendar.html",
            days=group_by_date(items),
            homes={h.id: h for h in missions.homes_for(items)},
            time_label=calendar_time_label,
        )

    @app.route("/settings", methods=["GET"], endpoint="settings_page")
    def settings_page():
        user_type, user = _current_user()
        pending = employees.pending_devices(user) if user_type == UserType.EMPLOYEE.value and user else []
        return render_template("settings.html", user_type=user_type, user=user, pending_devices=pending)
