from __future__ import annotations

from functools import wraps

from flask import Flask, g, jsonify, make_response, request

from ..common.ids import generate_simple_id
from ..container import Container
from ..core.constants import COOKIE_MAX_AGE
from ..core.enums import EmployeeStatus, UserType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.employee_service

    def conciergerie_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
            if not conciergerie:
                raise AuthorizationError("Action réservée aux conciergeries")
            g.conciergerie = conciergerie
            return view(*args, **kwargs)

        return wrapper

    def _parse_status(value) -> EmployeeStatus:
        try:
            return EmployeeStatus(str(value or "").strip())
        except ValueError:
            raise ValidationError("Statut invalide")

    @app.route("/api/employees", methods=["GET"], endpoint="api_list_employees")
    def api_list_employees():
        conciergerie = container.conciergerie_service.get_by_id(request.cookies.get("user_id"))
        term = request.args.get("q")
        if conciergerie:
            employees = service.list_for_conciergerie(conciergerie.name, term)
        else:
            employees = service.list_employees()
        return jsonify([e.to_dict() for e in employees])

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="api_get_employee")
    def api_get_employee(employee_id: str):
        employee = service.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employé non trouvé")
        return jsonify(employee.to_dict())

    @app.route("/api/employees", methods=["POST"], endpoint="api_register_employee")
    def api_register_employee():
        data = request.get_json(silent=True) or {}
        device_id = request.cookies.get("user_id") or data.get("userId") or generate_simple_id()

        result = service.register(device_id=device_id, data=data)

        body = {
            "success": True,
            "created": result.created,
            "emailSent": result.email_sent,
            "employee": result.employee.to_dict(),
        }
        resp = make_response(jsonify(body), 201 if result.created else 200)
        resp.set_cookie("user_id", device_id, max_age=COOKIE_MAX_AGE)
        resp.set_cookie("user_type", UserType.EMPLOYEE.value, max_age=COOKIE_MAX_AGE)
        return resp

    @app.route("/api/employees/<employee_id>/status", methods=["PATCH"], endpoint="api_update_employee_status")
    @conciergerie_required
    def api_update_employee_status(employee_id: str):
        data = request.get_json(silent=True) or {}
        employee = service.update_status(
            conciergerie=g.conciergerie,
            employee_id=employee_id,
            status=_parse_status(data.get("status")),
        )
        return jsonify(employee.to_dict())

    @app.route("/api/employees/<employee_id>", methods=["PATCH"], endpoint="api_update_employee")
    def api_update_employee(employee_id: str):
        current = service.get_by_device_id(request.cookies.get("user_id"))
        if not current or current.id != employee_id:
            raise AuthorizationError("Vous ne pouvez modifier que votre propre profil")
        updated = service.update_settings(employee_id, request.get_json(silent=True) or {})
        if not updated:
            raise NotFoundError("Employé non trouvé")
        return jsonify(updated.to_dict())

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="api_delete_employee")
    @conciergerie_required
    def api_delete_employee(employee_id: str):
        return jsonify({"success": service.delete(employee_id)})

    @app.route(
        "/api/employees/<employee_id>/devices/<device_id>",
        methods=["POST"],
        endpoint="api_approve_employee_device",
    )
    def api_approve_employee_device(employee_id: str, device_id: str):
        employee = service.approve_device(
            employee_id=employee_id,
            device_id=device_id,
            acting_device_id=request.cookies.get("user_id"),
        )
        return jsonify(employee.to_dict())

    @app.route(
        "/api/employees/<employee_id>/devices/<device_id>",
        methods=["DELETE"],
        endpoint="api_remove_employee_device",
    )
    def api_remove_employee_device(employee_id: str, device_id: str):
        employee = service.remove_device(
            employee_id=employee_id,
            device_id=device_id,
            acting_device_id=request.cookies.get("user_id"),
        )
        return jsonify(employee.to_dict())
