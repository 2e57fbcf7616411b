from __future__ import annotations

import pytest

from conftest import make_employee
from job_conciergerie.auth.service import AuthService, load_companies
from job_conciergerie.core.enums import EmployeeStatus, UserType
from job_conciergerie.database.mysql_base import DatabaseError
from job_conciergerie.middleware import is_exempt, resolve_redirect

CONCIERGERIE_ID = "c" * 22
EMPLOYEE_ID = "e" * 22


class BrokenRepository:
    def get_by_id(self, user_id):
        raise DatabaseError("connection lost")

    def get_by_device_id(self, device_id):
        raise DatabaseError("connection lost")


def test_existing_user_types(auth_service, employees_repo):
    assert auth_service.get_existing_user_type(CONCIERGERIE_ID) == UserType.CONCIERGERIE
    assert auth_service.get_existing_user_type(EMPLOYEE_ID) == UserType.EMPLOYEE
    assert auth_service.get_existing_user_type("unknown") is None
    assert auth_service.get_existing_user_type(None) is None


def test_pending_employee_is_not_registered(auth_service, employees_repo):
    employees_repo.create(make_employee("p" * 22, status=EmployeeStatus.PENDING, first_name="Paul"))

    assert auth_service.get_existing_user_type("p" * 22) is None


def test_device_awaiting_approval_is_not_registered(auth_service, employees_repo):
    employees_repo.set_device_ids(employee_id=EMPLOYEE_ID, device_ids=[EMPLOYEE_ID, "$" + "n" * 22])

    assert auth_service.get_existing_user_type("n" * 22) is None


def test_approved_secondary_device_is_registered(auth_service, employees_repo):
    employees_repo.set_device_ids(employee_id=EMPLOYEE_ID, device_ids=[EMPLOYEE_ID, "n" * 22])

    assert auth_service.get_existing_user_type("n" * 22) == UserType.EMPLOYEE


def test_check_user_exists(auth_service):
    user_type, record = auth_service.check_user_exists(EMPLOYEE_ID)
    assert user_type == UserType.EMPLOYEE
    assert record.id == EMPLOYEE_ID

    assert auth_service.check_user_exists("unknown") == (None, None)


def test_check_user_exists_swallows_database_errors():
    service = AuthService(BrokenRepository(), BrokenRepository())

    assert service.check_user_exists(EMPLOYEE_ID) == (None, None)


def test_get_existing_user_type_propagates_database_errors():
    service = AuthService(BrokenRepository(), BrokenRepository())

    with pytest.raises(DatabaseError):
        service.get_existing_user_type(EMPLOYEE_ID)


@pytest.mark.parametrize(
    "user_id, status, authorized",
    [
        (None, 400, False),
        ("acme-2", 200, True),
        ("intruder", 403, False),
    ],
)
def test_check_company_id(auth_service, user_id, status, authorized):
    result = auth_service.check_company_id(user_id)

    assert result.status_code == status
    assert result.authorized is authorized


def test_check_company_id_without_companies(conciergeries_repo, employees_repo):
    result = AuthService(conciergeries_repo, employees_repo).check_company_id("acme-1")

    assert result.status_code == 500
    assert result.to_dict() == {"error": "No companies configured"}


def test_load_companies():
    environ = {"ACME": "a1, a2,", "GLOBEX": ""}

    assert load_companies("ACME, GLOBEX,", environ) == {"ACME": ("a1", "a2"), "GLOBEX": ()}
    assert load_companies(None, environ) == {}


@pytest.mark.parametrize(
    "path",
    ["/static/app.css", "/api/missions", "/favicon.ico", "/robots.txt", "/k3j2h4g5f6d7s8a9q0w1e2"],
)
def test_exempt_paths(path):
    assert is_exempt(path) is True


@pytest.mark.parametrize(
    "path, user_id, user_type, expected",
    [
        ("/", None, None, None),
        ("/missions", None, None, "/"),
        ("/missions", CONCIERGERIE_ID, None, "/"),
        ("/", CONCIERGERIE_ID, "conciergerie", "/missions"),
        ("/waiting", EMPLOYEE_ID, "employee", "/missions"),
        ("/homes", CONCIERGERIE_ID, "conciergerie", None),
        ("/missions", EMPLOYEE_ID, "conciergerie", "/waiting"),
        ("/waiting", "unknown", "employee", None),
        ("/api/homes", None, None, None),
    ],
)
def test_resolve_redirect(auth_service, path, user_id, user_type, expected):
    assert resolve_redirect(path, user_id, user_type, auth_service) == expected


def test_resolve_redirect_on_database_error():
    service = AuthService(BrokenRepository(), BrokenRepository())

    assert resolve_redirect("/missions", EMPLOYEE_ID, "employee", service) == "/"
    assert resolve_redirect("/", EMPLOYEE_ID, "employee", service) is None
