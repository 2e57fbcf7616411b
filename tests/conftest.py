from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from job_conciergerie.auth.service import AuthService
from job_conciergerie.common.ids import contains_id
from job_conciergerie.conciergeries.model import Conciergerie
from job_conciergerie.conciergeries.service import ConciergerieService
from job_conciergerie.container import Container
from job_conciergerie.core.enums import EmployeeStatus, MissionStatus, Task
from job_conciergerie.core.exceptions import EmailDeliveryError
from job_conciergerie.employees.model import Employee
from job_conciergerie.employees.service import EmployeeService
from job_conciergerie.homes.model import Home
from job_conciergerie.homes.service import HomeService
from job_conciergerie.missions.model import Mission
from job_conciergerie.missions.service import MissionService
from job_conciergerie.notifications.service import NotificationService

NOW = datetime(2025, 3, 10, 12, 0)


class InMemoryConciergeries:
    def __init__(self, *items: Conciergerie):
        self._by_name = {c.name: c for c in items}

    def list_all(self):
        return list(self._by_name.values())

    def get_by_id(self, user_id):
        return next((c for c in self._by_name.values() if c.id and c.id == user_id), None)

    def get_by_name(self, name):
        return self._by_name.get(name)

    def create(self, conciergerie):
        self._by_name[conciergerie.name] = conciergerie
        return conciergerie

    def update(self, *, user_id, name=None, email=None, tel=None, color_name=None, notification_settings=None):
        current = self.get_by_id(user_id)
        if not current:
            return None
        changes = {
            "name": name,
            "email": email,
            "tel": tel,
            "color_name": color_name,
            "notification_settings": notification_settings,
        }
        updated = replace(current, **{k: v for k, v in changes.items() if v is not None})
        del self._by_name[current.name]
        self._by_name[updated.name] = updated
        return updated

    def set_id(self, *, name, user_id):
        current = self._by_name.get(name)
        if not current:
            return False
        self._by_name[name] = current.with_id(user_id)
        return True


class InMemoryEmployees:
    def __init__(self, *items: Employee):
        self._by_id = {e.id: e for e in items}

    def list_all(self):
        return list(reversed(list(self._by_id.values())))

    def get_by_id(self, employee_id):
        return self._by_id.get(employee_id)

    def get_by_device_id(self, device_id):
        for employee in self._by_id.values():
            if employee.id == device_id or contains_id(employee.device_ids, device_id):
                return employee
        return None

    def find_by_name(self, *, first_name, family_name):
        for employee in self._by_id.values():
            if (
                employee.first_name.lower() == first_name.lower()
                and employee.family_name.lower() == family_name.lower()
            ):
                return employee
        return None

    def exists(self, *, first_name, family_name, tel, email):
        return any(
            e.tel == tel
            or e.email.lower() == email.lower()
            or (e.first_name.lower() == first_name.lower() and e.family_name.lower() == family_name.lower())
            for e in self._by_id.values()
        )

    def create(self, employee):
        employee = replace(employee, created_at=employee.created_at or NOW)
        self._by_id[employee.id] = employee
        return employee

    def update_status(self, *, employee_id, status):
        current = self._by_id.get(employee_id)
        if not current:
            return None
        self._by_id[employee_id] = replace(current, status=status, message=None, conciergerie_name=None)
        return self._by_id[employee_id]

    def update_settings(self, *, employee_id, **fields):
        current = self._by_id.get(employee_id)
        if not current:
            return None
        self._by_id[employee_id] = replace(current, **{k: v for k, v in fields.items() if v is not None})
        return self._by_id[employee_id]

    def set_device_ids(self, *, employee_id, device_ids):
        current = self._by_id.get(employee_id)
        if not current:
            return None
        self._by_id[employee_id] = replace(current, device_ids=tuple(device_ids))
        return self._by_id[employee_id]

    def delete(self, employee_id):
        return self._by_id.pop(employee_id, None) is not None


class InMemoryHomes:
    def __init__(self, *items: Home):
        self._by_id = {h.id: h for h in items}

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda h: h.title)

    def get_by_id(self, home_id):
        return self._by_id.get(home_id)

    def list_by_conciergerie(self, conciergerie_name):
        return [h for h in self.list_all() if h.conciergerie_name == conciergerie_name]

    def create(self, home):
        self._by_id[home.id] = home
        return home

    def update(self, home):
        if home.id not in self._by_id:
            return None
        self._by_id[home.id] = home
        return home

    def delete(self, home_id):
        return self._by_id.pop(home_id, None) is not None


class InMemoryMissions:
    def __init__(self, *items: Mission):
        self._by_id = {m.id: m for m in items}

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda m: m.start_date_time)

    def get_by_id(self, mission_id):
        return self._by_id.get(mission_id)

    def list_by_home(self, home_id):
        return [m for m in self.list_all() if m.home_id == home_id]

    def list_by_conciergerie(self, conciergerie_name):
        return [m for m in self.list_all() if m.conciergerie_name == conciergerie_name]

    def list_by_employee(self, employee_id):
        return [m for m in self.list_all() if m.employee_id == employee_id]

    def list_available_for_employee(self, employee_id):
        return [
            m
            for m in self.list_all()
            if (not m.employee_id or m.employee_id == employee_id) and m.is_allowed_for(employee_id)
        ]

    def create(self, mission):
        mission = replace(mission, modified_date=NOW)
        self._by_id[mission.id] = mission
        return mission

    def update(self, mission):
        current = self._by_id.get(mission.id)
        if not current:
            return None
        self._by_id[mission.id] = replace(
            current,
            home_id=mission.home_id,
            tasks=mission.tasks,
            start_date_time=mission.start_date_time,
            end_date_time=mission.end_date_time,
            allowed_employees=mission.allowed_employees,
            hours=mission.hours,
        )
        return self._by_id[mission.id]

    def set_assignment(self, *, mission_id, employee_id, status):
        current = self._by_id.get(mission_id)
        if not current:
            return None
        self._by_id[mission_id] = replace(current, employee_id=employee_id, status=status)
        return self._by_id[mission_id]

    def claim(self, *, mission_id, employee_id):
        current = self._by_id.get(mission_id)
        if not current or current.employee_id:
            return None
        return self.set_assignment(mission_id=mission_id, employee_id=employee_id, status=MissionStatus.ACCEPTED)

    def unassign_employee(self, employee_id):
        count = 0
        for mission in list(self._by_id.values()):
            if mission.employee_id == employee_id:
                self._by_id[mission.id] = replace(mission, employee_id=None, status=None)
                count += 1
        return count

    def delete(self, mission_id):
        return self._by_id.pop(mission_id, None) is not None


class InMemoryFailedEmails:
    def __init__(self):
        self.items = {}

    def add(self, item):
        self.items[item.id] = item

    def list_all(self):
        return sorted(self.items.values(), key=lambda i: i.created_at)

    def get(self, email_id):
        return self.items.get(email_id)

    def record_attempt(self, *, email_id, attempted_at):
        current = self.items[email_id]
        self.items[email_id] = replace(current, attempts=current.attempts + 1, last_attempt=attempted_at)

    def remove(self, email_id):
        self.items.pop(email_id, None)


class RecordingSender:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, email):
        if self.fail:
            raise EmailDeliveryError("SMTP relay unreachable")
        self.sent.append(email)

    def subjects(self):
        return [e.subject for e in self.sent]


class RecordingStorage:
    def __init__(self):
        self.unpinned = []

    def unpin_images(self, images):
        self.unpinned.extend(images)

    def image_url(self, cid_id):
        return f"https://gateway.example.test/ipfs/{cid_id.split('/')[0]}"


def make_conciergerie(name="Azur Conciergerie", user_id="c" * 22, **kwargs) -> Conciergerie:
    kwargs.setdefault("email", "contact@azur.fr")
    return Conciergerie(name=name, id=user_id, **kwargs)


def make_employee(employee_id="e" * 22, status=EmployeeStatus.ACCEPTED, **kwargs) -> Employee:
    defaults = dict(
        first_name="Marie",
        family_name="Durand",
        tel="06 12 34 56 78",
        email="marie.durand@example.fr",
        geographic_zone="Nice",
        device_ids=(employee_id,),
    )
    defaults.update(kwargs)
    return Employee(id=employee_id, status=status, **defaults)


def make_home(home_id="home1", conciergerie_name="Azur Conciergerie", **kwargs) -> Home:
    defaults = dict(
        title="Villa Les Pins",
        description="Villa avec piscine",
        objectives=("Vider les poubelles",),
        images=("bafycid1/file1",),
        geographic_zone="Nice",
        hours_of_cleaning=3.0,
        hours_of_gardening=1.5,
    )
    defaults.update(kwargs)
    return Home(id=home_id, conciergerie_name=conciergerie_name, **defaults)


def make_mission(mission_id="m1", home_id="home1", conciergerie_name="Azur Conciergerie", **kwargs) -> Mission:

    defaults = dict(
        tasks=(Task.CLEANING,),
        start_date_time=datetime(2025, 3, 12, 9, 0),
        end_date_time=datetime(2025, 3, 12, 12, 0),
        hours=3.0,
    )
    defaults.update(kwargs)
    return Mission(id=mission_id, home_id=home_id, conciergerie_name=conciergerie_name, **defaults)


@pytest.fixture
def conciergerie() -> Conciergerie:
    return make_conciergerie()


@pytest.fixture
def conciergeries_repo(conciergerie):
    return InMemoryConciergeries(conciergerie, make_conciergerie("Riviera Services", "r" * 22, email="hello@riviera.fr"))


@pytest.fixture
def employees_repo():
    return InMemoryEmployees(make_employee())


@pytest.fixture
def homes_repo():
    return InMemoryHomes(make_home())


@pytest.fixture
def missions_repo():
    return InMemoryMissions(make_mission())


@pytest.fixture
def failed_emails_repo():
    return InMemoryFailedEmails()


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def notifications(sender, failed_emails_repo):
    return NotificationService(sender, failed_emails_repo, clock=lambda: NOW)


@pytest.fixture
def conciergerie_service(conciergeries_repo, notifications):
    return ConciergerieService(conciergeries_repo, notifications)


@pytest.fixture
def employee_service(employees_repo, missions_repo, conciergeries_repo, notifications):
    return EmployeeService(employees_repo, missions_repo, conciergeries_repo, notifications, max_devices=3)


@pytest.fixture
def home_service(homes_repo, missions_repo, storage):
    return HomeService(homes_repo, missions_repo, storage)


@pytest.fixture
def mission_service(missions_repo, homes_repo, employees_repo, conciergeries_repo, notifications):
    return MissionService(
        missions_repo,
        homes_repo,
        employees_repo,
        conciergeries_repo,
        notifications,
        clock=lambda: NOW,
    )


@pytest.fixture
def auth_service(conciergeries_repo, employees_repo):
    return AuthService(conciergeries_repo, employees_repo, companies={"ACME": ("acme-1", "acme-2")})


@pytest.fixture
def container(
    conciergerie_service,
    employee_service,
    home_service,
    mission_service,
    auth_service,
    notifications,
    storage,
) -> Container:
    return Container(
        conciergerie_service=conciergerie_service,
        employee_service=employee_service,
        home_service=home_service,
        mission_service=mission_service,
        auth_service=auth_service,
        notification_service=notifications,
        storage=storage,
    )


@pytest.fixture
def app(container):
    from job_conciergerie.main import create_app

    return create_app("job_conciergerie.config.testing", container=container)


@pytest.fixture
def client(app):
    return app.test_client()


def as_user(client, user_id: str, user_type: Optional[str]):
    client.set_cookie("user_id", user_id)
    if user_type:
        client.set_cookie("user_type", user_type)
    return client
