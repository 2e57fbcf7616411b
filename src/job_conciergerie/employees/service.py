from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..common.ids import contains_id, get_new_device, is_new_device, strip_prefix
from ..common.logging import get_logger
from ..common.validators import require_email, require_french_phone, require_non_empty
from ..conciergeries.model import Conciergerie
from ..conciergeries.repository import ConciergerieRepository
from ..core.constants import DEFAULT_MAX_DEVICES
from ..core.enums import EmployeeStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.mysql_base import DatabaseError
from ..missions.repository import MissionRepository
from ..notifications.service import NotificationService
from .model import Employee, EmployeeNotificationSettings
from .repository import EmployeeRepository

LOG = get_logger("job_conciergerie.employees")

_STATUS_ORDER = {
    EmployeeStatus.PENDING: 0,
    EmployeeStatus.ACCEPTED: 1,
    EmployeeStatus.REJECTED: 2,
}


@dataclass(frozen=True)
class RegistrationResult:
    employee: Employee
    created: bool  # False when the device was attached to an existing employee
    email_sent: bool


def filter_by_conciergerie(employees: Iterable[Employee], conciergerie_name: Optional[str]) -> list[Employee]:
    """Employees without a pending application, or applying to ``conciergerie_name``."""
    if not conciergerie_name:
        return []
    wanted = conciergerie_name.lower()
    return [e for e in employees if not e.conciergerie_name or e.conciergerie_name.lower() == wanted]


def sort_employees(employees: Iterable[Employee]) -> list[Employee]:
    return sorted(
        employees,
        key=lambda e: (_STATUS_ORDER[e.status], e.family_name.lower(), e.first_name.lower()),
    )


def search_employees(employees: Iterable[Employee], term: Optional[str]) -> list[Employee]:
    employees = list(employees)
    if not term or not term.strip():
        return employees
    needle = term.strip().lower()
    return [
        e
        for e in employees
        if needle in e.first_name.lower() or needle in e.family_name.lower() or needle in e.email.lower()
    ]


class EmployeeService:
    def __init__(
        self,
        employees: EmployeeRepository,
        missions: MissionRepository,
        conciergeries: ConciergerieRepository,
        notifications: NotificationService,
        *,
        max_devices: int = DEFAULT_MAX_DEVICES,
    ):
        self._employees = employees
        self._missions = missions
        self._conciergeries = conciergeries
        self._notifications = notifications
        self._max_devices = int(max_devices)

    # -------- Queries --------
    def list_employees(self) -> list[Employee]:
        try:
            return list(self._employees.list_all())
        except DatabaseError:
            LOG.exception("error fetching employees")
            return []

    def list_for_conciergerie(self, conciergerie_name: Optional[str], term: Optional[str] = None) -> list[Employee]:
        employees = filter_by_conciergerie(self.list_employees(), conciergerie_name)
        return sort_employees(search_employees(employees, term))

    def get_by_id(self, employee_id: Optional[str]) -> Optional[Employee]:
        if not employee_id:
            return None
        return self._employees.get_by_id(employee_id)

    def get_by_device_id(self, device_id: Optional[str]) -> Optional[Employee]:
        if not device_id:
            return None
        return self._employees.get_by_device_id(device_id)

    def _require(self, employee_id: str) -> Employee:
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError("Employé non trouvé")
        return employee

    # -------- Registration --------
    def register(self, *, device_id: str, data: Mapping[str, Any]) -> RegistrationResult:
        device_id = require_non_empty(device_id, "L'identifiant")
        first_name = require_non_empty(data.get("firstName"), "Le prénom")
        family_name = require_non_empty(data.get("familyName"), "Le nom")
        email = require_email(data.get("email"))
        tel = require_french_phone(data.get("tel"))
        geographic_zone = require_non_empty(data.get("geographicZone"), "Le lieu de vie")
        conciergerie_name = require_non_empty(data.get("conciergerieName"), "La conciergerie")
        message = (data.get("message") or "").strip() or None

        existing = self._employees.find_by_name(first_name=first_name, family_name=family_name)
        if existing:
            return self._attach_device(existing, device_id)

        if self._employees.exists(first_name=first_name, family_name=family_name, tel=tel, email=email):
            raise ValidationError("Un employé avec ce numéro de téléphone ou cet email existe déjà.")

        conciergerie = self._conciergeries.get_by_name(conciergerie_name)
        if not conciergerie:
            raise NotFoundError("Conciergerie non trouvée")

        employee = self._employees.create(
            Employee(
                id=device_id,
                device_ids=(device_id,),
                first_name=first_name,
                family_name=family_name,
                tel=tel,
                email=email,
                geographic_zone=geographic_zone,
                message=message,
                conciergerie_name=conciergerie.name,
                notification_settings=EmployeeNotificationSettings.from_dict(data.get("notificationSettings")),
                status=EmployeeStatus.PENDING,
            )
        )
        LOG.info("employee %s registered for %s", employee.id, conciergerie.name)
        sent = self._notifications.send_registration(conciergerie, employee)
        return RegistrationResult(employee=employee, created=True, email_sent=sent)

    def _attach_device(self, employee: Employee, device_id: str) -> RegistrationResult:
        connected = employee.connected_devices
        if contains_id(employee.all_device_ids, device_id):
            return RegistrationResult(employee=employee, created=False, email_sent=False)
        if len(connected) >= self._max_devices:
            raise ValidationError(
                f"Cet employé a atteint le nombre maximum d'appareils autorisés ({self._max_devices})."
            )

        # Without any approved device the new one can connect right away
        new_id = get_new_device(device_id) if connected else device_id
        updated = self._employees.set_device_ids(
            employee_id=employee.id,
            device_ids=list(employee.all_device_ids) + [new_id],
        )
        if not updated:
            raise ValidationError("Employé non mis à jour dans la base de données")

        sent = self._notifications.send_new_device(updated) if connected else False
        return RegistrationResult(employee=updated, created=False, email_sent=sent)

    # -------- Conciergerie decisions --------
    def update_status(self, *, conciergerie: Conciergerie, employee_id: str, status: EmployeeStatus) -> Employee:
        employee = self._require(employee_id)
        if employee.conciergerie_name and employee.conciergerie_name.lower() != conciergerie.name.lower():
            raise AuthorizationError("Cet employé a postulé auprès d'une autre conciergerie")

        updated = self._employees.update_status(employee_id=employee.id, status=status)
        if not updated:
            raise NotFoundError("Employé non trouvé")

        is_accepted = status == EmployeeStatus.ACCEPTED
        if status == EmployeeStatus.REJECTED:
            released = self._missions.unassign_employee(employee.id)
            if released:
                LOG.info("employee %s rejected, %d missions released", employee.id, released)

        missions_count = 0
        if is_accepted:
            missions_count = sum(
                1
                for m in self._missions.list_available_for_employee(employee.id)
                if m.is_available and m.conciergerie_name == conciergerie.name
            )

        if status != EmployeeStatus.PENDING:
            self._notifications.send_acceptance(updated, conciergerie, missions_count, is_accepted)
        return updated

    # -------- Settings --------
    def update_settings(self, employee_id: Optional[str], data: Mapping[str, Any]) -> Optional[Employee]:
        if not employee_id:
            return None

        email = data.get("email")
        tel = data.get("tel")
        settings = data.get("notificationSettings")
        if settings:
            current = self._require(employee_id).notification_settings.to_dict()
            settings = {**current, **{k: bool(v) for k, v in settings.items()}}

        return self._employees.update_settings(
            employee_id=employee_id,
            tel=require_french_phone(tel) if tel else None,
            email=require_email(email) if email else None,
            geographic_zone=data.get("geographicZone") or None,
            message=data.get("message") or None,
            conciergerie_name=data.get("conciergerieName") or None,
            notification_settings=EmployeeNotificationSettings.from_dict(settings) if settings else None,
        )

    # -------- Devices --------
    @staticmethod
    def connected_devices(employee: Employee) -> Sequence[str]:
        return employee.connected_devices

    def _require_owner(self, employee: Employee, acting_device_id: Optional[str]) -> None:
        if not acting_device_id or not employee.owns_device(acting_device_id):
            raise AuthorizationError("Seul un appareil déjà connecté peut gérer les appareils")

    def approve_device(self, *, employee_id: str, device_id: str, acting_device_id: Optional[str]) -> Employee:
        employee = self._require(employee_id)
        self._require_owner(employee, acting_device_id)

        pending = get_new_device(strip_prefix(device_id))
        if pending not in employee.all_device_ids:
            raise NotFoundError("Appareil non trouvé")
        if len(employee.connected_devices) >= self._max_devices:
            raise ValidationError(f"Nombre maximum d'appareils atteint ({self._max_devices})")

        devices = [strip_prefix(d) if d == pending else d for d in employee.all_device_ids]
        updated = self._employees.set_device_ids(employee_id=employee.id, device_ids=devices)
        if not updated:
            raise NotFoundError("Employé non trouvé")
        return updated

    def remove_device(self, *, employee_id: str, device_id: str, acting_device_id: Optional[str]) -> Employee:
        employee = self._require(employee_id)
        self._require_owner(employee, acting_device_id)

        if strip_prefix(device_id) == employee.id:
            raise ValidationError("L'appareil principal ne peut pas être supprimé")
        if not contains_id(employee.all_device_ids, device_id):
            raise NotFoundError("Appareil non trouvé")

        target = strip_prefix(device_id)
        devices = [d for d in employee.all_device_ids if strip_prefix(d) != target]
        updated = self._employees.set_device_ids(employee_id=employee.id, device_ids=devices)
        if not updated:
            raise NotFoundError("Employé non trouvé")
        return updated

    @staticmethod
    def pending_devices(employee: Employee) -> list[str]:
        return [strip_prefix(d) for d in employee.all_device_ids if is_new_device(d)]

    def delete(self, employee_id: str) -> bool:
        employee = self._require(employee_id)
        self._missions.unassign_employee(employee.id)
        return self._employees.delete(employee.id)
