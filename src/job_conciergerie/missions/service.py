from __future__ import annotations

from collections import OrderedDict
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import format_datetime, now_local, parse_iso_datetime
from ..common.ids import generate_simple_id
from ..common.logging import get_logger
from ..conciergeries.model import Conciergerie
from ..conciergeries.repository import ConciergerieRepository
from ..core.enums import EmployeeStatus, MissionStatus, Task, UserType
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.mysql_base import DatabaseError
from ..employees.repository import EmployeeRepository
from ..homes.model import Home
from ..homes.repository import HomeRepository
from ..notifications.service import NotificationService
from .model import Mission
from .points import exceeds_daily_points, mission_hours
from .repository import MissionRepository

LOG = get_logger("job_conciergerie.missions")

_STATUS_SETTING = {
    MissionStatus.ACCEPTED: "accepted_missions",
    MissionStatus.STARTED: "started_missions",
    MissionStatus.COMPLETED: "completed_missions",
}


def _truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def parse_tasks(values: Any) -> tuple[Task, ...]:
    if not values or not isinstance(values, (list, tuple)):
        raise ValidationError("Veuillez sélectionner au moins une tâche")
    tasks = []
    for value in values:
        try:
            task = Task(value)
        except ValueError:
            raise ValidationError(f"Tâche invalide : {value}")
        if task not in tasks:
            tasks.append(task)
    return tuple(tasks)


def describe_changes(before: Mission, after: Mission, new_home: Optional[Home]) -> list[str]:
    """French change lines for the mission-updated email."""
    changes = []
    if before.start_date_time != after.start_date_time:
        changes.append(f"Date/heure de début modifiée: {format_datetime(after.start_date_time)}")
    if before.end_date_time != after.end_date_time:
        changes.append(f"Date/heure de fin modifiée: {format_datetime(after.end_date_time)}")

    old_tasks = ", ".join(sorted(t.value for t in before.tasks))
    new_tasks = ", ".join(sorted(t.value for t in after.tasks))
    if old_tasks != new_tasks:
        changes.append(f"Tâches modifiées: {new_tasks}")

    if before.home_id != after.home_id and new_home:
        changes.append(f"Bien modifié: {new_home.title}")
    return changes


def late_missions(missions: Iterable[Mission], now: datetime) -> list[Mission]:
    """Assigned missions that ended before ``now`` without being completed."""
    return [
        m
        for m in missions
        if m.employee_id and m.status != MissionStatus.COMPLETED and m.end_date_time < now
    ]


class MissionService:
    def __init__(
        self,
        missions: MissionRepository,
        homes: HomeRepository,
        employees: EmployeeRepository,
        conciergeries: ConciergerieRepository,
        notifications: NotificationService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._missions = missions
        self._homes = homes
        self._employees = employees
        self._conciergeries = conciergeries
        self._notifications = notifications
        self._clock = clock

    # -------- Queries --------
    def list_missions(self) -> list[Mission]:
        try:
            return list(self._missions.list_all())
        except DatabaseError:
            LOG.exception("error fetching missions")
            return []

    def get_by_id(self, mission_id: Optional[str]) -> Optional[Mission]:
        if not mission_id:
            return None
        try:
            return self._missions.get_by_id(mission_id)
        except DatabaseError:
            LOG.exception("error fetching mission %s", mission_id)
            return None

    def list_by_home(self, home_id: str) -> list[Mission]:
        try:
            return list(self._missions.list_by_home(home_id))
        except DatabaseError:
            LOG.exception("error fetching missions for home %s", home_id)
            return []

    def list_by_conciergerie(self, conciergerie_name: str) -> list[Mission]:
        try:
            return list(self._missions.list_by_conciergerie(conciergerie_name))
        except DatabaseError:
            LOG.exception("error fetching missions for conciergerie %s", conciergerie_name)
            return []

    def list_available_for_employee(self, employee_id: str) -> list[Mission]:
        try:
            return list(self._missions.list_available_for_employee(employee_id))
        except DatabaseError:
            LOG.exception("error fetching available missions for employee %s", employee_id)
            return []

    def _require(self, mission_id: str) -> Mission:
        mission = self._missions.get_by_id(mission_id)
        if not mission:
            raise NotFoundError("Mission non trouvée")
        return mission

    def _require_owned(self, conciergerie: Conciergerie, mission_id: str) -> Mission:
        mission = self._require(mission_id)
        if mission.conciergerie_name != conciergerie.name:
            raise AuthorizationError("Cette mission appartient à une autre conciergerie")
        return mission

    def _employee_for_device(self, device_id: Optional[str]):
        if not device_id:
            return None
        employee = self._employees.get_by_device_id(device_id)
        if employee and employee.owns_device(device_id):
            return employee
        return None

    def _require_home(self, conciergerie: Conciergerie, home_id: Any) -> Home:
        if not home_id:
            raise ValidationError("Le bien est requis")
        home = self._homes.get_by_id(home_id)
        if not home:
            raise NotFoundError("Bien non trouvé")
        if home.conciergerie_name != conciergerie.name:
            raise AuthorizationError("Ce bien appartient à une autre conciergerie")
        return home

    # -------- Duplicates --------
    def mission_exists(self, candidate: Mission, *, exclude_id: Optional[str] = None) -> bool:
        start = _truncate_to_minute(candidate.start_date_time)
        end = _truncate_to_minute(candidate.end_date_time)
        tasks = sorted(t.value for t in candidate.tasks)

        for mission in self._missions.list_by_home(candidate.home_id):
            if exclude_id and mission.id == exclude_id:
                continue
            if mission.conciergerie_name != candidate.conciergerie_name:
                continue
            if _truncate_to_minute(mission.start_date_time) != start:
                continue
            if _truncate_to_minute(mission.end_date_time) != end:
                continue
            if sorted(t.value for t in mission.tasks) == tasks:
                return True
        return False

    # -------- Conciergerie operations --------
    def _build(self, conciergerie: Conciergerie, data: Mapping[str, Any], *, mission_id: str) -> tuple[Mission, Home]:
        home = self._require_home(conciergerie, data.get("homeId"))
        tasks = parse_tasks(data.get("tasks"))
        start = parse_iso_datetime(data.get("startDateTime"), "La date de début")
        end = parse_iso_datetime(data.get("endDateTime"), "La date de fin")
        if end <= start:
            raise ValidationError("La date de fin doit être après la date de début")

        allowed = data.get("allowedEmployees")
        mission = Mission(
            id=mission_id,
            home_id=home.id,
            tasks=tasks,
            start_date_time=start,
            end_date_time=end,
            conciergerie_name=conciergerie.name,
            hours=mission_hours(home, tasks),
            allowed_employees=tuple(str(a) for a in allowed) if allowed else None,
        )
        return mission, home

    def create(self, conciergerie: Conciergerie, data: Mapping[str, Any]) -> Mission:
        mission, _ = self._build(conciergerie, data, mission_id=generate_simple_id())
        if self.mission_exists(mission):
            raise ValidationError("Une mission identique existe déjà")

        created = self._missions.create(mission)
        LOG.info("mission %s created by %s", created.id, conciergerie.name)
        return created

    def update(self, conciergerie: Conciergerie, mission_id: str, data: Mapping[str, Any]) -> Mission:
        existing = self._require_owned(conciergerie, mission_id)
        candidate, home = self._build(conciergerie, data, mission_id=existing.id)
        if self.mission_exists(candidate, exclude_id=existing.id):
            raise ValidationError("Une mission identique existe déjà")

        # Assignment and status are untouched by an edit
        candidate = replace(candidate, employee_id=existing.employee_id, status=existing.status)
        updated = self._missions.update(candidate)
        if not updated:
            raise NotFoundError("Mission non trouvée")

        changes = describe_changes(existing, updated, home)
        employee = self._employees.get_by_id(existing.employee_id) if existing.employee_id else None
        if employee and changes and employee.notification_settings.mission_changed:
            self._notifications.send_mission_updated(updated, home, employee, conciergerie, changes)
        return updated

    def delete(self, conciergerie: Conciergerie, mission_id: str) -> bool:
        mission = self._require_owned(conciergerie, mission_id)
        deleted = self._missions.delete(mission.id)
        if not deleted:
            return False

        LOG.info("mission %s deleted by %s", mission.id, conciergerie.name)
        self._notify_removed(mission, conciergerie, "deleted")
        return True

    def cancel(self, conciergerie: Conciergerie, mission_id: str) -> Mission:
        """Take the mission back from its employee and offer it again."""
        mission = self._require_owned(conciergerie, mission_id)
        updated = self._missions.set_assignment(mission_id=mission.id, employee_id=None, status=None)
        if not updated:
            raise NotFoundError("Mission non trouvée")

        self._notify_removed(mission, conciergerie, "canceled")
        return updated

    def _notify_removed(self, mission: Mission, conciergerie: Conciergerie, removal: str) -> None:
        if not mission.employee_id:
            return
        employee = self._employees.get_by_id(mission.employee_id)
        home = self._homes.get_by_id(mission.home_id)
        if not employee or not home:
            return
        settings = employee.notification_settings
        enabled = settings.mission_deleted if removal == "deleted" else settings.missions_canceled
        if enabled:
            self._notifications.send_mission_removed(mission, home, employee, conciergerie, removal)

    # -------- Employee operations --------
    def accept(self, employee_id: str, mission_id: str) -> Mission:
        employee = self._employee_for_device(employee_id)
        if not employee or employee.status != EmployeeStatus.ACCEPTED:
            raise AuthorizationError("Seul un prestataire accepté peut accepter une mission")

        mission = self._require(mission_id)
        if mission.employee_id and mission.employee_id != employee.id:
            raise ValidationError("Cette mission a déjà été acceptée par un autre prestataire")
        if mission.employee_id:
            if mission.status != MissionStatus.ACCEPTED:
                raise ValidationError("Cette mission est déjà démarrée ou terminée")
            return mission
        if not mission.is_allowed_for(employee.id):
            raise AuthorizationError("Cette mission n'est pas proposée à ce prestataire")
        if exceeds_daily_points(employee.id, mission, self._missions.list_by_employee(employee.id)):
            raise ValidationError("Le maximum de 3 points/jour est déjà atteint !")

        updated = self._missions.claim(mission_id=mission.id, employee_id=employee.id)
        if not updated:
            if not self._missions.get_by_id(mission.id):
                raise NotFoundError("Mission non trouvée")
            raise ValidationError("Cette mission a déjà été acceptée par un autre prestataire")
        LOG.info("mission %s accepted by %s", updated.id, employee.id)

        self._notify_status(updated, employee.id, MissionStatus.ACCEPTED)
        if employee.notification_settings.accepted_missions:
            home = self._homes.get_by_id(updated.home_id)
            conciergerie = self._conciergeries.get_by_name(updated.conciergerie_name)
            if home and conciergerie:
                self._notifications.send_mission_acceptance(updated, home, employee, conciergerie)
        return updated

    def start(self, employee_id: str, mission_id: str, now: Optional[datetime] = None) -> Mission:
        mission = self._require(mission_id)
        employee = self._employee_for_device(employee_id)
        if not employee or mission.employee_id != employee.id:
            raise AuthorizationError("Cette mission n'est pas attribuée à ce prestataire")
        if mission.status != MissionStatus.ACCEPTED:
            raise ValidationError("Seule une mission acceptée peut être démarrée")

        now = now or self._clock()
        if now < mission.start_date_time:
            raise ValidationError("La mission ne peut pas être démarrée avant son heure de début")

        updated = self._missions.set_assignment(
            mission_id=mission.id,
            employee_id=mission.employee_id,
            status=MissionStatus.STARTED,
        )
        if not updated:
            raise NotFoundError("Mission non trouvée")
        self._notify_status(updated, employee.id, MissionStatus.STARTED)
        return updated

    def complete(self, user_id: str, user_type: Optional[str], mission_id: str) -> Mission:
        mission = self._require(mission_id)
        if not mission.status or not mission.employee_id:
            raise ValidationError("Cette mission n'a pas été acceptée")

        if user_type == UserType.CONCIERGERIE.value:
            conciergerie = self._conciergeries.get_by_id(user_id)
            allowed = bool(conciergerie) and conciergerie.name == mission.conciergerie_name
        else:
            employee = self._employee_for_device(user_id)
            allowed = bool(employee) and employee.id == mission.employee_id
        if not allowed:
            raise AuthorizationError("Vous ne pouvez pas terminer cette mission")

        updated = self._missions.set_assignment(
            mission_id=mission.id,
            employee_id=mission.employee_id,
            status=MissionStatus.COMPLETED,
        )
        if not updated:
            raise NotFoundError("Mission non trouvée")
        self._notify_status(updated, mission.employee_id, MissionStatus.COMPLETED)
        return updated

    def _notify_status(self, mission: Mission, employee_id: str, status: MissionStatus) -> bool:
        conciergerie = self._conciergeries.get_by_name(mission.conciergerie_name)
        if not conciergerie or not getattr(conciergerie.notification_settings, _STATUS_SETTING[status]):
            return False
        home = self._homes.get_by_id(mission.home_id)
        employee = self._employees.get_by_id(employee_id)
        if not home or not employee:
            return False
        return self._notifications.send_mission_status(mission, home, employee, conciergerie, status)

    # -------- Late missions --------
    def late_missions(self, now: Optional[datetime] = None) -> list[Mission]:
        return late_missions(self.list_missions(), now or self._clock())

    def notify_late_missions(self, now: Optional[datetime] = None) -> int:
        """Email each opted-in conciergerie about its unfinished missions. Returns the number sent."""
        by_conciergerie: "OrderedDict[str, list[Mission]]" = OrderedDict()
        for mission in self.late_missions(now):
            by_conciergerie.setdefault(mission.conciergerie_name, []).append(mission)

        sent = 0
        for name, missions in by_conciergerie.items():
            conciergerie = self._conciergeries.get_by_name(name)
            if not conciergerie or not conciergerie.notification_settings.missions_ended_without_completion:
                continue
            for mission in missions:
                home = self._homes.get_by_id(mission.home_id)
                employee = self._employees.get_by_id(mission.employee_id)
                if home and employee and self._notifications.send_late_completion(
                    mission, home, employee, conciergerie
                ):
                    sent += 1

        if sent:
            LOG.info("late completion emails sent: %d", sent)
        return sent

    # -------- Helpers for views --------
    def homes_for(self, missions: Sequence[Mission]) -> list[Home]:
        seen: dict[str, Home] = {}
        for mission in missions:
            if mission.home_id not in seen:
                home = self._homes.get_by_id(mission.home_id)
                if home:
                    seen[home.id] = home
        return list(seen.values())
