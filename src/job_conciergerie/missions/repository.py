from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import MissionStatus
from .model import Mission


class MissionRepository(Protocol):
    # Every listing is ordered by start_date_time ascending.
    def list_all(self) -> Sequence[Mission]:
        raise NotImplementedError

    def get_by_id(self, mission_id: str) -> Optional[Mission]:
        raise NotImplementedError

    def list_by_home(self, home_id: str) -> Sequence[Mission]:
        raise NotImplementedError

    def list_by_conciergerie(self, conciergerie_name: str) -> Sequence[Mission]:
        raise NotImplementedError

    def list_by_employee(self, employee_id: str) -> Sequence[Mission]:
        raise NotImplementedError

    def list_available_for_employee(self, employee_id: str) -> Sequence[Mission]:
        """Unassigned or assigned to the employee, and allowed for them."""

        raise NotImplementedError

    def create(self, mission: Mission) -> Mission:
        raise NotImplementedError

    def update(self, mission: Mission) -> Optional[Mission]:
        """Persist home, tasks, dates, allowed employees and hours of ``mission``."""

        raise NotImplementedError

    def set_assignment(
        self,
        *,
        mission_id: str,
        employee_id: Optional[str],
        status: Optional[MissionStatus],
    ) -> Optional[Mission]:
        raise NotImplementedError

    def claim(self, *, mission_id: str, employee_id: str) -> Optional[Mission]:
        """Assign an unassigned mission as accepted. None when it was taken or is gone."""

        raise NotImplementedError

    def unassign_employee(self, employee_id: str) -> int:
        """Clear employee and status on every mission of ``employee_id``."""

        raise NotImplementedError

    def delete(self, mission_id: str) -> bool:
        raise NotImplementedError
