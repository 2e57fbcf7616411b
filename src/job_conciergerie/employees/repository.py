from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import EmployeeStatus
from .model import Employee, EmployeeNotificationSettings


class EmployeeRepository(Protocol):
    def list_all(self) -> Sequence[Employee]:
        """Newest first."""

        raise NotImplementedError

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_device_id(self, device_id: str) -> Optional[Employee]:
        """Employee owning ``device_id`` as primary id or extra device, approved or not."""

        raise NotImplementedError

    def find_by_name(self, *, first_name: str, family_name: str) -> Optional[Employee]:
        """Case-insensitive match on first and family name."""

        raise NotImplementedError

    def exists(self, *, first_name: str, family_name: str, tel: str, email: str) -> bool:
        raise NotImplementedError

    def create(self, employee: Employee) -> Employee:
        raise NotImplementedError

    def update_status(self, *, employee_id: str, status: EmployeeStatus) -> Optional[Employee]:
        """Set the status and clear the pending-only fields (message, conciergerie_name)."""

        raise NotImplementedError

    def update_settings(
        self,
        *,
        employee_id: str,
        tel: Optional[str] = None,
        email: Optional[str] = None,
        geographic_zone: Optional[str] = None,
        message: Optional[str] = None,
        conciergerie_name: Optional[str] = None,
        notification_settings: Optional[EmployeeNotificationSettings] = None,
    ) -> Optional[Employee]:
        raise NotImplementedError

    def set_device_ids(self, *, employee_id: str, device_ids: Sequence[str]) -> Optional[Employee]:
        raise NotImplementedError

    def delete(self, employee_id: str) -> bool:
        raise NotImplementedError
