from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional, Tuple

from ..common.ids import contains_id, is_new_device
from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class EmployeeNotificationSettings:
    accepted_missions: bool = True
    mission_changed: bool = True
    mission_deleted: bool = True
    missions_canceled: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "EmployeeNotificationSettings":
        if not data:
            return cls()
        return cls(
            accepted_missions=bool(data.get("acceptedMissions", True)),
            mission_changed=bool(data.get("missionChanged", True)),
            mission_deleted=bool(data.get("missionDeleted", True)),
            missions_canceled=bool(data.get("missionsCanceled", True)),
        )

    def to_dict(self) -> dict:
        return {
            "acceptedMissions": self.accepted_missions,
            "missionChanged": self.mission_changed,
            "missionDeleted": self.mission_deleted,
            "missionsCanceled": self.missions_canceled,
        }


@dataclass(frozen=True)
class Employee:
    """A prestataire.

    ``id`` is the device id used at registration. ``device_ids`` lists every
    device of the employee (the primary one included); ids awaiting approval
    carry a ``$`` prefix.
    """

    id: str
    first_name: str
    family_name: str
    tel: str
    email: str
    geographic_zone: str
    status: EmployeeStatus = EmployeeStatus.PENDING
    message: Optional[str] = None
    conciergerie_name: Optional[str] = None
    notification_settings: EmployeeNotificationSettings = field(default_factory=EmployeeNotificationSettings)
    created_at: Optional[datetime] = None
    device_ids: Tuple[str, ...] = ()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.family_name}"

    @property
    def all_device_ids(self) -> Tuple[str, ...]:
        if contains_id(self.device_ids, self.id):
            return self.device_ids
        return (self.id,) + self.device_ids

    @property
    def connected_devices(self) -> Tuple[str, ...]:
        return tuple(d for d in self.all_device_ids if not is_new_device(d))

    def owns_device(self, device_id: str) -> bool:
        """True when ``device_id`` is an approved device of this employee."""
        return device_id in self.connected_devices

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "familyName": self.family_name,
            "tel": self.tel,
            "email": self.email,
            "geographicZone": self.geographic_zone,
            "message": self.message or "",
            "conciergerieName": self.conciergerie_name or "",
            "notificationSettings": self.notification_settings.to_dict(),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "deviceIds": list(self.all_device_ids),
        }
