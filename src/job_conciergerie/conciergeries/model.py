from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from ..common.colors import color_value_by_name


@dataclass(frozen=True)
class ConciergerieNotificationSettings:
    accepted_missions: bool = True
    started_missions: bool = True
    completed_missions: bool = True
    missions_ended_without_completion: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ConciergerieNotificationSettings":
        if not data:
            return cls()
        return cls(
            accepted_missions=bool(data.get("acceptedMissions", True)),
            started_missions=bool(data.get("startedMissions", True)),
            completed_missions=bool(data.get("completedMissions", True)),
            missions_ended_without_completion=bool(data.get("missionsEndedWithoutCompletion", True)),
        )

    def to_dict(self) -> dict:
        return {
            "acceptedMissions": self.accepted_missions,
            "startedMissions": self.started_missions,
            "completedMissions": self.completed_missions,
            "missionsEndedWithoutCompletion": self.missions_ended_without_completion,
        }


@dataclass(frozen=True)
class Conciergerie:
    name: str
    email: str
    id: Optional[str] = None
    tel: str = ""
    color_name: str = ""
    notification_settings: ConciergerieNotificationSettings = field(default_factory=ConciergerieNotificationSettings)

    @property
    def color(self) -> str:
        return color_value_by_name(self.color_name)

    def with_id(self, user_id: str) -> "Conciergerie":
        return replace(self, id=user_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id or "",
            "name": self.name,
            "email": self.email,
            "tel": self.tel,
            "colorName": self.color_name,
            "color": self.color,
            "notificationSettings": self.notification_settings.to_dict(),
        }
