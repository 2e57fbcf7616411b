from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import MissionStatus, Task


@dataclass(frozen=True)
class Mission:
    id: str
    home_id: str
    tasks: Tuple[Task, ...]
    start_date_time: datetime
    end_date_time: datetime
    conciergerie_name: str
    hours: float = 0.0
    employee_id: Optional[str] = None
    status: Optional[MissionStatus] = None
    allowed_employees: Optional[Tuple[str, ...]] = None  # None or empty: every employee
    modified_date: Optional[datetime] = None

    @property
    def is_available(self) -> bool:
        return not self.employee_id

    def is_allowed_for(self, employee_id: str) -> bool:
        if not self.allowed_employees:
            return True
        return employee_id in self.allowed_employees

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "homeId": self.home_id,
            "tasks": [t.value for t in self.tasks],
            "startDateTime": self.start_date_time.isoformat(),
            "endDateTime": self.end_date_time.isoformat(),
            "employeeId": self.employee_id,
            "modifiedDate": self.modified_date.isoformat() if self.modified_date else None,
            "conciergerieName": self.conciergerie_name,
            "status": self.status.value if self.status else None,
            "allowedEmployees": list(self.allowed_employees) if self.allowed_employees is not None else None,
            "hours": self.hours,
        }


@dataclass(frozen=True)
class MissionPoints:
    total_points: float
    points_per_day: float
