from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import MissionStatus, Task
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, to_json
from .model import Mission
from .repository import MissionRepository

_COLUMNS = (
    "id, home_id, tasks, start_date_time, end_date_time, employee_id, modified_date, "
    "conciergerie_name, status, allowed_employees, hours"
)


def _row_to_mission(r: dict) -> Mission:
    allowed = from_json(r.get("allowed_employees"))
    return Mission(
        id=str(r["id"]),
        home_id=str(r["home_id"]),
        tasks=tuple(Task(t) for t in from_json(r.get("tasks"), []) or ()),
        start_date_time=r["start_date_time"],
        end_date_time=r["end_date_time"],
        employee_id=r.get("employee_id") or None,
        modified_date=r.get("modified_date"),
        conciergerie_name=str(r["conciergerie_name"]),
        status=MissionStatus(r["status"]) if r.get("status") else None,
        allowed_employees=tuple(allowed) if allowed is not None else None,
        hours=float(r.get("hours") or 0),
    )


def _allowed_json(mission: Mission) -> Optional[str]:
    if mission.allowed_employees is None:
        return None
    return to_json(list(mission.allowed_employees))


class MySQLMissionRepository(MissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select(self, where: str = "1=1", params: tuple = ()) -> list[Mission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM missions WHERE {where} ORDER BY start_date_time ASC",
                params,
            )
            return [_row_to_mission(r) for r in fetchall(cur)]

    def _select_one(self, cur, mission_id: str) -> Optional[Mission]:
        cur.execute(f"SELECT {_COLUMNS} FROM missions WHERE id=%s", (mission_id,))
        r = fetchone(cur)
        return _row_to_mission(r) if r else None

    def list_all(self) -> Sequence[Mission]:
        return self._select()

    def get_by_id(self, mission_id: str) -> Optional[Mission]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, mission_id)

    def list_by_home(self, home_id: str) -> Sequence[Mission]:
        return self._select("home_id=%s", (home_id,))

    def list_by_conciergerie(self, conciergerie_name: str) -> Sequence[Mission]:
        return self._select("conciergerie_name=%s", (conciergerie_name,))

    def list_by_employee(self, employee_id: str) -> Sequence[Mission]:
        return self._select("employee_id=%s", (employee_id,))

    def list_available_for_employee(self, employee_id: str) -> Sequence[Mission]:
        return self._select(
            """
            (employee_id IS NULL OR employee_id=%s)
            AND (
                allowed_employees IS NULL
                OR JSON_LENGTH(allowed_employees)=0
                OR JSON_CONTAINS(allowed_employees, JSON_QUOTE(%s))
            )
            """,
            (employee_id, employee_id),
        )

    def create(self, mission: Mission) -> Mission:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO missions(
                    id, home_id, tasks, start_date_time, end_date_time, employee_id,
                    conciergerie_name, status, allowed_employees, hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    mission.id,
                    mission.home_id,
                    to_json([t.value for t in mission.tasks]),
                    mission.start_date_time,
                    mission.end_date_time,
                    mission.employee_id,
                    mission.conciergerie_name,
                    mission.status.value if mission.status else None,
                    _allowed_json(mission),
                    mission.hours,
                ),
            )
            created = self._select_one(cur, mission.id)
        return created or mission

    def update(self, mission: Mission) -> Optional[Mission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE missions
                SET home_id=%s, tasks=%s, start_date_time=%s, end_date_time=%s,
                    allowed_employees=%s, hours=%s
                WHERE id=%s
                """,
                (
                    mission.home_id,
                    to_json([t.value for t in mission.tasks]),
                    mission.start_date_time,
                    mission.end_date_time,
                    _allowed_json(mission),
                    mission.hours,
                    mission.id,
                ),
            )
            return self._select_one(cur, mission.id)

    def set_assignment(
        self,
        *,
        mission_id: str,
        employee_id: Optional[str],
        status: Optional[MissionStatus],
    ) -> Optional[Mission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE missions SET employee_id=%s, status=%s WHERE id=%s",
                (employee_id, status.value if status else None, mission_id),
            )
            return self._select_one(cur, mission_id)

    def claim(self, *, mission_id: str, employee_id: str) -> Optional[Mission]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE missions SET employee_id=%s, status=%s WHERE id=%s AND employee_id IS NULL",
                (employee_id, MissionStatus.ACCEPTED.value, mission_id),
            )
            if cur.rowcount == 0:
                return None
            return self._select_one(cur, mission_id)

    def unassign_employee(self, employee_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE missions SET employee_id=NULL, status=NULL WHERE employee_id=%s",
                (employee_id,),
            )
            return int(cur.rowcount or 0)

    def delete(self, mission_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM missions WHERE id=%s", (mission_id,))
            return cur.rowcount > 0
