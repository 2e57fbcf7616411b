from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import coalesce_update, db_cursor, fetchall, fetchone, from_json, to_json
from .model import Employee, EmployeeNotificationSettings
from .repository import EmployeeRepository

_COLUMNS = (
    "id, device_ids, first_name, family_name, tel, email, geographic_zone, message, "
    "conciergerie_name, notification_settings, status, created_at"
)


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        id=str(r["id"]),
        device_ids=tuple(from_json(r.get("device_ids"), []) or ()),
        first_name=str(r["first_name"]),
        family_name=str(r["family_name"]),
        tel=str(r["tel"]),
        email=str(r["email"]),
        geographic_zone=str(r["geographic_zone"]),
        message=r.get("message") or None,
        conciergerie_name=r.get("conciergerie_name") or None,
        notification_settings=EmployeeNotificationSettings.from_dict(from_json(r.get("notification_settings"))),
        status=EmployeeStatus(r["status"]),
        created_at=r.get("created_at"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, employee_id: str) -> Optional[Employee]:
        cur.execute(f"SELECT {_COLUMNS} FROM employee WHERE id=%s", (employee_id,))
        r = fetchone(cur)
        return _row_to_employee(r) if r else None

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employee ORDER BY created_at DESC")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, employee_id)

    def get_by_device_id(self, device_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee
                WHERE id=%s
                   OR JSON_CONTAINS(device_ids, JSON_QUOTE(%s))
                   OR JSON_CONTAINS(device_ids, JSON_QUOTE(%s))
                LIMIT 1
                """,
                (device_id, device_id, f"${device_id}"),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def find_by_name(self, *, first_name: str, family_name: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee
                WHERE LOWER(first_name)=LOWER(%s) AND LOWER(family_name)=LOWER(%s)
                LIMIT 1
                """,
                (first_name, family_name),
            )
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def exists(self, *, first_name: str, family_name: str, tel: str, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id FROM employee
                WHERE (LOWER(first_name)=LOWER(%s) AND LOWER(family_name)=LOWER(%s))
                   OR tel=%s
                   OR LOWER(email)=LOWER(%s)
                LIMIT 1
                """,
                (first_name, family_name, tel, email),
            )
            return fetchone(cur) is not None

    def create(self, employee: Employee) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employee(
                    id, device_ids, first_name, family_name, tel, email, geographic_zone,
                    message, conciergerie_name, notification_settings, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee.id,
                    to_json(list(employee.all_device_ids)),
                    employee.first_name,
                    employee.family_name,
                    employee.tel,
                    employee.email,
                    employee.geographic_zone,
                    employee.message,
                    employee.conciergerie_name,
                    to_json(employee.notification_settings.to_dict()),
                    employee.status.value,
                ),
            )
            created = self._select_one(cur, employee.id)
        return created or employee

    def update_status(self, *, employee_id: str, status: EmployeeStatus) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee SET status=%s, message=NULL, conciergerie_name=NULL WHERE id=%s",
                (status.value, employee_id),
            )
            return self._select_one(cur, employee_id)

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
        sql, params = coalesce_update(
            "employee",
            "id",
            employee_id,
            {
                "tel": tel,
                "email": email,
                "geographic_zone": geographic_zone,
                "message": message,
                "conciergerie_name": conciergerie_name,
                "notification_settings": to_json(notification_settings.to_dict()) if notification_settings else None,
            },
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if sql:
                cur.execute(sql, tuple(params))
            return self._select_one(cur, employee_id)

    def set_device_ids(self, *, employee_id: str, device_ids: Sequence[str]) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employee SET device_ids=%s WHERE id=%s",
                (to_json(list(device_ids)), employee_id),
            )
            return self._select_one(cur, employee_id)

    def delete(self, employee_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employee WHERE id=%s", (employee_id,))
            return cur.rowcount > 0
