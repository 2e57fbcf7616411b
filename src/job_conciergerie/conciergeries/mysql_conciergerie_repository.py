from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import coalesce_update, db_cursor, fetchall, fetchone, from_json, to_json
from .model import Conciergerie, ConciergerieNotificationSettings
from .repository import ConciergerieRepository

_COLUMNS = "id, name, email, tel, color_name, notification_settings"


def _row_to_conciergerie(r: dict) -> Conciergerie:
    return Conciergerie(
        id=r.get("id") or None,
        name=str(r["name"]),
        email=str(r["email"]),
        tel=r.get("tel") or "",
        color_name=r.get("color_name") or "",
        notification_settings=ConciergerieNotificationSettings.from_dict(from_json(r.get("notification_settings"))),
    )


class MySQLConciergerieRepository(ConciergerieRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Conciergerie]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM conciergerie ORDER BY name")
            return [_row_to_conciergerie(r) for r in fetchall(cur)]

    def get_by_id(self, user_id: str) -> Optional[Conciergerie]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM conciergerie WHERE id=%s", (user_id,))
            r = fetchone(cur)
            return _row_to_conciergerie(r) if r else None

    def get_by_name(self, name: str) -> Optional[Conciergerie]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM conciergerie WHERE name=%s", (name,))
            r = fetchone(cur)
            return _row_to_conciergerie(r) if r else None

    def create(self, conciergerie: Conciergerie) -> Conciergerie:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO conciergerie(id, name, email, tel, color_name, notification_settings)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    conciergerie.id or None,
                    conciergerie.name,
                    conciergerie.email,
                    conciergerie.tel,
                    conciergerie.color_name,
                    to_json(conciergerie.notification_settings.to_dict()),
                ),
            )
        return conciergerie

    def update(
        self,
        *,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        tel: Optional[str] = None,
        color_name: Optional[str] = None,
        notification_settings: Optional[ConciergerieNotificationSettings] = None,
    ) -> Optional[Conciergerie]:
        sql, params = coalesce_update(
            "conciergerie",
            "id",
            user_id,
            {
                "name": name,
                "email": email,
                "tel": tel,
                "color_name": color_name,
                "notification_settings": to_json(notification_settings.to_dict()) if notification_settings else None,
            },
        )
        with db_cursor(self._conn_factory) as (_, cur):
            if sql:
                cur.execute(sql, tuple(params))
            cur.execute(f"SELECT {_COLUMNS} FROM conciergerie WHERE id=%s", (user_id,))
            r = fetchone(cur)
            return _row_to_conciergerie(r) if r else None

    def set_id(self, *, name: str, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE conciergerie SET id=%s WHERE name=%s", (user_id, name))
            return cur.rowcount > 0
