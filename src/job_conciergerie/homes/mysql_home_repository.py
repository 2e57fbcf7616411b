from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_json, to_json
from .model import Home
from .repository import HomeRepository

_COLUMNS = (
    "id, title, description, objectives, images, geographic_zone, "
    "hours_of_cleaning, hours_of_gardening, conciergerie_name"
)


def _row_to_home(r: dict) -> Home:
    return Home(
        id=str(r["id"]),
        title=str(r["title"]),
        description=r.get("description") or "",
        objectives=tuple(from_json(r.get("objectives"), []) or ()),
        images=tuple(from_json(r.get("images"), []) or ()),
        geographic_zone=r.get("geographic_zone") or "",
        hours_of_cleaning=float(r.get("hours_of_cleaning") or 0),
        hours_of_gardening=float(r.get("hours_of_gardening") or 0),
        conciergerie_name=str(r["conciergerie_name"]),
    )


class MySQLHomeRepository(HomeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_one(self, cur, home_id: str) -> Optional[Home]:
        cur.execute(f"SELECT {_COLUMNS} FROM homes WHERE id=%s", (home_id,))
        r = fetchone(cur)
        return _row_to_home(r) if r else None

    def list_all(self) -> Sequence[Home]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM homes ORDER BY title")
            return [_row_to_home(r) for r in fetchall(cur)]

    def get_by_id(self, home_id: str) -> Optional[Home]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_one(cur, home_id)

    def list_by_conciergerie(self, conciergerie_name: str) -> Sequence[Home]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM homes WHERE conciergerie_name=%s ORDER BY title",
                (conciergerie_name,),
            )
            return [_row_to_home(r) for r in fetchall(cur)]

    def create(self, home: Home) -> Home:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO homes({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    home.id,
                    home.title,
                    home.description,
                    to_json(list(home.objectives)),
                    to_json(list(home.images)),
                    home.geographic_zone,
                    home.hours_of_cleaning,
                    home.hours_of_gardening,
                    home.conciergerie_name,
                ),
            )
        return home

    def update(self, home: Home) -> Optional[Home]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE homes
                SET title=%s, description=%s, objectives=%s, images=%s, geographic_zone=%s,
                    hours_of_cleaning=%s, hours_of_gardening=%s
                WHERE id=%s
                """,
                (
                    home.title,
                    home.description,
                    to_json(list(home.objectives)),
                    to_json(list(home.images)),
                    home.geographic_zone,
                    home.hours_of_cleaning,
                    home.hours_of_gardening,
                    home.id,
                ),
            )
            return self._select_one(cur, home.id)

    def delete(self, home_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM homes WHERE id=%s", (home_id,))
            return cur.rowcount > 0
