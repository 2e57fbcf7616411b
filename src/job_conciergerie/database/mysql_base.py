from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector

from .connection import DatabaseConnection

# Raised by the connector for connection and query failures
DatabaseError = mysql.connector.Error


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_json(value: Any) -> Optional[str]:
    """Serialize a list/dict for a JSON column. ``None`` stays NULL."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def from_json(value: Any, default: Any = None) -> Any:
    """Decode a JSON column.

    mysql-connector returns JSON columns as str (pure Python) or bytes/bytearray
    (C extension), depending on the build.
    """

    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        if not value.strip():
            return default
        return json.loads(value)
    return value


def coalesce_update(
    table: str,
    key_column: str,
    key_value: Any,
    fields: Dict[str, Any],
) -> tuple[Optional[str], list[Any]]:
    """Build an ``UPDATE`` touching only the supplied (non-None) columns.

    Returns ``(None, [])`` when there is nothing to update.
    """

    assignments: list[str] = []
    params: list[Any] = []
    for column, value in fields.items():
        if value is None:
            continue
        assignments.append(f"{column}=%s")
        params.append(value)
    if not assignments:
        return None, []
    params.append(key_value)
    return f"UPDATE {table} SET {', '.join(assignments)} WHERE {key_column}=%s", params
