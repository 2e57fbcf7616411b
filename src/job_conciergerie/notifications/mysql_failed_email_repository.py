from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import EmailType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import FailedEmail
from .repository import FailedEmailRepository

_COLUMNS = "id, type, recipient, subject, html, created_at, last_attempt, attempts"


def _row_to_failed_email(r: dict) -> FailedEmail:
    return FailedEmail(
        id=str(r["id"]),
        type=EmailType(r["type"]) if r.get("type") else None,
        recipient=str(r["recipient"]),
        subject=str(r["subject"]),
        html=str(r["html"]),
        created_at=r["created_at"],
        last_attempt=r["last_attempt"],
        attempts=int(r["attempts"]),
    )


class MySQLFailedEmailRepository(FailedEmailRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, item: FailedEmail) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO failed_emails({_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    item.id,
                    item.type.value if item.type else None,
                    item.recipient,
                    item.subject,
                    item.html,
                    item.created_at,
                    item.last_attempt,
                    int(item.attempts),
                ),
            )

    def list_all(self) -> Sequence[FailedEmail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM failed_emails ORDER BY created_at")
            return [_row_to_failed_email(r) for r in fetchall(cur)]

    def get(self, email_id: str) -> Optional[FailedEmail]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM failed_emails WHERE id=%s", (email_id,))
            r = fetchone(cur)
            return _row_to_failed_email(r) if r else None

    def record_attempt(self, *, email_id: str, attempted_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE failed_emails SET attempts=attempts+1, last_attempt=%s WHERE id=%s",
                (attempted_at, email_id),
            )

    def remove(self, email_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM failed_emails WHERE id=%s", (email_id,))
