"""Schema bootstrap for ``AUTO_INIT_DB`` and ``scripts/init_db.py``.

``schema.sql`` only holds ``CREATE ... IF NOT EXISTS`` statements, so applying
it again is harmless.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping, Union

from ..common.logging import get_logger
from .connection import COLLATION, CHARSET, DBConfig

LOG = get_logger("job_conciergerie.database")

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

_COMMENT_RE = re.compile(r"(?m)^\s*--.*$")
# The target database comes from DB_CONFIG, never from the file
_DATABASE_RE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;")
# Statements end with ';' at the end of a line
_STATEMENT_END_RE = re.compile(r";\s*$", re.MULTILINE)


def schema_statements(sql: str) -> list[str]:
    sql = _DATABASE_RE.sub("", _COMMENT_RE.sub("", sql))
    return [s.strip() for s in _STATEMENT_END_RE.split(sql) if s.strip()]


def ensure_database_exists(target: DBConfig) -> None:
    conn = target.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET {CHARSET} COLLATE {COLLATION}"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping, *, schema_path: Union[str, Path] = SCHEMA_PATH) -> int:
    """Create the database and its tables if missing. Returns the number of statements run."""
    target = DBConfig.from_dict(db_config)
    statements = schema_statements(Path(schema_path).read_text(encoding="utf-8"))
    ensure_database_exists(target)

    conn = target.connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    LOG.info("schema applied on %s@%s/%s (%d statements)", target.user, target.host, target.database, len(statements))
    return len(statements)


def list_tables(db_config: Mapping) -> list[str]:
    conn = DBConfig.from_dict(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
