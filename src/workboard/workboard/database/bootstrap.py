"""Schema bootstrap for a fresh (or existing) MySQL database."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

_CREATE_DB_OR_USE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$")
_QUOTES = {"'", '"', "`"}


def _strip_create_db_and_use(sql: str) -> str:
    # The configured database wins over whatever name schema.sql mentions.
    return _CREATE_DB_OR_USE.sub("", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ';'.

    Semicolons inside quoted strings or identifiers are kept, and ``--`` line
    comments are skipped.
    """
    buf: list[str] = []
    quote = None
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]

        if quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < n:
                buf.append(sql[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch == "-" and sql.startswith("--", i):
            newline = sql.find("\n", i)
            i = n if newline == -1 else newline
            continue

        if ch in _QUOTES:
            quote = ch
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            i += 1
            continue

        buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))
    with conn.cursor(dictionary=False, with_database=False) as cur:
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    count = 0
    with DatabaseConnection(DBConfig.from_dict(db_config)).cursor(dictionary=False) as cur:
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
    logger.info("Applied %d statement(s) from %s", count, schema_path)


def list_tables(db_config: dict) -> list[str]:
    with DatabaseConnection(DBConfig.from_dict(db_config)).cursor(dictionary=False) as cur:
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
