"""Schema and seed loading for local setups and the ``init_db``/``seed_db`` scripts."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Union

import mysql.connector

from ..core.logging import get_logger
from .connection import DBConfig

SQL_DIR = Path(__file__).resolve().parents[3] / "database"

_DATABASE_DIRECTIVES = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")
_QUOTES = frozenset("'\"`")

log = get_logger(__name__)


def clean_script(sql: str) -> str:
    """Drop ``--`` comments and database directives; the target database comes from DB_CONFIG."""

    return _LINE_COMMENT.sub("", _DATABASE_DIRECTIVES.sub("", sql))


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Yield the statements of ``sql``, splitting on ``;`` that is not inside a quoted literal."""

    start = 0
    open_quote: Optional[str] = None
    i = 0
    while i < len(sql):
        ch = sql[i]
        if open_quote:
            if ch == "\\":
                i += 2
                continue
            if ch == open_quote:
                open_quote = None
        elif ch in _QUOTES:
            open_quote = ch
        elif ch == ";":
            statement = sql[start:i].strip()
            if statement:
                yield statement
            start = i + 1
        i += 1

    rest = sql[start:].strip()
    if rest:
        yield rest


def _open(target: DBConfig, *, select_database: bool = True):
    params = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "charset": "utf8mb4",
        "use_pure": True,
    }
    if select_database:
        params["database"] = target.database
    return mysql.connector.connect(**params)


def execute_script(db_config: Mapping[str, Any], path: Union[str, Path]) -> int:
    """Run every statement of the script at ``path`` in one transaction; returns the statement count."""

    target = DBConfig.from_dict(db_config)
    statements = list(iter_sql_statements(clean_script(Path(path).read_text(encoding="utf-8"))))

    conn = _open(target)
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

    log.info("sql_script_applied", script=Path(path).name, statements=len(statements))
    return len(statements)


def ensure_database_exists(db_config: Mapping[str, Any]) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _open(target, select_database=False)
    try:
        conn.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping[str, Any], *, schema_path: Union[str, Path] = SQL_DIR / "schema.sql") -> int:
    ensure_database_exists(db_config)
    return execute_script(db_config, schema_path)


def apply_seed_sql(db_config: Mapping[str, Any], *, seed_path: Union[str, Path] = SQL_DIR / "seed.sql") -> int:
    return execute_script(db_config, seed_path)


def list_tables(db_config: Mapping[str, Any]) -> List[str]:
    conn = _open(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
