from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


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


def new_id() -> str:
    return str(uuid.uuid4())


def as_bool(value: Any) -> bool:
    """MySQL BOOLEAN columns come back as 0/1 integers."""
    return bool(int(value)) if value is not None else False


class WhereBuilder:
    """Collects ``column=%s`` style conditions together with their parameters.

    Used by repositories to translate the fields actually set on a typed filter
    into SQL, so no condition is emitted for a field left as ``None``.
    """

    def __init__(self) -> None:
        self._clauses: List[str] = []
        self._params: List[Any] = []

    def add(self, clause: str, *params: Any) -> "WhereBuilder":
        self._clauses.append(clause)
        self._params.extend(params)
        return self

    def add_if(self, value: Any, clause: str, *params: Any) -> "WhereBuilder":
        if value is not None:
            self.add(clause, *(params or (value,)))
        return self

    def sql(self) -> str:
        if not self._clauses:
            return ""
        return "WHERE " + " AND ".join(self._clauses)

    def params(self) -> Tuple[Any, ...]:
        return tuple(self._params)


def order_clause(column_map: Dict[str, str], sort_by: Optional[str], sort_order: str, default: str) -> str:
    column = column_map.get(sort_by or default, column_map[default])
    direction = "ASC" if str(sort_order).lower() == "asc" else "DESC"
    return f"ORDER BY {column} {direction}"


def update_set_clause(fields: Dict[str, Any]) -> Tuple[str, Sequence[Any]]:
    cols = list(fields.keys())
    return ", ".join(f"{c}=%s" for c in cols), [fields[c] for c in cols]
