from __future__ import annotations

from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.datetime_utils import as_date
from ..common.pagination import Page, PageRequest
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, new_id, order_clause, update_set_clause
from .model import AttendanceFact, AttendanceFilter, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, group_id, date, notes, photo_url, created_at, updated_at"
_SORT_COLUMNS = {"date": "date", "created_at": "created_at"}


def _row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        group_id=str(r["group_id"]),
        date=as_date(r["date"]),
        notes=r.get("notes"),
        photo_url=r.get("photo_url"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM connect_attendance WHERE id=%s", (attendance_id,))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, *, group_id: str, date: date, notes: Optional[str], photo_url: Optional[str]) -> AttendanceRecord:
        attendance_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO connect_attendance(id, group_id, date, notes, photo_url)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (attendance_id, group_id, date, notes, photo_url),
            )
        created = self.get_by_id(attendance_id)
        if not created:
            raise NotFoundError("Attendance record not found")
        return created

    def update(self, attendance_id: str, fields: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        if fields:
            set_sql, params = update_set_clause(dict(fields))
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE connect_attendance SET {set_sql} WHERE id=%s", (*params, attendance_id))
        return self.get_by_id(attendance_id)

    def delete(self, attendance_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM connect_attendance WHERE id=%s", (attendance_id,))
            return cur.rowcount > 0

    def list(self, flt: AttendanceFilter, page: PageRequest) -> Page[AttendanceRecord]:
        where = (
            WhereBuilder()
            .add_if(flt.group_id, "group_id=%s")
            .add_if(flt.start_date, "date >= %s")
            .add_if(flt.end_date, "date <= %s")
        )
        order = order_clause(_SORT_COLUMNS, page.sort_by, page.sort_order.value, "date")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM connect_attendance {where.sql()}", where.params())
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"SELECT {_COLUMNS} FROM connect_attendance {where.sql()} {order}, id ASC LIMIT %s OFFSET %s",
                (*where.params(), page.limit, page.offset),
            )
            rows = fetchall(cur)
        return Page(records=[_row_to_record(r) for r in rows], total=total, page=page.page, limit=page.limit)

    def list_facts(self, start: date, end: date) -> Sequence[AttendanceFact]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT group_id, date FROM connect_attendance WHERE date >= %s AND date <= %s",
                (start, end),
            )
            return [AttendanceFact(group_id=str(r["group_id"]), date=as_date(r["date"])) for r in fetchall(cur)]
