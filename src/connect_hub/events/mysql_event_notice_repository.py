from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence

from ..blog.model import AuthorSummary
from ..common.pagination import Page, PageRequest
from ..core.enums import EventLinkType, EventStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, new_id, order_clause, update_set_clause
from .model import EventNotice, EventNoticeFilter
from .repository import EventNoticeRepository

_SELECT = """
    SELECT e.id, e.title, e.description, e.poster_url, e.link, e.link_type, e.author_id,
           e.status, e.published_at, e.created_at, e.updated_at,
           u.name AS author_name, u.email AS author_email
    FROM event_notices e
    LEFT JOIN users u ON u.id = e.author_id
"""
_SORT_COLUMNS = {"created_at": "e.created_at", "published_at": "e.published_at", "title": "e.title"}


def _row_to_notice(r: Dict[str, Any]) -> EventNotice:
    author = None
    if r.get("author_name") is not None:
        author = AuthorSummary(id=str(r["author_id"]), name=r["author_name"], email=r["author_email"])
    return EventNotice(
        id=str(r["id"]),
        title=r["title"],
        description=r.get("description"),
        poster_url=r.get("poster_url"),
        link=r.get("link"),
        link_type=EventLinkType(r["link_type"]) if r.get("link_type") else None,
        author_id=str(r["author_id"]),
        status=EventStatus(r["status"]),
        published_at=r.get("published_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        author=author,
    )


def _db_value(v: Any) -> Any:
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, datetime) and v.tzinfo is not None:
        return v.replace(tzinfo=None)
    return v


class MySQLEventNoticeRepository(EventNoticeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, notice_id: str) -> Optional[EventNotice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.id=%s", (notice_id,))
            r = fetchone(cur)
            return _row_to_notice(r) if r else None

    def create(
        self,
        *,
        title: str,
        description: Optional[str],
        poster_url: Optional[str],
        link: Optional[str],
        link_type: EventLinkType,
        author_id: str,
    ) -> EventNotice:
        notice_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_notices(id, title, description, poster_url, link, link_type, author_id, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (notice_id, title, description, poster_url, link, link_type.value, author_id, EventStatus.DRAFT.value),
            )
        created = self.get_by_id(notice_id)
        if not created:
            raise NotFoundError("Event notice not found")
        return created

    def update(self, notice_id: str, fields: Mapping[str, Any]) -> Optional[EventNotice]:
        if fields:
            set_sql, params = update_set_clause({k: _db_value(v) for k, v in fields.items()})
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE event_notices SET {set_sql} WHERE id=%s", (*params, notice_id))
        return self.get_by_id(notice_id)

    def delete(self, notice_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM event_notices WHERE id=%s", (notice_id,))
            return cur.rowcount > 0

    def list(self, flt: EventNoticeFilter, page: PageRequest) -> Page[EventNotice]:
        where = WhereBuilder().add_if(flt.status, "e.status=%s", flt.status.value if flt.status else None)
        order = order_clause(_SORT_COLUMNS, page.sort_by, page.sort_order.value, "created_at")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM event_notices e {where.sql()}", where.params())
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(f"{_SELECT} {where.sql()} {order} LIMIT %s OFFSET %s", (*where.params(), page.limit, page.offset))
            rows = fetchall(cur)
        return Page(records=[_row_to_notice(r) for r in rows], total=total, page=page.page, limit=page.limit)

    def list_published(self) -> Sequence[EventNotice]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.status=%s ORDER BY e.published_at DESC", (EventStatus.PUBLISHED.value,))
            return [_row_to_notice(r) for r in fetchall(cur)]
