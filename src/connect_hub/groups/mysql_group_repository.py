from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import Gender
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, new_id, order_clause, update_set_clause
from ..users.model import MentorSummary
from .model import Group, GroupFilter, RosterEntry
from .repository import GroupRepository

_COLUMNS = "id, name, mentor_id, created_at, updated_at, deleted_at"
_SORT_COLUMNS = {"created_at": "created_at", "name": "name"}


def _row_to_group(r: Dict[str, Any]) -> Group:
    return Group(
        id=str(r["id"]),
        name=r["name"],
        mentor_id=r.get("mentor_id"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        deleted_at=r.get("deleted_at"),
    )


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: str, *, include_deleted: bool = False) -> Optional[Group]:
        sql = f"SELECT {_COLUMNS} FROM `groups` WHERE id=%s"
        if not include_deleted:
            sql += " AND deleted_at IS NULL"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (group_id,))
            r = fetchone(cur)
            return _row_to_group(r) if r else None

    def find_active_by_name(self, name: str) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM `groups` WHERE name=%s AND deleted_at IS NULL LIMIT 1", (name,))
            r = fetchone(cur)
            return _row_to_group(r) if r else None

    def find_active_by_mentor(self, mentor_id: str) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM `groups` WHERE mentor_id=%s AND deleted_at IS NULL LIMIT 1",
                (mentor_id,),
            )
            r = fetchone(cur)
            return _row_to_group(r) if r else None

    def create(self, *, name: str, mentor_id: Optional[str]) -> Group:
        group_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO `groups`(id, name, mentor_id) VALUES(%s,%s,%s)", (group_id, name, mentor_id))
        created = self.get_by_id(group_id)
        if not created:
            raise NotFoundError("Group not found")
        return created

    def update(self, group_id: str, fields: Mapping[str, Any]) -> Optional[Group]:
        if fields:
            set_sql, params = update_set_clause(dict(fields))
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE `groups` SET {set_sql} WHERE id=%s AND deleted_at IS NULL", (*params, group_id))
        return self.get_by_id(group_id)

    def soft_delete(self, group_id: str, *, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE `groups` SET deleted_at=%s WHERE id=%s AND deleted_at IS NULL",
                (deleted_at.replace(tzinfo=None), group_id),
            )
            return cur.rowcount > 0

    def list(self, flt: GroupFilter, page: PageRequest) -> Page[Group]:
        where = WhereBuilder().add("deleted_at IS NULL")
        where.add_if(flt.mentor_id, "mentor_id=%s")
        order = order_clause(_SORT_COLUMNS, page.sort_by, page.sort_order.value, "created_at")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM `groups` {where.sql()}", where.params())
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"SELECT {_COLUMNS} FROM `groups` {where.sql()} {order} LIMIT %s OFFSET %s",
                (*where.params(), page.limit, page.offset),
            )
            rows = fetchall(cur)
        return Page(records=[_row_to_group(r) for r in rows], total=total, page=page.page, limit=page.limit)

    def list_active_roster(self) -> Sequence[RosterEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT g.id AS group_id, g.name AS group_name,
                       u.id AS mentor_id, u.name AS mentor_name, u.email AS mentor_email,
                       u.gender AS mentor_gender, u.phone AS mentor_phone
                FROM `groups` g
                LEFT JOIN users u ON u.id = g.mentor_id
                WHERE g.deleted_at IS NULL
                """
            )
            rows = fetchall(cur)

        roster = []
        for r in rows:
            mentor = None
            if r.get("mentor_id"):
                mentor = MentorSummary(
                    id=str(r["mentor_id"]),
                    name=r["mentor_name"],
                    email=r["mentor_email"],
                    gender=Gender(r["mentor_gender"]) if r.get("mentor_gender") else None,
                    phone=r.get("mentor_phone"),
                )
            roster.append(RosterEntry(group_id=str(r["group_id"]), name=r["group_name"], mentor=mentor))
        return roster
