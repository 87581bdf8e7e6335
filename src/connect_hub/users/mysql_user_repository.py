from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import Gender, Role
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, as_bool, db_cursor, fetchall, fetchone, new_id, order_clause, update_set_clause
from .model import MILESTONE_FIELDS, NewUser, User, UserFilter
from .repository import UserRepository

_COLUMNS = """
    id, name, email, role, google_id, phone, gender, birth_date, address,
    congregation_id, group_id, is_baptized, kom_100, encounter, establish,
    equip, is_committed, created_at, updated_at
"""

_SORT_COLUMNS = {"created_at": "created_at", "name": "name", "email": "email"}


def row_to_user(r: Dict[str, Any]) -> User:
    return User(
        id=str(r["id"]),
        name=r["name"],
        email=r["email"],
        role=Role(r["role"]),
        google_id=r.get("google_id"),
        phone=r.get("phone"),
        gender=Gender(r["gender"]) if r.get("gender") else None,
        birth_date=r.get("birth_date"),
        address=r.get("address"),
        congregation_id=r.get("congregation_id"),
        group_id=r.get("group_id"),
        is_baptized=as_bool(r.get("is_baptized")),
        kom_100=as_bool(r.get("kom_100")),
        encounter=as_bool(r.get("encounter")),
        establish=as_bool(r.get("establish")),
        equip=as_bool(r.get("equip")),
        is_committed=as_bool(r.get("is_committed")),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _db_value(value: Any) -> Any:
    if isinstance(value, (Role, Gender)):
        return value.value
    return value


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return row_to_user(r) if r else None

    def get_by_id(self, user_id: str) -> Optional[User]:
        return self._get_where("id", user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_where("email", email)

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        return self._get_where("google_id", google_id)

    def create(self, new_user: NewUser) -> User:
        user_id = new_id()
        milestones = [bool(new_user.milestones.get(name, False)) for name in MILESTONE_FIELDS]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(
                    id, name, email, role, google_id, phone, gender, birth_date, address, congregation_id,
                    is_baptized, kom_100, encounter, establish, equip, is_committed
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    new_user.name,
                    new_user.email,
                    new_user.role.value,
                    new_user.google_id,
                    new_user.phone,
                    new_user.gender.value if new_user.gender else None,
                    new_user.birth_date,
                    new_user.address,
                    new_user.congregation_id,
                    *milestones,
                ),
            )
        created = self.get_by_id(user_id)
        if not created:
            raise NotFoundError("User not found")
        return created

    def update(self, user_id: str, fields: Mapping[str, Any]) -> Optional[User]:
        if fields:
            set_sql, params = update_set_clause({k: _db_value(v) for k, v in fields.items()})
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE users SET {set_sql} WHERE id=%s", (*params, user_id))
        return self.get_by_id(user_id)

    def delete(self, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE `groups` SET mentor_id=NULL WHERE mentor_id=%s", (user_id,))
            cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
            return cur.rowcount > 0

    def list(self, flt: UserFilter, page: PageRequest) -> Page[User]:
        where = WhereBuilder()
        where.add_if(flt.role, "role=%s", flt.role.value if flt.role else None)
        if flt.search:
            pattern = f"%{flt.search.lower()}%"
            where.add("(LOWER(name) LIKE %s OR LOWER(email) LIKE %s)", pattern, pattern)
        order = order_clause(_SORT_COLUMNS, page.sort_by, page.sort_order.value, "created_at")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM users {where.sql()}", where.params())
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"SELECT {_COLUMNS} FROM users {where.sql()} {order} LIMIT %s OFFSET %s",
                (*where.params(), page.limit, page.offset),
            )
            rows = fetchall(cur)
        return Page(records=[row_to_user(r) for r in rows], total=total, page=page.page, limit=page.limit)

    def list_by_group(self, group_id: str) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE group_id=%s ORDER BY name ASC", (group_id,))
            return [row_to_user(r) for r in fetchall(cur)]
