from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import PostStatus
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import WhereBuilder, db_cursor, fetchall, fetchone, new_id, order_clause, update_set_clause
from .model import AuthorSummary, Package, Post, PostFilter
from .repository import PackageRepository, PostRepository

_PACKAGE_COLUMNS = "id, name, slug, description, created_at, updated_at"

_POST_SELECT = """
    SELECT p.id, p.title, p.slug, p.content, p.excerpt, p.featured_image, p.package_id,
           p.author_id, p.status, p.published_at, p.created_at, p.updated_at,
           pk.name AS package_name, u.name AS author_name, u.email AS author_email
    FROM posts p
    LEFT JOIN packages pk ON pk.id = p.package_id
    LEFT JOIN users u ON u.id = p.author_id
"""
_POST_SORT_COLUMNS = {"created_at": "p.created_at", "published_at": "p.published_at", "title": "p.title"}


def _row_to_package(r: Dict[str, Any]) -> Package:
    return Package(
        id=str(r["id"]),
        name=r["name"],
        slug=r["slug"],
        description=r.get("description"),
        post_count=int(r["post_count"]) if r.get("post_count") is not None else None,
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _row_to_post(r: Dict[str, Any]) -> Post:
    author = None
    if r.get("author_name") is not None:
        author = AuthorSummary(id=str(r["author_id"]), name=r["author_name"], email=r["author_email"])
    return Post(
        id=str(r["id"]),
        title=r["title"],
        slug=r["slug"],
        content=r["content"],
        excerpt=r.get("excerpt"),
        featured_image=r.get("featured_image"),
        package_id=str(r["package_id"]),
        author_id=str(r["author_id"]),
        status=PostStatus(r["status"]),
        published_at=r.get("published_at"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
        author=author,
        package_name=r.get("package_name"),
    )


def _db_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
    out = {}
    for k, v in fields.items():
        if isinstance(v, PostStatus):
            v = v.value
        elif isinstance(v, datetime) and v.tzinfo is not None:
            v = v.replace(tzinfo=None)
        out[k] = v
    return out


class MySQLPackageRepository(PackageRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[Package]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_PACKAGE_COLUMNS} FROM packages WHERE {column}=%s", (value,))
            r = fetchone(cur)
            return _row_to_package(r) if r else None

    def get_by_id(self, package_id: str) -> Optional[Package]:
        return self._get_where("id", package_id)

    def get_by_slug(self, slug: str) -> Optional[Package]:
        return self._get_where("slug", slug)

    def create(self, *, name: str, slug: str, description: Optional[str]) -> Package:
        package_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO packages(id, name, slug, description) VALUES(%s,%s,%s,%s)",
                (package_id, name, slug, description),
            )
        created = self.get_by_id(package_id)
        if not created:
            raise NotFoundError("Package not found")
        return created

    def update(self, package_id: str, fields: Mapping[str, Any]) -> Optional[Package]:
        if fields:
            set_sql, params = update_set_clause(dict(fields))
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE packages SET {set_sql} WHERE id=%s", (*params, package_id))
        return self.get_by_id(package_id)

    def delete(self, package_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM packages WHERE id=%s", (package_id,))
            return cur.rowcount > 0

    def list_with_counts(self) -> Sequence[Package]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT pk.id, pk.name, pk.slug, pk.description, pk.created_at, pk.updated_at,
                       COUNT(p.id) AS post_count
                FROM packages pk
                LEFT JOIN posts p ON p.package_id = pk.id
                GROUP BY pk.id, pk.name, pk.slug, pk.description, pk.created_at, pk.updated_at
                ORDER BY pk.created_at DESC
                """
            )
            return [_row_to_package(r) for r in fetchall(cur)]

    def count_posts(self, package_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM posts WHERE package_id=%s", (package_id,))
            return int((fetchone(cur) or {}).get("total", 0))


class MySQLPostRepository(PostRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_POST_SELECT} WHERE p.{column}=%s", (value,))
            r = fetchone(cur)
            return _row_to_post(r) if r else None

    def get_by_id(self, post_id: str) -> Optional[Post]:
        return self._get_where("id", post_id)

    def get_by_slug(self, slug: str) -> Optional[Post]:
        return self._get_where("slug", slug)

    def create(
        self,
        *,
        title: str,
        slug: str,
        content: str,
        excerpt: Optional[str],
        featured_image: Optional[str],
        package_id: str,
        author_id: str,
    ) -> Post:
        post_id = new_id()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO posts(id, title, slug, content, excerpt, featured_image, package_id, author_id, status)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (post_id, title, slug, content, excerpt, featured_image, package_id, author_id, PostStatus.DRAFT.value),
            )
        created = self.get_by_id(post_id)
        if not created:
            raise NotFoundError("Post not found")
        return created

    def update(self, post_id: str, fields: Mapping[str, Any]) -> Optional[Post]:
        if fields:
            set_sql, params = update_set_clause(_db_fields(fields))
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE posts SET {set_sql} WHERE id=%s", (*params, post_id))
        return self.get_by_id(post_id)

    def delete(self, post_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM posts WHERE id=%s", (post_id,))
            return cur.rowcount > 0

    def list(self, flt: PostFilter, page: PageRequest) -> Page[Post]:
        where = (
            WhereBuilder()
            .add_if(flt.status, "p.status=%s", flt.status.value if flt.status else None)
            .add_if(flt.package_id, "p.package_id=%s")
            .add_if(flt.author_id, "p.author_id=%s")
        )
        if flt.search:
            where.add("LOWER(p.title) LIKE %s", f"%{flt.search.lower()}%")
        order = order_clause(_POST_SORT_COLUMNS, page.sort_by, page.sort_order.value, "created_at")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM posts p {where.sql()}", where.params())
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(f"{_POST_SELECT} {where.sql()} {order} LIMIT %s OFFSET %s", (*where.params(), page.limit, page.offset))
            rows = fetchall(cur)
        return Page(records=[_row_to_post(r) for r in rows], total=total, page=page.page, limit=page.limit)

    def list_published_by_package(self, package_id: str) -> Sequence[Post]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_POST_SELECT} WHERE p.package_id=%s AND p.status=%s ORDER BY p.published_at DESC",
                (package_id, PostStatus.PUBLISHED.value),
            )
            return [_row_to_post(r) for r in fetchall(cur)]
