from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from ..core.enums import SortOrder
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_PAGE_LIMIT
    sort_by: Optional[str] = None
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def validated(self, *, allowed_sort: Iterable[str] = (), default_sort: Optional[str] = None) -> "PageRequest":
        if self.page < 1:
            raise ValidationError("page must be >= 1")
        if self.limit < 1 or self.limit > MAX_PAGE_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}")
        allowed = tuple(allowed_sort)
        sort_by = self.sort_by or default_sort
        if sort_by is not None and allowed and sort_by not in allowed:
            raise ValidationError(f"sort_by must be one of: {', '.join(allowed)}")
        return PageRequest(page=self.page, limit=self.limit, sort_by=sort_by, sort_order=SortOrder(self.sort_order))

    @classmethod
    def from_args(cls, args: Mapping[str, Any]) -> "PageRequest":
        """Build from query-string arguments (a Flask ``request.args``)."""

        def _int(name: str, default: int) -> int:
            raw = args.get(name)
            if raw in (None, ""):
                return default
            try:
                return int(raw)
            except (TypeError, ValueError):
                raise ValidationError(f"{name} must be an integer")

        order_raw = (args.get("sort_order") or SortOrder.DESC.value).strip().lower()
        try:
            order = SortOrder(order_raw)
        except ValueError:
            raise ValidationError("sort_order must be one of: asc, desc")

        return cls(
            page=_int("page", DEFAULT_PAGE),
            limit=_int("limit", DEFAULT_PAGE_LIMIT),
            sort_by=(args.get("sort_by") or None),
            sort_order=order,
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    records: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self, serialize: Callable[[T], Any]) -> dict:
        return {
            "records": [serialize(r) for r in self.records],
            "pagination": {
                "total": self.total,
                "page": self.page,
                "limit": self.limit,
                "total_pages": self.total_pages,
            },
        }
