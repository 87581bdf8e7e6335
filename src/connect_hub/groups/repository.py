from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import Group, GroupFilter, RosterEntry


class GroupRepository(Protocol):
    def get_by_id(self, group_id: str, *, include_deleted: bool = False) -> Optional[Group]:
        raise NotImplementedError

    def find_active_by_name(self, name: str) -> Optional[Group]:
        raise NotImplementedError

    def find_active_by_mentor(self, mentor_id: str) -> Optional[Group]:
        raise NotImplementedError

    def create(self, *, name: str, mentor_id: Optional[str]) -> Group:
        raise NotImplementedError

    def update(self, group_id: str, fields: Mapping[str, Any]) -> Optional[Group]:
        raise NotImplementedError

    def soft_delete(self, group_id: str, *, deleted_at: datetime) -> bool:
        raise NotImplementedError

    def list(self, flt: GroupFilter, page: PageRequest) -> Page[Group]:
        raise NotImplementedError

    def list_active_roster(self) -> Sequence[RosterEntry]:
        """Every active group joined with its mentor's summary (``None`` when there is no mentor)."""
        raise NotImplementedError
