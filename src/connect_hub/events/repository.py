from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from ..core.enums import EventLinkType
from .model import EventNotice, EventNoticeFilter


class EventNoticeRepository(Protocol):
    def get_by_id(self, notice_id: str) -> Optional[EventNotice]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update(self, notice_id: str, fields: Mapping[str, Any]) -> Optional[EventNotice]:
        raise NotImplementedError

    def delete(self, notice_id: str) -> bool:
        raise NotImplementedError

    def list(self, flt: EventNoticeFilter, page: PageRequest) -> Page[EventNotice]:
        raise NotImplementedError

    def list_published(self) -> Sequence[EventNotice]:
        """All published notices, most recently published first."""
        raise NotImplementedError
