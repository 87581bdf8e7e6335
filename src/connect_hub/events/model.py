from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..blog.model import AuthorSummary
from ..common.datetime_utils import iso
from ..core.enums import EventLinkType, EventStatus


@dataclass(frozen=True)
class EventNotice:
    id: str
    title: str
    author_id: str
    description: Optional[str] = None
    poster_url: Optional[str] = None
    link: Optional[str] = None
    link_type: Optional[EventLinkType] = None
    status: EventStatus = EventStatus.DRAFT
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[AuthorSummary] = None

    @property
    def is_published(self) -> bool:
        return self.status == EventStatus.PUBLISHED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "poster_url": self.poster_url,
            "link": self.link,
            "link_type": self.link_type.value if self.link_type else None,
            "author_id": self.author_id,
            "author": self.author.to_dict() if self.author else None,
            "status": self.status.value,
            "published_at": iso(self.published_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


@dataclass(frozen=True)
class NewEventNotice:
    title: str
    description: Optional[str] = None
    poster_url: Optional[str] = None
    link: Optional[str] = None
    link_type: Optional[EventLinkType] = None


@dataclass(frozen=True)
class EventNoticeFilter:
    status: Optional[EventStatus] = None
