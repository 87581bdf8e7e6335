from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used by the authorization policy."""

    ADMIN = "ADMIN"
    MENTOR = "MENTOR"
    MEMBER = "MEMBER"
    WRITER = "WRITER"
    EVENT_MANAGER = "EVENT_MANAGER"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


class PostStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class EventStatus(str, Enum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class EventLinkType(str, Enum):
    """Where an event notice points: a route of the site or another site."""

    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"


class ReportFormat(str, Enum):
    SHEET = "sheet"
    PDF = "pdf"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
