from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import iso
from ..users.model import MentorSummary, User


@dataclass(frozen=True)
class Group:
    """A connect group; soft-deleted groups keep their row with ``deleted_at`` set."""

    id: str
    name: str
    mentor_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


@dataclass(frozen=True)
class GroupView:
    group: Group
    mentor: Optional[MentorSummary] = None
    mentees: Optional[Sequence[User]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.group.id,
            "name": self.group.name,
            "mentor_id": self.group.mentor_id,
            "mentor": self.mentor.to_dict() if self.mentor else None,
            "created_at": iso(self.group.created_at),
            "updated_at": iso(self.group.updated_at),
        }
        if self.mentees is not None:
            data["mentees"] = [m.to_dict() for m in self.mentees]
        return data


@dataclass(frozen=True)
class RosterEntry:
    """An active group with its current mentor, as consumed by the report assembler."""

    group_id: str
    name: str
    mentor: Optional[MentorSummary] = None


@dataclass(frozen=True)
class GroupFilter:
    mentor_id: Optional[str] = None
