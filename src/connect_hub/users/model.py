from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import iso
from ..core.enums import Gender, Role

MILESTONE_FIELDS = ("is_baptized", "kom_100", "encounter", "establish", "equip", "is_committed")


@dataclass(frozen=True)
class User:
    """A member of the community; mentors, writers and admins are users with a role."""

    id: str
    name: str
    email: str
    role: Role = Role.MEMBER
    google_id: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    congregation_id: Optional[str] = None
    group_id: Optional[str] = None
    is_baptized: bool = False
    kom_100: bool = False
    encounter: bool = False
    establish: bool = False
    equip: bool = False
    is_committed: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "google_id": self.google_id,
            "phone": self.phone,
            "gender": self.gender.value if self.gender else None,
            "birth_date": iso(self.birth_date),
            "address": self.address,
            "congregation_id": self.congregation_id,
            "group_id": self.group_id,
            **{name: getattr(self, name) for name in MILESTONE_FIELDS},
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


@dataclass(frozen=True)
class NewUser:
    name: str
    email: str
    role: Role = Role.MEMBER
    google_id: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    congregation_id: Optional[str] = None
    milestones: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class MentorSummary:
    """Read-only projection of a mentor embedded in group listings and reports."""

    id: str
    name: str
    email: str
    gender: Optional[Gender] = None
    phone: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "MentorSummary":
        return cls(id=user.id, name=user.name, email=user.email, gender=user.gender, phone=user.phone)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "gender": self.gender.value if self.gender else None,
            "phone": self.phone,
        }


@dataclass(frozen=True)
class UserFilter:
    role: Optional[Role] = None
    search: Optional[str] = None
