from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import iso
from ..groups.model import Group


@dataclass(frozen=True)
class AttendanceRecord:
    """One meeting of a group on a calendar date. ``group_id`` never changes after creation."""

    id: str
    group_id: str
    date: date
    notes: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "date": iso(self.date),
            "notes": self.notes,
            "photo_url": self.photo_url,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


@dataclass(frozen=True)
class AttendanceDetail:
    record: AttendanceRecord
    group: Optional[Group]

    def to_dict(self) -> Dict[str, Any]:
        data = self.record.to_dict()
        data["group"] = (
            {
                "id": self.group.id,
                "name": self.group.name,
                "mentor_id": self.group.mentor_id,
                "deleted_at": iso(self.group.deleted_at),
            }
            if self.group
            else None
        )
        return data


@dataclass(frozen=True)
class AttendanceFact:
    """The two columns the report needs from an attendance record."""

    group_id: str
    date: date


@dataclass(frozen=True)
class AttendanceFilter:
    group_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
