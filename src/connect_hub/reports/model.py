from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..users.model import MentorSummary


@dataclass(frozen=True)
class GroupAttendance:
    group_id: str
    name: str
    attendance_count: int
    mentor: Optional[MentorSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "group_id": self.group_id,
            "name": self.name,
            "attendance_count": self.attendance_count,
            "mentor": self.mentor.to_dict() if self.mentor else None,
        }


@dataclass(frozen=True)
class MonthlyAttendance:
    month: str
    groups_with_attendance: int
    attendance_percentage: str
    groups: Sequence[GroupAttendance]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "month": self.month,
            "groups_with_attendance": self.groups_with_attendance,
            "attendance_percentage": self.attendance_percentage,
            "groups": [g.to_dict() for g in self.groups],
        }


@dataclass(frozen=True)
class AttendanceReport:
    """Monthly attendance coverage over an inclusive date range.

    ``monthly_attendance`` is ordered by month and holds only months that had at
    least one attendance record; every entry lists the full active roster.
    """

    start_date: date
    end_date: date
    total_groups: int
    monthly_attendance: Sequence[MonthlyAttendance]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "total_groups": self.total_groups,
            "monthly_attendance": [m.to_dict() for m in self.monthly_attendance],
        }
