from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import AttendanceFact, AttendanceFilter, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, *, group_id: str, date: date, notes: Optional[str], photo_url: Optional[str]) -> AttendanceRecord:
        raise NotImplementedError

    def update(self, attendance_id: str, fields: Mapping[str, Any]) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def delete(self, attendance_id: str) -> bool:
        raise NotImplementedError

    def list(self, flt: AttendanceFilter, page: PageRequest) -> Page[AttendanceRecord]:
        raise NotImplementedError

    def list_facts(self, start: date, end: date) -> Sequence[AttendanceFact]:
        """``(group_id, date)`` of every record dated within ``[start, end]`` inclusive."""
        raise NotImplementedError
