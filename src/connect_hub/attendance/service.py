from __future__ import annotations

from datetime import date
from typing import Optional, Union

from ..common.datetime_utils import as_date, ensure_date_range, parse_iso_date
from ..common.pagination import Page, PageRequest
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from ..core.logging import get_logger
from ..core.policy import Action, Actor, ensure_can_act
from ..groups.repository import GroupRepository
from ..storage.blob_store import BlobStore
from ..storage.model import UploadFile
from .model import AttendanceDetail, AttendanceFilter, AttendanceRecord
from .repository import AttendanceRepository

_SORTABLE = ("date", "created_at")

DateLike = Union[date, str]


def _normalize_date(value: DateLike) -> date:
    if isinstance(value, str):
        return parse_iso_date(value)
    return as_date(value)


class AttendanceService:
    """Use cases for connect-group attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        groups: GroupRepository,
        blob_store: BlobStore,
        *,
        photo_bucket: str,
        logger=None,
    ):
        self._attendance = attendance
        self._groups = groups
        self._blob_store = blob_store
        self._photo_bucket = photo_bucket
        self._log = logger or get_logger(__name__)

    def _require(self, attendance_id: str) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def create(
        self,
        *,
        actor: Actor,
        group_id: str,
        date: DateLike,
        notes: Optional[str] = None,
        photo: Optional[UploadFile] = None,
    ) -> AttendanceRecord:
        ensure_can_act(actor, Action.ATTENDANCE_CREATE)
        group_id = require_non_empty(group_id, "group_id")
        meeting_date = _normalize_date(date)

        if not self._groups.get_by_id(group_id):
            raise NotFoundError("Group not found")

        photo_url = self._blob_store.upload(self._photo_bucket, photo) if photo else None
        record = self._attendance.create(
            group_id=group_id,
            date=meeting_date,
            notes=(notes or "").strip() or None,
            photo_url=photo_url,
        )
        self._log.info("attendance_created", attendance_id=record.id, group_id=group_id, by=actor.user_id)
        return record

    def update(
        self,
        *,
        actor: Actor,
        attendance_id: str,
        date: Optional[DateLike] = None,
        notes: Optional[str] = None,
        photo: Optional[UploadFile] = None,
    ) -> AttendanceRecord:
        """Partial update. ``notes=""`` clears the notes; ``None`` leaves a field unchanged."""
        ensure_can_act(actor, Action.ATTENDANCE_UPDATE)
        self._require(attendance_id)

        fields = {}
        if date is not None:
            fields["date"] = _normalize_date(date)
        if notes is not None:
            fields["notes"] = notes.strip() or None
        if photo is not None:
            fields["photo_url"] = self._blob_store.upload(self._photo_bucket, photo)

        updated = self._attendance.update(attendance_id, fields)
        if not updated:
            raise NotFoundError("Attendance record not found")
        self._log.info("attendance_updated", attendance_id=attendance_id, fields=sorted(fields), by=actor.user_id)
        return updated

    def delete(self, *, actor: Actor, attendance_id: str) -> None:
        ensure_can_act(actor, Action.ATTENDANCE_DELETE, message="Only admins can delete attendance records")
        self._require(attendance_id)
        if not self._attendance.delete(attendance_id):
            raise NotFoundError("Attendance record not found")
        self._log.info("attendance_deleted", attendance_id=attendance_id, by=actor.user_id)

    def get(self, attendance_id: str) -> AttendanceDetail:
        record = self._require(attendance_id)
        group = self._groups.get_by_id(record.group_id, include_deleted=True)
        return AttendanceDetail(record=record, group=group)

    def list(self, flt: AttendanceFilter, page: PageRequest) -> Page[AttendanceRecord]:
        ensure_date_range(flt.start_date, flt.end_date)
        page = page.validated(allowed_sort=_SORTABLE, default_sort="date")
        return self._attendance.list(flt, page)
