from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..common.datetime_utils import now_utc
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_str, parse_enum, require_non_empty
from ..core.enums import EventLinkType, EventStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..core.policy import Action, Actor, can_act, ensure_can_act
from ..storage.blob_store import BlobStore
from ..storage.model import UploadFile
from .model import EventNotice, EventNoticeFilter, NewEventNotice
from .repository import EventNoticeRepository

_FIELDS = ("title", "description", "poster_url", "link", "link_type")
_SORTABLE = ("created_at", "published_at", "title")


def detect_link_type(link: Optional[str]) -> EventLinkType:
    """``http(s)://`` links are external; anything else (including no link) is internal."""
    if link and (link.startswith("http://") or link.startswith("https://")):
        return EventLinkType.EXTERNAL
    return EventLinkType.INTERNAL


def _link_type(value: Any) -> Optional[EventLinkType]:
    if value in (None, ""):
        return None
    if isinstance(value, EventLinkType):
        return value
    return parse_enum(EventLinkType, value, "link_type")


class EventNoticeService:
    def __init__(self, notices: EventNoticeRepository, blob_store: BlobStore, *, poster_bucket: str, logger=None):
        self._notices = notices
        self._blob_store = blob_store
        self._poster_bucket = poster_bucket
        self._log = logger or get_logger(__name__)

    def _require(self, notice_id: str) -> EventNotice:
        notice = self._notices.get_by_id(notice_id)
        if not notice:
            raise NotFoundError(f"Event notice with ID {notice_id} not found")
        return notice

    def _require_own(self, actor: Actor, action: Action, notice_id: str, verb: str) -> EventNotice:
        notice = self._require(notice_id)
        ensure_can_act(actor, action, notice, message=f"You can only {verb} your own event notices")
        return notice

    def create(self, *, actor: Actor, new_notice: NewEventNotice) -> EventNotice:
        ensure_can_act(actor, Action.EVENT_CREATE)
        link = optional_str(new_notice.link)
        notice = self._notices.create(
            title=require_non_empty(new_notice.title, "title"),
            description=optional_str(new_notice.description),
            poster_url=optional_str(new_notice.poster_url),
            link=link,
            link_type=_link_type(new_notice.link_type) or detect_link_type(link),
            author_id=actor.user_id,
        )
        self._log.info("event_notice_created", notice_id=notice.id, by=actor.user_id)
        return notice

    def list(self, flt: EventNoticeFilter, page: PageRequest, *, actor: Optional[Actor] = None) -> Page[EventNotice]:
        page = page.validated(allowed_sort=_SORTABLE, default_sort="created_at")
        if not can_act(actor, Action.EVENT_READ_ALL):
            flt = EventNoticeFilter(status=EventStatus.PUBLISHED)
        return self._notices.list(flt, page)

    def list_published(self) -> List[EventNotice]:
        return list(self._notices.list_published())

    def get(self, notice_id: str, *, actor: Optional[Actor] = None) -> EventNotice:
        notice = self._require(notice_id)
        if not notice.is_published and not can_act(actor, Action.EVENT_READ_ALL):
            raise NotFoundError(f"Event notice with ID {notice_id} not found")
        return notice

    def update(self, *, actor: Actor, notice_id: str, changes: Mapping[str, Any]) -> EventNotice:
        notice = self._require_own(actor, Action.EVENT_UPDATE, notice_id, "edit")

        unknown = set(changes) - set(_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        fields: dict = {}
        if changes.get("title") is not None:
            fields["title"] = require_non_empty(changes["title"], "title")
        for name in ("description", "poster_url"):
            if name in changes:
                fields[name] = optional_str(changes[name])

        explicit_type = _link_type(changes.get("link_type"))
        if "link" in changes:
            link = optional_str(changes["link"])
            fields["link"] = link
            if explicit_type is None and link != notice.link:
                fields["link_type"] = detect_link_type(link)
        if explicit_type is not None:
            fields["link_type"] = explicit_type

        updated = self._notices.update(notice_id, fields)
        if not updated:
            raise NotFoundError("Event notice not found")
        self._log.info("event_notice_updated", notice_id=notice_id, fields=sorted(fields), by=actor.user_id)
        return updated

    def delete(self, *, actor: Actor, notice_id: str) -> None:
        self._require_own(actor, Action.EVENT_DELETE, notice_id, "delete")
        self._notices.delete(notice_id)
        self._log.info("event_notice_deleted", notice_id=notice_id, by=actor.user_id)

    def publish(self, *, actor: Actor, notice_id: str) -> EventNotice:
        self._require_own(actor, Action.EVENT_PUBLISH, notice_id, "publish")
        updated = self._notices.update(notice_id, {"status": EventStatus.PUBLISHED, "published_at": now_utc()})
        if not updated:
            raise NotFoundError("Event notice not found")
        return updated

    def unpublish(self, *, actor: Actor, notice_id: str) -> EventNotice:
        self._require_own(actor, Action.EVENT_PUBLISH, notice_id, "unpublish")
        updated = self._notices.update(notice_id, {"status": EventStatus.DRAFT, "published_at": None})
        if not updated:
            raise NotFoundError("Event notice not found")
        return updated

    def upload_poster(self, *, actor: Actor, file: Optional[UploadFile]) -> str:
        ensure_can_act(actor, Action.EVENT_UPLOAD_POSTER)
        if file is None:
            raise ValidationError("file is required")
        return self._blob_store.upload(self._poster_bucket, file)
