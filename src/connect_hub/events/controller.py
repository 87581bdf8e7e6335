from __future__ import annotations

from flask import Flask, request

from ..auth.guard import Guards, current_actor, optional_actor
from ..common.http import json_body, json_response
from ..common.pagination import PageRequest
from ..common.validators import optional_str, parse_enum
from ..container import Container
from ..core.enums import EventStatus
from ..core.policy import Action
from ..storage.model import UploadFile
from .model import EventNoticeFilter, NewEventNotice


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    events = container.event_notice_service

    def _filter() -> EventNoticeFilter:
        status = optional_str(request.args.get("status"))
        return EventNoticeFilter(status=parse_enum(EventStatus, status, "status") if status else None)

    @app.get("/event-notices", endpoint="event_notices_list")
    def event_notices_list():
        page = events.list(_filter(), PageRequest.from_args(request.args))
        return json_response(page.to_dict(lambda n: n.to_dict()))

    @app.get("/event-notices/published", endpoint="event_notices_published")
    def event_notices_published():
        return json_response([n.to_dict() for n in events.list_published()])

    @app.get("/event-notices/admin", endpoint="event_notices_admin")
    @guards.requires(Action.EVENT_READ_ALL)
    def event_notices_admin():
        page = events.list(_filter(), PageRequest.from_args(request.args), actor=current_actor())
        return json_response(page.to_dict(lambda n: n.to_dict()))

    @app.get("/event-notices/<notice_id>", endpoint="event_notices_get")
    def event_notices_get(notice_id: str):
        actor = optional_actor(container.auth_service)
        return json_response(events.get(notice_id, actor=actor).to_dict())

    @app.post("/event-notices", endpoint="event_notices_create")
    @guards.requires(Action.EVENT_CREATE)
    def event_notices_create():
        body = json_body()
        notice = events.create(
            actor=current_actor(),
            new_notice=NewEventNotice(
                title=body.get("title", ""),
                description=body.get("description"),
                poster_url=body.get("poster_url"),
                link=body.get("link"),
                link_type=body.get("link_type"),
            ),
        )
        return json_response(notice.to_dict(), 201)

    @app.put("/event-notices/<notice_id>", endpoint="event_notices_update")
    @guards.requires(Action.EVENT_UPDATE)
    def event_notices_update(notice_id: str):
        notice = events.update(actor=current_actor(), notice_id=notice_id, changes=json_body())
        return json_response(notice.to_dict())

    @app.delete("/event-notices/<notice_id>", endpoint="event_notices_delete")
    @guards.requires(Action.EVENT_DELETE)
    def event_notices_delete(notice_id: str):
        events.delete(actor=current_actor(), notice_id=notice_id)
        return json_response({"message": "Event notice deleted"})

    @app.patch("/event-notices/<notice_id>/publish", endpoint="event_notices_publish")
    @guards.requires(Action.EVENT_PUBLISH)
    def event_notices_publish(notice_id: str):
        return json_response(events.publish(actor=current_actor(), notice_id=notice_id).to_dict())

    @app.patch("/event-notices/<notice_id>/unpublish", endpoint="event_notices_unpublish")
    @guards.requires(Action.EVENT_PUBLISH)
    def event_notices_unpublish(notice_id: str):
        return json_response(events.unpublish(actor=current_actor(), notice_id=notice_id).to_dict())

    @app.post("/event-notices/upload-poster", endpoint="event_notices_upload_poster")
    @guards.requires(Action.EVENT_UPLOAD_POSTER)
    def event_notices_upload_poster():
        url = events.upload_poster(actor=current_actor(), file=UploadFile.from_werkzeug(request.files.get("file")))
        return json_response({"url": url}, 201)
