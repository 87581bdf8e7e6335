from __future__ import annotations

from flask import Flask, request

from ..auth.guard import Guards, current_actor
from ..common.http import json_body, json_response
from ..common.pagination import PageRequest
from ..common.validators import optional_str
from ..container import Container
from ..core.policy import Action
from .model import GroupFilter


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    groups = container.group_service

    @app.post("/connect-groups", endpoint="groups_create")
    @guards.requires(Action.GROUP_CREATE)
    def groups_create():
        body = json_body()
        view = groups.create_group(actor=current_actor(), name=body.get("name", ""), mentor_id=body.get("mentor_id"))
        return json_response(view.to_dict(), 201)

    @app.get("/connect-groups", endpoint="groups_list")
    @guards.requires(Action.GROUP_READ)
    def groups_list():
        flt = GroupFilter(mentor_id=optional_str(request.args.get("mentor_id")))
        page = groups.list_groups(flt, PageRequest.from_args(request.args))
        return json_response(page.to_dict(lambda v: v.to_dict()))

    @app.get("/connect-groups/<group_id>", endpoint="groups_get")
    @guards.requires(Action.GROUP_READ)
    def groups_get(group_id: str):
        return json_response(groups.get_group(group_id).to_dict())

    @app.put("/connect-groups/<group_id>", endpoint="groups_update")
    @guards.requires(Action.GROUP_UPDATE)
    def groups_update(group_id: str):
        body = json_body()
        view = groups.update_group(
            actor=current_actor(),
            group_id=group_id,
            name=body.get("name"),
            mentor_id=body.get("mentor_id"),
            clear_mentor="mentor_id" in body and body["mentor_id"] is None,
        )
        return json_response(view.to_dict())

    @app.delete("/connect-groups/<group_id>", endpoint="groups_delete")
    @guards.requires(Action.GROUP_DELETE)
    def groups_delete(group_id: str):
        groups.delete_group(actor=current_actor(), group_id=group_id)
        return json_response({"message": "Group deleted"})
