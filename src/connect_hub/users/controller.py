from __future__ import annotations

from flask import Flask, g, request

from ..auth.guard import Guards, current_actor
from ..common.http import json_body, json_response
from ..common.pagination import PageRequest
from ..common.validators import optional_str, parse_enum
from ..container import Container
from ..core.enums import Role
from ..core.policy import Action
from .model import UserFilter


def register(app: Flask, container: Container) -> None:
    guards = Guards(container.auth_service)
    users = container.user_service

    @app.get("/users/me", endpoint="users_me")
    @guards.login_required
    def users_me():
        return json_response(g.user.to_dict())

    @app.get("/users", endpoint="users_list")
    @guards.requires(Action.USER_READ)
    def users_list():
        role_raw = optional_str(request.args.get("role"))
        flt = UserFilter(
            role=parse_enum(Role, role_raw, "role") if role_raw else None,
            search=request.args.get("search"),
        )
        page = users.list_users(flt, PageRequest.from_args(request.args))
        return json_response(page.to_dict(lambda u: u.to_dict()))

    @app.get("/users/<user_id>", endpoint="users_get")
    @guards.requires(Action.USER_READ)
    def users_get(user_id: str):
        return json_response(users.get_user(user_id).to_dict())

    @app.put("/users/<user_id>", endpoint="users_update")
    @guards.login_required
    def users_update(user_id: str):
        user = users.update_user(actor=current_actor(), user_id=user_id, changes=json_body())
        return json_response(user.to_dict())

    @app.put("/users/<user_id>/role", endpoint="users_assign_role")
    @guards.requires(Action.USER_ASSIGN_ROLE)
    def users_assign_role(user_id: str):
        role = parse_enum(Role, json_body().get("role"), "role")
        user = users.assign_role(actor=current_actor(), user_id=user_id, role=role)
        return json_response(user.to_dict())

    @app.delete("/users/<user_id>", endpoint="users_delete")
    @guards.requires(Action.USER_DELETE)
    def users_delete(user_id: str):
        users.delete_user(actor=current_actor(), user_id=user_id)
        return json_response({"message": "User deleted"})
