"""Authorization policy.

Every mutating use case asks the same question, ``can_act(actor, action, resource)``,
instead of repeating role checks inline. Route gates use it too, so the rule
table below is the only place where roles are mapped to permissions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Actor:
    """The authenticated caller, as attached to the request by the auth guard."""

    user_id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class Action(str, Enum):
    ATTENDANCE_CREATE = "attendance:create"
    ATTENDANCE_UPDATE = "attendance:update"
    ATTENDANCE_DELETE = "attendance:delete"
    ATTENDANCE_READ = "attendance:read"
    ATTENDANCE_REPORT = "attendance:report"

    GROUP_CREATE = "group:create"
    GROUP_UPDATE = "group:update"
    GROUP_DELETE = "group:delete"
    GROUP_READ = "group:read"

    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_ASSIGN_ROLE = "user:assign_role"
    USER_DELETE = "user:delete"

    PACKAGE_MANAGE = "package:manage"
    POST_CREATE = "post:create"
    POST_READ_ALL = "post:read_all"
    POST_UPDATE = "post:update"
    POST_DELETE = "post:delete"
    POST_PUBLISH = "post:publish"
    POST_UPLOAD_IMAGE = "post:upload_image"

    EVENT_CREATE = "event:create"
    EVENT_READ_ALL = "event:read_all"
    EVENT_UPDATE = "event:update"
    EVENT_DELETE = "event:delete"
    EVENT_PUBLISH = "event:publish"
    EVENT_UPLOAD_POSTER = "event:upload_poster"


# Roles (besides ADMIN) allowed to perform an action on any resource.
_ROLE_GRANTS: dict[Action, frozenset[Role]] = {
    Action.ATTENDANCE_CREATE: frozenset({Role.MENTOR}),
    Action.ATTENDANCE_UPDATE: frozenset({Role.MENTOR}),
    Action.ATTENDANCE_READ: frozenset({Role.MENTOR}),
    Action.ATTENDANCE_REPORT: frozenset({Role.MENTOR}),
    Action.GROUP_READ: frozenset({Role.MENTOR}),
    Action.USER_READ: frozenset({Role.MENTOR}),
    Action.POST_CREATE: frozenset({Role.WRITER}),
    Action.POST_READ_ALL: frozenset({Role.WRITER}),
    Action.POST_UPLOAD_IMAGE: frozenset({Role.WRITER}),
    Action.EVENT_CREATE: frozenset({Role.EVENT_MANAGER}),
    Action.EVENT_READ_ALL: frozenset({Role.EVENT_MANAGER}),
    Action.EVENT_UPLOAD_POSTER: frozenset({Role.EVENT_MANAGER}),
}

# Roles allowed to perform an action only on resources they own.
_OWNER_GRANTS: dict[Action, frozenset[Role]] = {
    Action.POST_UPDATE: frozenset({Role.WRITER}),
    Action.POST_DELETE: frozenset({Role.WRITER}),
    Action.POST_PUBLISH: frozenset({Role.WRITER}),
    Action.EVENT_UPDATE: frozenset({Role.EVENT_MANAGER}),
    Action.EVENT_DELETE: frozenset({Role.EVENT_MANAGER}),
    Action.EVENT_PUBLISH: frozenset({Role.EVENT_MANAGER}),
    Action.USER_UPDATE: frozenset(Role),
}


def owner_of(resource: Any) -> Optional[str]:
    """Return the id of the user owning ``resource`` (author for content, the user itself for users)."""

    if resource is None:
        return None
    for attr in ("author_id", "user_id", "id"):
        value = getattr(resource, attr, None)
        if value is not None:
            return str(value)
    return None


def can_act(actor: Optional[Actor], action: Action, resource: Any = None) -> bool:
    if actor is None:
        return False
    if actor.role == Role.ADMIN:
        return True

    if actor.role in _ROLE_GRANTS.get(action, frozenset()):
        return True

    if actor.role in _OWNER_GRANTS.get(action, frozenset()):
        # Gate checks run before the resource is loaded; ownership is
        # re-checked by the service once it is.
        if resource is None:
            return True
        return owner_of(resource) == str(actor.user_id)

    return False


def ensure_can_act(actor: Optional[Actor], action: Action, resource: Any = None, *, message: str = "Access denied") -> None:
    if not can_act(actor, action, resource):
        raise AuthorizationError(message)
