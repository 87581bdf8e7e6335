from __future__ import annotations

from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_optional_date
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_str, parse_bool, parse_enum, require_email, require_non_empty
from ..core.enums import Gender, Role
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..core.policy import Action, Actor, ensure_can_act
from .model import MILESTONE_FIELDS, NewUser, User, UserFilter
from .repository import UserRepository

_PROFILE_FIELDS = ("name", "email", "phone", "gender", "birth_date", "address", "congregation_id") + MILESTONE_FIELDS
_SORTABLE = ("created_at", "name", "email")


class UserService:
    """Use cases around user accounts and profiles."""

    def __init__(self, users: UserRepository, *, logger=None):
        self._users = users
        self._log = logger or get_logger(__name__)

    def insert_user(self, new_user: NewUser) -> User:
        """Create a user unless the email is already registered, in which case the existing user is returned."""
        email = require_email(new_user.email)
        existing = self._users.get_by_email(email)
        if existing:
            return existing

        name = require_non_empty(new_user.name, "name")
        if new_user.google_id and self._users.get_by_google_id(new_user.google_id):
            raise ConflictError("google_id is already linked to another user")

        user = self._users.create(
            NewUser(
                name=name,
                email=email,
                role=new_user.role,
                google_id=new_user.google_id,
                phone=optional_str(new_user.phone),
                gender=new_user.gender,
                birth_date=new_user.birth_date,
                address=optional_str(new_user.address),
                congregation_id=optional_str(new_user.congregation_id),
                milestones=dict(new_user.milestones),
            )
        )
        self._log.info("user_created", user_id=user.id, role=user.role.value)
        return user

    def get_user(self, user_id: str) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user

    def get_by_email(self, email: str) -> User:
        user = self._users.get_by_email(require_email(email))
        if not user:
            raise NotFoundError(f"User with email {email} not found")
        return user

    def find_by_google_id(self, google_id: str) -> Optional[User]:
        if not google_id:
            return None
        return self._users.get_by_google_id(google_id)

    def link_google_id(self, user_id: str, google_id: str) -> User:
        self.get_user(user_id)
        other = self._users.get_by_google_id(google_id)
        if other and other.id != user_id:
            raise ConflictError("google_id is already linked to another user")
        updated = self._users.update(user_id, {"google_id": google_id})
        if not updated:
            raise NotFoundError("User not found")
        return updated

    def list_users(self, flt: UserFilter, page: PageRequest) -> Page[User]:
        page = page.validated(allowed_sort=_SORTABLE, default_sort="created_at")
        search = optional_str(flt.search)
        self._log.debug("users_listed", role=flt.role.value if flt.role else None, search=search, page=page.page)
        return self._users.list(UserFilter(role=flt.role, search=search), page)

    def assign_role(self, *, actor: Actor, user_id: str, role: Role) -> User:
        ensure_can_act(actor, Action.USER_ASSIGN_ROLE, message="Only admins can assign roles")
        self.get_user(user_id)
        updated = self._users.update(user_id, {"role": role})
        if not updated:
            raise NotFoundError("User not found")
        self._log.info("user_role_assigned", user_id=user_id, role=role.value, by=actor.user_id)
        return updated

    def update_user(self, *, actor: Actor, user_id: str, changes: Mapping[str, Any]) -> User:
        target = self.get_user(user_id)
        ensure_can_act(actor, Action.USER_UPDATE, target, message="You can only update your own profile")

        unknown = set(changes) - set(_PROFILE_FIELDS) - {"role"}
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        fields: dict[str, Any] = {}
        if "role" in changes and changes["role"] is not None:
            role = changes["role"] if isinstance(changes["role"], Role) else parse_enum(Role, changes["role"], "role")
            if role != target.role:
                ensure_can_act(actor, Action.USER_ASSIGN_ROLE, message="Only admins can change roles")
                fields["role"] = role

        for name in _PROFILE_FIELDS:
            if name not in changes:
                continue
            fields[name] = self._clean_field(name, changes[name])

        if "email" in fields and fields["email"] != target.email:
            other = self._users.get_by_email(fields["email"])
            if other and other.id != user_id:
                raise ConflictError("Email is already in use")

        updated = self._users.update(user_id, fields)
        if not updated:
            raise NotFoundError(f"User with ID {user_id} not found")
        self._log.info("user_updated", user_id=user_id, fields=sorted(fields), by=actor.user_id)
        return updated

    @staticmethod
    def _clean_field(name: str, value: Any) -> Any:
        if name == "name":
            return require_non_empty(value, "name")
        if name == "email":
            return require_email(value)
        if name == "gender":
            if value in (None, ""):
                return None
            return value if isinstance(value, Gender) else parse_enum(Gender, value, "gender")
        if name == "birth_date":
            return parse_optional_date(value) if isinstance(value, (str, type(None))) else value
        if name in MILESTONE_FIELDS:
            return bool(parse_bool(value, name))
        return optional_str(value)

    def delete_user(self, *, actor: Actor, user_id: str) -> None:
        ensure_can_act(actor, Action.USER_DELETE, message="Only admins can delete users")
        if actor.user_id == user_id:
            raise ValidationError("You cannot delete your own account")
        self.get_user(user_id)
        if not self._users.delete(user_id):
            raise NotFoundError(f"User with ID {user_id} not found")
        self._log.info("user_deleted", user_id=user_id, by=actor.user_id)
