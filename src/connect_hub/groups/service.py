from __future__ import annotations

from typing import Dict, Optional

from ..common.datetime_utils import now_utc
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_str, require_max_length, require_non_empty
from ..core.enums import Role
from ..core.exceptions import ConflictError, NotFoundError
from ..core.logging import get_logger
from ..core.policy import Action, Actor, ensure_can_act
from ..users.model import MentorSummary
from ..users.repository import UserRepository
from .model import Group, GroupFilter, GroupView
from .repository import GroupRepository

_SORTABLE = ("created_at", "name")


class GroupService:
    """Use cases for connect groups.

    Rules enforced here:
    - a group's mentor must be a user with role MENTOR;
    - a mentor leads at most one active group;
    - names are unique among active groups;
    - deletes are soft, so historical attendance stays attributable.
    """

    def __init__(self, groups: GroupRepository, users: UserRepository, *, logger=None):
        self._groups = groups
        self._users = users
        self._log = logger or get_logger(__name__)

    def _check_mentor(self, mentor_id: str, *, exclude_group_id: Optional[str] = None) -> None:
        mentor = self._users.get_by_id(mentor_id)
        if not mentor or mentor.role != Role.MENTOR:
            raise NotFoundError("Mentor not found or is not a mentor")
        led = self._groups.find_active_by_mentor(mentor_id)
        if led and led.id != exclude_group_id:
            raise ConflictError("Mentor already has a group")

    def _check_name(self, name: str, *, exclude_group_id: Optional[str] = None) -> None:
        existing = self._groups.find_active_by_name(name)
        if existing and existing.id != exclude_group_id:
            raise ConflictError("Group name already exists")

    def _mentor_summary(self, mentor_id: Optional[str], cache: Optional[Dict[str, Optional[MentorSummary]]] = None) -> Optional[MentorSummary]:
        if not mentor_id:
            return None
        if cache is not None and mentor_id in cache:
            return cache[mentor_id]
        user = self._users.get_by_id(mentor_id)
        summary = MentorSummary.from_user(user) if user else None
        if cache is not None:
            cache[mentor_id] = summary
        return summary

    def require_active(self, group_id: str) -> Group:
        group = self._groups.get_by_id(group_id)
        if not group:
            raise NotFoundError(f"Group with ID {group_id} not found")
        return group

    def create_group(self, *, actor: Actor, name: str, mentor_id: Optional[str] = None) -> GroupView:
        ensure_can_act(actor, Action.GROUP_CREATE, message="Only admins can create groups")
        name = require_max_length(require_non_empty(name, "name"), "name", 150)
        mentor_id = optional_str(mentor_id)

        if mentor_id:
            self._check_mentor(mentor_id)
        self._check_name(name)

        group = self._groups.create(name=name, mentor_id=mentor_id)
        self._log.info("group_created", group_id=group.id, mentor_id=mentor_id, by=actor.user_id)
        return GroupView(group=group, mentor=self._mentor_summary(group.mentor_id))

    def list_groups(self, flt: GroupFilter, page: PageRequest) -> Page[GroupView]:
        page = page.validated(allowed_sort=_SORTABLE, default_sort="created_at")
        result = self._groups.list(flt, page)
        cache: Dict[str, Optional[MentorSummary]] = {}
        views = [GroupView(group=g, mentor=self._mentor_summary(g.mentor_id, cache)) for g in result.records]
        return Page(records=views, total=result.total, page=result.page, limit=result.limit)

    def get_group(self, group_id: str) -> GroupView:
        group = self.require_active(group_id)
        return GroupView(
            group=group,
            mentor=self._mentor_summary(group.mentor_id),
            mentees=list(self._users.list_by_group(group.id)),
        )

    def update_group(
        self,
        *,
        actor: Actor,
        group_id: str,
        name: Optional[str] = None,
        mentor_id: Optional[str] = None,
        clear_mentor: bool = False,
    ) -> GroupView:
        ensure_can_act(actor, Action.GROUP_UPDATE, message="Only admins can update groups")
        group = self.require_active(group_id)

        fields: Dict[str, Optional[str]] = {}
        if name is not None:
            name = require_max_length(require_non_empty(name, "name"), "name", 150)
            if name != group.name:
                self._check_name(name, exclude_group_id=group.id)
            fields["name"] = name

        if clear_mentor:
            fields["mentor_id"] = None
        elif optional_str(mentor_id):
            mentor_id = optional_str(mentor_id)
            self._check_mentor(mentor_id, exclude_group_id=group.id)
            fields["mentor_id"] = mentor_id

        updated = self._groups.update(group.id, fields)
        if not updated:
            raise NotFoundError(f"Group with ID {group_id} not found")
        self._log.info("group_updated", group_id=group.id, fields=sorted(fields), by=actor.user_id)
        return GroupView(group=updated, mentor=self._mentor_summary(updated.mentor_id))

    def delete_group(self, *, actor: Actor, group_id: str) -> None:
        ensure_can_act(actor, Action.GROUP_DELETE, message="Only admins can delete groups")
        self.require_active(group_id)
        if not self._groups.soft_delete(group_id, deleted_at=now_utc()):
            raise NotFoundError(f"Group with ID {group_id} not found")
        self._log.info("group_deleted", group_id=group_id, by=actor.user_id)
