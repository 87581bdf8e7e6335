from __future__ import annotations

import pytest

from connect_hub.common.pagination import PageRequest
from connect_hub.core.enums import Role
from connect_hub.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from connect_hub.groups.model import GroupFilter
from connect_hub.groups.service import GroupService
from connect_hub.users.model import User


@pytest.fixture
def service(group_repo, user_repo):
    user_repo.add(User(id="m1", name="Mentor One", email="m1@example.com", role=Role.MENTOR))
    user_repo.add(User(id="m2", name="Mentor Two", email="m2@example.com", role=Role.MENTOR))
    user_repo.add(User(id="u1", name="Plain Member", email="u1@example.com"))
    return GroupService(group_repo, user_repo)


def test_create_with_mentor(service, admin):
    view = service.create_group(actor=admin, name="  Alpha ", mentor_id="m1")

    assert view.group.name == "Alpha"
    assert view.mentor.name == "Mentor One"
    assert view.to_dict()["mentor"]["email"] == "m1@example.com"


def test_create_without_mentor(service, admin):
    view = service.create_group(actor=admin, name="Gamma")
    assert view.group.mentor_id is None
    assert view.mentor is None


def test_create_is_admin_only(service, mentor):
    with pytest.raises(AuthorizationError):
        service.create_group(actor=mentor, name="Alpha")


def test_mentor_must_exist_and_be_a_mentor(service, admin):
    with pytest.raises(NotFoundError):
        service.create_group(actor=admin, name="Alpha", mentor_id="ghost")
    with pytest.raises(NotFoundError, match="not a mentor"):
        service.create_group(actor=admin, name="Alpha", mentor_id="u1")


def test_mentor_leads_one_active_group(service, admin):
    first = service.create_group(actor=admin, name="Alpha", mentor_id="m1")
    with pytest.raises(ConflictError, match="already has a group"):
        service.create_group(actor=admin, name="Beta", mentor_id="m1")

    service.delete_group(actor=admin, group_id=first.group.id)
    assert service.create_group(actor=admin, name="Beta", mentor_id="m1").mentor.id == "m1"


def test_names_are_unique_among_active_groups(service, admin):
    first = service.create_group(actor=admin, name="Alpha")
    with pytest.raises(ConflictError):
        service.create_group(actor=admin, name="Alpha")

    service.delete_group(actor=admin, group_id=first.group.id)
    service.create_group(actor=admin, name="Alpha")


def test_name_is_required(service, admin):
    with pytest.raises(ValidationError):
        service.create_group(actor=admin, name=" ")


def test_update_name_and_mentor(service, admin):
    group = service.create_group(actor=admin, name="Alpha", mentor_id="m1").group

    renamed = service.update_group(actor=admin, group_id=group.id, name="Alpha")
    assert renamed.group.name == "Alpha"

    moved = service.update_group(actor=admin, group_id=group.id, name="Alpha Prime", mentor_id="m2")
    assert moved.group.name == "Alpha Prime"
    assert moved.mentor.id == "m2"

    cleared = service.update_group(actor=admin, group_id=group.id, clear_mentor=True)
    assert cleared.mentor is None


def test_update_keeps_uniqueness_rules(service, admin):
    alpha = service.create_group(actor=admin, name="Alpha", mentor_id="m1").group
    service.create_group(actor=admin, name="Beta", mentor_id="m2")

    with pytest.raises(ConflictError):
        service.update_group(actor=admin, group_id=alpha.id, name="Beta")
    with pytest.raises(ConflictError):
        service.update_group(actor=admin, group_id=alpha.id, mentor_id="m2")
    # Re-assigning the group's own mentor is fine.
    service.update_group(actor=admin, group_id=alpha.id, mentor_id="m1")


def test_soft_deleted_groups_are_gone(service, admin, group_repo):
    group = service.create_group(actor=admin, name="Alpha").group
    service.delete_group(actor=admin, group_id=group.id)

    assert group_repo.groups[group.id].deleted_at is not None
    with pytest.raises(NotFoundError):
        service.get_group(group.id)
    with pytest.raises(NotFoundError):
        service.update_group(actor=admin, group_id=group.id, name="Again")
    with pytest.raises(NotFoundError):
        service.delete_group(actor=admin, group_id=group.id)


def test_get_group_includes_mentees(service, admin, user_repo):
    group = service.create_group(actor=admin, name="Alpha", mentor_id="m1").group
    user_repo.add(User(id="u2", name="Mentee", email="u2@example.com", group_id=group.id))

    view = service.get_group(group.id)
    assert [m.id for m in view.mentees] == ["u2"]
    assert view.to_dict()["mentees"][0]["name"] == "Mentee"


def test_list_groups_filters_by_mentor(service, admin):
    service.create_group(actor=admin, name="Alpha", mentor_id="m1")
    service.create_group(actor=admin, name="Beta", mentor_id="m2")
    service.create_group(actor=admin, name="Gamma")

    everything = service.list_groups(GroupFilter(), PageRequest())
    assert everything.total == 3

    mine = service.list_groups(GroupFilter(mentor_id="m2"), PageRequest())
    assert [v.group.name for v in mine.records] == ["Beta"]
    assert mine.records[0].mentor.name == "Mentor Two"
