from __future__ import annotations

import dataclasses
import itertools
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

import pytest

from connect_hub.attendance.model import AttendanceFact, AttendanceFilter, AttendanceRecord
from connect_hub.auth.model import AuthSession, IdentityUser
from connect_hub.blog.model import Package, Post, PostFilter
from connect_hub.common.pagination import Page, PageRequest
from connect_hub.core.enums import EventStatus, PostStatus, Role, SortOrder
from connect_hub.core.exceptions import AuthenticationError, DependencyError
from connect_hub.core.policy import Actor
from connect_hub.events.model import EventNotice, EventNoticeFilter
from connect_hub.groups.model import Group, GroupFilter, RosterEntry
from connect_hub.users.model import MentorSummary, NewUser, User, UserFilter

FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _paginate(items: list, page: PageRequest) -> Page:
    if page.sort_by:
        items = sorted(
            items,
            key=lambda x: (getattr(x, page.sort_by) is not None, getattr(x, page.sort_by)),
            reverse=page.sort_order == SortOrder.DESC,
        )
    return Page(records=items[page.offset : page.offset + page.limit], total=len(items), page=page.page, limit=page.limit)


class FakeUserRepo:
    def __init__(self):
        self.users: Dict[str, User] = {}
        self._ids = itertools.count(1)

    def add(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def get_by_id(self, user_id):
        return self.users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_google_id(self, google_id):
        return next((u for u in self.users.values() if u.google_id == google_id), None)

    def create(self, new_user: NewUser) -> User:
        user = User(
            id=f"user-{next(self._ids)}",
            name=new_user.name,
            email=new_user.email,
            role=new_user.role,
            google_id=new_user.google_id,
            phone=new_user.phone,
            gender=new_user.gender,
            birth_date=new_user.birth_date,
            address=new_user.address,
            congregation_id=new_user.congregation_id,
            created_at=FIXED_NOW,
            **new_user.milestones,
        )
        return self.add(user)

    def update(self, user_id, fields):
        user = self.users.get(user_id)
        if not user:
            return None
        self.users[user_id] = dataclasses.replace(user, **fields)
        return self.users[user_id]

    def delete(self, user_id):
        return self.users.pop(user_id, None) is not None

    def list(self, flt: UserFilter, page: PageRequest) -> Page:
        items = list(self.users.values())
        if flt.role:
            items = [u for u in items if u.role == flt.role]
        if flt.search:
            needle = flt.search.lower()
            items = [u for u in items if needle in u.name.lower() or needle in u.email.lower()]
        return _paginate(items, page)

    def list_by_group(self, group_id):
        return [u for u in self.users.values() if u.group_id == group_id]


class FakeGroupRepo:
    def __init__(self, users: FakeUserRepo):
        self.groups: Dict[str, Group] = {}
        self.calls: List[str] = []
        self._users = users
        self._ids = itertools.count(1)

    def add(self, group: Group) -> Group:
        self.groups[group.id] = group
        return group

    def get_by_id(self, group_id, *, include_deleted=False):
        self.calls.append("get_by_id")
        group = self.groups.get(group_id)
        if group and (include_deleted or group.is_active):
            return group
        return None

    def find_active_by_name(self, name):
        return next((g for g in self.groups.values() if g.is_active and g.name == name), None)

    def find_active_by_mentor(self, mentor_id):
        return next((g for g in self.groups.values() if g.is_active and g.mentor_id == mentor_id), None)

    def create(self, *, name, mentor_id):
        return self.add(Group(id=f"group-{next(self._ids)}", name=name, mentor_id=mentor_id, created_at=FIXED_NOW))

    def update(self, group_id, fields):
        group = self.get_by_id(group_id)
        if not group:
            return None
        self.groups[group_id] = dataclasses.replace(group, **fields)
        return self.groups[group_id]

    def soft_delete(self, group_id, *, deleted_at):
        group = self.get_by_id(group_id)
        if not group:
            return False
        self.groups[group_id] = dataclasses.replace(group, deleted_at=deleted_at)
        return True

    def list(self, flt: GroupFilter, page: PageRequest) -> Page:
        items = [g for g in self.groups.values() if g.is_active]
        if flt.mentor_id:
            items = [g for g in items if g.mentor_id == flt.mentor_id]
        return _paginate(items, page)

    def list_active_roster(self):
        self.calls.append("list_active_roster")
        roster = []
        for g in self.groups.values():
            if not g.is_active:
                continue
            mentor = self._users.get_by_id(g.mentor_id) if g.mentor_id else None
            roster.append(RosterEntry(group_id=g.id, name=g.name, mentor=MentorSummary.from_user(mentor) if mentor else None))
        return roster


class FakeAttendanceRepo:
    def __init__(self):
        self.records: Dict[str, AttendanceRecord] = {}
        self.calls: List[str] = []
        self._ids = itertools.count(1)

    def add(self, group_id: str, day: date, **kwargs) -> AttendanceRecord:
        record = AttendanceRecord(id=f"att-{next(self._ids)}", group_id=group_id, date=day, **kwargs)
        self.records[record.id] = record
        return record

    def get_by_id(self, attendance_id):
        return self.records.get(attendance_id)

    def create(self, *, group_id, date, notes, photo_url):
        return self.add(group_id, date, notes=notes, photo_url=photo_url, created_at=FIXED_NOW)

    def update(self, attendance_id, fields):
        record = self.records.get(attendance_id)
        if not record:
            return None
        self.records[attendance_id] = dataclasses.replace(record, **fields)
        return self.records[attendance_id]

    def delete(self, attendance_id):
        return self.records.pop(attendance_id, None) is not None

    def list(self, flt: AttendanceFilter, page: PageRequest) -> Page:
        self.calls.append("list")
        items = list(self.records.values())
        if flt.group_id:
            items = [r for r in items if r.group_id == flt.group_id]
        if flt.start_date:
            items = [r for r in items if r.date >= flt.start_date]
        if flt.end_date:
            items = [r for r in items if r.date <= flt.end_date]
        return _paginate(items, page)

    def list_facts(self, start, end):
        self.calls.append("list_facts")
        return [AttendanceFact(group_id=r.group_id, date=r.date) for r in self.records.values() if start <= r.date <= end]


class FakeBlobStore:
    def __init__(self, *, fail: bool = False):
        self.uploads: List[tuple] = []
        self.fail = fail

    def upload(self, bucket, file):
        if self.fail:
            raise DependencyError("Upload failed: storage unavailable")
        self.uploads.append((bucket, file.filename))
        return f"https://cdn.test/{bucket}/{file.filename}"


class FakePackageRepo:
    def __init__(self, posts: "FakePostRepo"):
        self.packages: Dict[str, Package] = {}
        self._posts = posts
        self._ids = itertools.count(1)

    def get_by_id(self, package_id):
        return self.packages.get(package_id)

    def get_by_slug(self, slug):
        return next((p for p in self.packages.values() if p.slug == slug), None)

    def create(self, *, name, slug, description):
        pkg = Package(id=f"pkg-{next(self._ids)}", name=name, slug=slug, description=description, created_at=FIXED_NOW)
        self.packages[pkg.id] = pkg
        return pkg

    def update(self, package_id, fields):
        pkg = self.packages.get(package_id)
        if not pkg:
            return None
        self.packages[package_id] = dataclasses.replace(pkg, **fields)
        return self.packages[package_id]

    def delete(self, package_id):
        return self.packages.pop(package_id, None) is not None

    def list_with_counts(self):
        return [dataclasses.replace(p, post_count=self.count_posts(p.id)) for p in self.packages.values()]

    def count_posts(self, package_id):
        return sum(1 for p in self._posts.posts.values() if p.package_id == package_id)


class FakePostRepo:
    def __init__(self):
        self.posts: Dict[str, Post] = {}
        self.last_filter: Optional[PostFilter] = None
        self._ids = itertools.count(1)

    def get_by_id(self, post_id):
        return self.posts.get(post_id)

    def get_by_slug(self, slug):
        return next((p for p in self.posts.values() if p.slug == slug), None)

    def create(self, *, title, slug, content, excerpt, featured_image, package_id, author_id):
        post = Post(
            id=f"post-{next(self._ids)}",
            title=title,
            slug=slug,
            content=content,
            excerpt=excerpt,
            featured_image=featured_image,
            package_id=package_id,
            author_id=author_id,
            created_at=FIXED_NOW,
        )
        self.posts[post.id] = post
        return post

    def update(self, post_id, fields):
        post = self.posts.get(post_id)
        if not post:
            return None
        self.posts[post_id] = dataclasses.replace(post, **fields)
        return self.posts[post_id]

    def delete(self, post_id):
        return self.posts.pop(post_id, None) is not None

    def list(self, flt: PostFilter, page: PageRequest) -> Page:
        self.last_filter = flt
        items = list(self.posts.values())
        if flt.status:
            items = [p for p in items if p.status == flt.status]
        if flt.package_id:
            items = [p for p in items if p.package_id == flt.package_id]
        if flt.author_id:
            items = [p for p in items if p.author_id == flt.author_id]
        return _paginate(items, page)

    def list_published_by_package(self, package_id):
        return [p for p in self.posts.values() if p.package_id == package_id and p.status == PostStatus.PUBLISHED]


class FakeEventNoticeRepo:
    def __init__(self):
        self.notices: Dict[str, EventNotice] = {}
        self.last_filter: Optional[EventNoticeFilter] = None
        self._ids = itertools.count(1)

    def get_by_id(self, notice_id):
        return self.notices.get(notice_id)

    def create(self, *, title, description, poster_url, link, link_type, author_id):
        notice = EventNotice(
            id=f"event-{next(self._ids)}",
            title=title,
            description=description,
            poster_url=poster_url,
            link=link,
            link_type=link_type,
            author_id=author_id,
            created_at=FIXED_NOW,
        )
        self.notices[notice.id] = notice
        return notice

    def update(self, notice_id, fields):
        notice = self.notices.get(notice_id)
        if not notice:
            return None
        self.notices[notice_id] = dataclasses.replace(notice, **fields)
        return self.notices[notice_id]

    def delete(self, notice_id):
        return self.notices.pop(notice_id, None) is not None

    def list(self, flt: EventNoticeFilter, page: PageRequest) -> Page:
        self.last_filter = flt
        items = list(self.notices.values())
        if flt.status:
            items = [n for n in items if n.status == flt.status]
        return _paginate(items, page)

    def list_published(self):
        published = [n for n in self.notices.values() if n.status == EventStatus.PUBLISHED]
        return sorted(published, key=lambda n: n.published_at, reverse=True)


class FakeIdentityProvider:
    def __init__(self):
        self.identities: Dict[str, IdentityUser] = {}

    def add(self, token: str, identity: IdentityUser) -> None:
        self.identities[token] = identity

    def get_user(self, token):
        identity = self.identities.get(token)
        if identity is None:
            raise AuthenticationError("Invalid or expired token")
        return identity

    def sign_in_with_oauth(self, provider):
        return f"https://idp.test/auth/v1/authorize?provider={provider}"

    def refresh_token(self, refresh_token):
        return AuthSession(access_token=f"new-{refresh_token}", refresh_token=refresh_token, expires_in=3600, token_type="bearer")


class FakeEmailSender:
    def __init__(self, *, fail_for: Optional[set] = None):
        self.sent: List[dict] = []
        self._fail_for = fail_for or set()

    def send(self, *, to, subject, html):
        emails = [r.email for r in to]
        if self._fail_for & set(emails):
            raise DependencyError("Brevo API error: 400 Bad Request")
        self.sent.append({"to": emails, "subject": subject, "html": html})
        return f"msg-{len(self.sent)}"


@pytest.fixture
def user_repo():
    return FakeUserRepo()


@pytest.fixture
def group_repo(user_repo):
    return FakeGroupRepo(user_repo)


@pytest.fixture
def attendance_repo():
    return FakeAttendanceRepo()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def failing_blob_store():
    return FakeBlobStore(fail=True)


@pytest.fixture
def post_repo():
    return FakePostRepo()


@pytest.fixture
def package_repo(post_repo):
    return FakePackageRepo(post_repo)


@pytest.fixture
def event_repo():
    return FakeEventNoticeRepo()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def email_sender():
    return FakeEmailSender()


@pytest.fixture
def make_email_sender():
    return FakeEmailSender


@pytest.fixture
def admin():
    return Actor(user_id="admin-1", role=Role.ADMIN)


@pytest.fixture
def mentor():
    return Actor(user_id="mentor-1", role=Role.MENTOR)


@pytest.fixture
def member():
    return Actor(user_id="member-1", role=Role.MEMBER)


@pytest.fixture
def writer():
    return Actor(user_id="writer-1", role=Role.WRITER)


@pytest.fixture
def event_manager():
    return Actor(user_id="manager-1", role=Role.EVENT_MANAGER)


@pytest.fixture
def connect_groups(user_repo, group_repo, attendance_repo):
    """Alpha (led by M1), Beta (led by M2) and Gamma (no mentor), with three meetings."""
    user_repo.add(User(id="m1", name="Mentor One", email="m1@example.com", role=Role.MENTOR))
    user_repo.add(User(id="m2", name="Mentor Two", email="m2@example.com", role=Role.MENTOR))
    alpha = group_repo.add(Group(id="g-alpha", name="Alpha", mentor_id="m1"))
    beta = group_repo.add(Group(id="g-beta", name="Beta", mentor_id="m2"))
    gamma = group_repo.add(Group(id="g-gamma", name="Gamma"))
    attendance_repo.add(alpha.id, date(2024, 1, 5))
    attendance_repo.add(alpha.id, date(2024, 1, 20))
    attendance_repo.add(beta.id, date(2024, 2, 10))
    return {"alpha": alpha, "beta": beta, "gamma": gamma}
