from __future__ import annotations

import io

import pytest

from connect_hub.blog.model import NewPost, PostFilter
from connect_hub.blog.service import BlogService, generate_slug
from connect_hub.common.pagination import PageRequest
from connect_hub.core.enums import PostStatus, Role
from connect_hub.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from connect_hub.core.policy import Actor
from connect_hub.storage.model import UploadFile


@pytest.fixture
def service(package_repo, post_repo, blob_store):
    return BlogService(package_repo, post_repo, blob_store, image_bucket="blog-images")


@pytest.fixture
def package(service, admin):
    return service.create_package(actor=admin, name="Daily Devotionals", description="Short reads")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Hello World", "hello-world"),
        ("  Grace & Truth!  ", "grace-truth"),
        ("Faith -- Hope   Love", "faith-hope-love"),
        ("Café 2024", "caf-2024"),
        ("", ""),
    ],
)
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


def test_create_package_generates_slug(package):
    assert package.slug == "daily-devotionals"
    assert package.description == "Short reads"


def test_package_slug_is_unique(service, admin, package):
    with pytest.raises(ConflictError):
        service.create_package(actor=admin, name="Daily devotionals")


def test_packages_are_admin_managed(service, writer):
    with pytest.raises(AuthorizationError):
        service.create_package(actor=writer, name="Mine")


def test_package_with_posts_cannot_be_deleted(service, admin, writer, package, package_repo):
    service.create_post(actor=writer, new_post=NewPost(title="First", content="Body", package_id=package.id))

    with pytest.raises(ConflictError):
        service.delete_package(actor=admin, package_id=package.id)
    assert service.list_packages()[0].post_count == 1


def test_update_package_slug_conflict(service, admin, package):
    other = service.create_package(actor=admin, name="Sermons")
    with pytest.raises(ConflictError):
        service.update_package(actor=admin, package_id=other.id, changes={"slug": "daily-devotionals"})
    assert service.update_package(actor=admin, package_id=other.id, changes={"name": "Sunday Sermons"}).name == "Sunday Sermons"


def test_create_post_is_a_draft_owned_by_its_writer(service, writer, package):
    post = service.create_post(actor=writer, new_post=NewPost(title="Walking in Faith", content="...", package_id=package.id))

    assert post.slug == "walking-in-faith"
    assert post.status == PostStatus.DRAFT
    assert post.author_id == writer.user_id
    assert post.published_at is None


def test_create_post_checks_package_and_slug(service, writer, package):
    with pytest.raises(NotFoundError):
        service.create_post(actor=writer, new_post=NewPost(title="A", content="B", package_id="nope"))

    service.create_post(actor=writer, new_post=NewPost(title="Same", content="B", package_id=package.id))
    with pytest.raises(ConflictError):
        service.create_post(actor=writer, new_post=NewPost(title="Same", content="C", package_id=package.id))


def test_members_cannot_write(service, member, package):
    with pytest.raises(AuthorizationError):
        service.create_post(actor=member, new_post=NewPost(title="A", content="B", package_id=package.id))


def test_publish_and_unpublish(service, writer, package):
    post = service.create_post(actor=writer, new_post=NewPost(title="News", content="B", package_id=package.id))

    published = service.publish_post(actor=writer, post_id=post.id)
    assert published.status == PostStatus.PUBLISHED
    assert published.published_at is not None
    assert service.get_post_by_slug("news").id == post.id

    draft = service.unpublish_post(actor=writer, post_id=post.id)
    assert draft.status == PostStatus.DRAFT
    assert draft.published_at is None
    with pytest.raises(NotFoundError):
        service.get_post_by_slug("news")
    assert service.get_post_by_slug("news", require_published=False).id == post.id


def test_writers_only_touch_their_own_posts(service, writer, admin, package):
    post = service.create_post(actor=writer, new_post=NewPost(title="Mine", content="B", package_id=package.id))
    other_writer = Actor(user_id="writer-2", role=Role.WRITER)

    with pytest.raises(AuthorizationError, match="your own posts"):
        service.update_post(actor=other_writer, post_id=post.id, changes={"title": "Stolen"})
    with pytest.raises(AuthorizationError):
        service.publish_post(actor=other_writer, post_id=post.id)
    with pytest.raises(AuthorizationError):
        service.delete_post(actor=other_writer, post_id=post.id)

    assert service.update_post(actor=admin, post_id=post.id, changes={"title": "Edited"}).title == "Edited"


def test_update_post_fields(service, writer, package, admin):
    post = service.create_post(actor=writer, new_post=NewPost(title="Mine", content="B", package_id=package.id, excerpt="old"))
    other = service.create_package(actor=admin, name="Other")

    updated = service.update_post(
        actor=writer,
        post_id=post.id,
        changes={"excerpt": "", "slug": "my-post", "package_id": other.id},
    )
    assert updated.excerpt is None
    assert updated.slug == "my-post"
    assert updated.package_id == other.id

    with pytest.raises(ValidationError):
        service.update_post(actor=writer, post_id=post.id, changes={"author_id": "me"})


def test_public_listing_only_shows_published(service, writer, package, post_repo):
    draft = service.create_post(actor=writer, new_post=NewPost(title="Draft", content="B", package_id=package.id))
    live = service.create_post(actor=writer, new_post=NewPost(title="Live", content="B", package_id=package.id))
    service.publish_post(actor=writer, post_id=live.id)

    public = service.list_posts(PostFilter(status=PostStatus.DRAFT), PageRequest())
    assert [p.id for p in public.records] == [live.id]

    staff = service.list_posts(PostFilter(status=PostStatus.DRAFT), PageRequest(), actor=writer)
    assert [p.id for p in staff.records] == [draft.id]


def test_package_view_lists_published_posts(service, writer, package):
    live = service.create_post(actor=writer, new_post=NewPost(title="Live", content="B", package_id=package.id))
    service.create_post(actor=writer, new_post=NewPost(title="Draft", content="B", package_id=package.id))
    service.publish_post(actor=writer, post_id=live.id)

    view = service.get_package_by_slug("daily-devotionals")
    assert [p.id for p in view.posts] == [live.id]
    assert service.get_package(package.id).to_dict()["posts"][0]["title"] == "Live"


def test_upload_image(service, writer, member, blob_store):
    file = UploadFile(filename="cover.png", stream=io.BytesIO(b"png"), content_type="image/png")

    assert service.upload_image(actor=writer, file=file) == "https://cdn.test/blog-images/cover.png"
    with pytest.raises(ValidationError):
        service.upload_image(actor=writer, file=None)
    with pytest.raises(AuthorizationError):
        service.upload_image(actor=member, file=file)


def test_publishing_a_post_removed_meanwhile_is_not_found(service, writer, package, post_repo, monkeypatch):
    post = service.create_post(actor=writer, new_post=NewPost(title="Gone", content="B", package_id=package.id))
    monkeypatch.setattr(post_repo, "update", lambda post_id, fields: None)

    with pytest.raises(NotFoundError):
        service.publish_post(actor=writer, post_id=post.id)
    with pytest.raises(NotFoundError):
        service.unpublish_post(actor=writer, post_id=post.id)
