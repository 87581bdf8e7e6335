from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional

from ..common.datetime_utils import now_utc
from ..common.pagination import Page, PageRequest
from ..common.validators import optional_str, require_non_empty
from ..core.enums import PostStatus
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..core.policy import Action, Actor, can_act, ensure_can_act
from ..storage.blob_store import BlobStore
from ..storage.model import UploadFile
from .model import NewPost, Package, PackageView, Post, PostFilter
from .repository import PackageRepository, PostRepository

_POST_FIELDS = ("title", "slug", "content", "excerpt", "featured_image", "package_id")
_SORTABLE = ("created_at", "published_at", "title")


def generate_slug(text: str) -> str:
    slug = (text or "").lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip().strip("-")


class BlogService:
    """Packages (blog categories) and their posts."""

    def __init__(
        self,
        packages: PackageRepository,
        posts: PostRepository,
        blob_store: BlobStore,
        *,
        image_bucket: str,
        logger=None,
    ):
        self._packages = packages
        self._posts = posts
        self._blob_store = blob_store
        self._image_bucket = image_bucket
        self._log = logger or get_logger(__name__)

    # -------- Packages --------
    def _require_package(self, package_id: str) -> Package:
        pkg = self._packages.get_by_id(package_id)
        if not pkg:
            raise NotFoundError(f"Package with ID {package_id} not found")
        return pkg

    def create_package(self, *, actor: Actor, name: str, slug: Optional[str] = None, description: Optional[str] = None) -> Package:
        ensure_can_act(actor, Action.PACKAGE_MANAGE)
        name = require_non_empty(name, "name")
        slug = optional_str(slug) or generate_slug(name)
        if not slug:
            raise ValidationError("slug cannot be empty")
        if self._packages.get_by_slug(slug):
            raise ConflictError(f'Package with slug "{slug}" already exists')
        pkg = self._packages.create(name=name, slug=slug, description=optional_str(description))
        self._log.info("package_created", package_id=pkg.id, slug=slug, by=actor.user_id)
        return pkg

    def list_packages(self) -> List[Package]:
        return list(self._packages.list_with_counts())

    def get_package(self, package_id: str) -> PackageView:
        pkg = self._require_package(package_id)
        return PackageView(package=pkg, posts=list(self._posts.list_published_by_package(pkg.id)))

    def get_package_by_slug(self, slug: str) -> PackageView:
        pkg = self._packages.get_by_slug(slug)
        if not pkg:
            raise NotFoundError(f'Package with slug "{slug}" not found')
        return PackageView(package=pkg, posts=list(self._posts.list_published_by_package(pkg.id)))

    def update_package(self, *, actor: Actor, package_id: str, changes: Mapping[str, Any]) -> Package:
        ensure_can_act(actor, Action.PACKAGE_MANAGE)
        pkg = self._require_package(package_id)

        fields = {}
        if changes.get("name") is not None:
            fields["name"] = require_non_empty(changes["name"], "name")
        if "description" in changes:
            fields["description"] = optional_str(changes["description"])
        new_slug = optional_str(changes.get("slug"))
        if new_slug and new_slug != pkg.slug:
            if self._packages.get_by_slug(new_slug):
                raise ConflictError(f'Package with slug "{new_slug}" already exists')
            fields["slug"] = new_slug

        updated = self._packages.update(package_id, fields)
        if not updated:
            raise NotFoundError("Package not found")
        return updated

    def delete_package(self, *, actor: Actor, package_id: str) -> None:
        ensure_can_act(actor, Action.PACKAGE_MANAGE)
        self._require_package(package_id)
        if self._packages.count_posts(package_id) > 0:
            raise ConflictError("Cannot delete package with existing posts. Delete or move the posts first.")
        self._packages.delete(package_id)
        self._log.info("package_deleted", package_id=package_id, by=actor.user_id)

    # -------- Posts --------
    def _require_post(self, post_id: str) -> Post:
        post = self._posts.get_by_id(post_id)
        if not post:
            raise NotFoundError(f"Post with ID {post_id} not found")
        return post

    def _require_own_post(self, actor: Actor, action: Action, post_id: str, verb: str) -> Post:
        post = self._require_post(post_id)
        ensure_can_act(actor, action, post, message=f"You can only {verb} your own posts")
        return post

    def create_post(self, *, actor: Actor, new_post: NewPost) -> Post:
        ensure_can_act(actor, Action.POST_CREATE)
        title = require_non_empty(new_post.title, "title")
        content = require_non_empty(new_post.content, "content")
        slug = optional_str(new_post.slug) or generate_slug(title)
        if not slug:
            raise ValidationError("slug cannot be empty")
        if self._posts.get_by_slug(slug):
            raise ConflictError(f'Post with slug "{slug}" already exists')
        self._require_package(require_non_empty(new_post.package_id, "package_id"))

        post = self._posts.create(
            title=title,
            slug=slug,
            content=content,
            excerpt=optional_str(new_post.excerpt),
            featured_image=optional_str(new_post.featured_image),
            package_id=new_post.package_id,
            author_id=actor.user_id,
        )
        self._log.info("post_created", post_id=post.id, by=actor.user_id)
        return post

    def list_posts(self, flt: PostFilter, page: PageRequest, *, actor: Optional[Actor] = None) -> Page[Post]:
        """Anonymous callers and members only ever see published posts."""
        page = page.validated(allowed_sort=_SORTABLE, default_sort="created_at")
        if not can_act(actor, Action.POST_READ_ALL):
            flt = PostFilter(package_id=flt.package_id, status=PostStatus.PUBLISHED, author_id=flt.author_id, search=flt.search)
        return self._posts.list(flt, page)

    def get_post(self, post_id: str) -> Post:
        return self._require_post(post_id)

    def get_post_by_slug(self, slug: str, *, require_published: bool = True) -> Post:
        post = self._posts.get_by_slug(slug)
        if not post or (require_published and not post.is_published):
            raise NotFoundError(f'Post with slug "{slug}" not found')
        return post

    def update_post(self, *, actor: Actor, post_id: str, changes: Mapping[str, Any]) -> Post:
        post = self._require_own_post(actor, Action.POST_UPDATE, post_id, "edit")

        unknown = set(changes) - set(_POST_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")

        fields = {}
        for name in ("title", "content"):
            if changes.get(name) is not None:
                fields[name] = require_non_empty(changes[name], name)
        for name in ("excerpt", "featured_image"):
            if name in changes:
                fields[name] = optional_str(changes[name])

        new_slug = optional_str(changes.get("slug"))
        if new_slug and new_slug != post.slug:
            if self._posts.get_by_slug(new_slug):
                raise ConflictError(f'Post with slug "{new_slug}" already exists')
            fields["slug"] = new_slug

        new_package = optional_str(changes.get("package_id"))
        if new_package and new_package != post.package_id:
            self._require_package(new_package)
            fields["package_id"] = new_package

        updated = self._posts.update(post_id, fields)
        if not updated:
            raise NotFoundError("Post not found")
        self._log.info("post_updated", post_id=post_id, fields=sorted(fields), by=actor.user_id)
        return updated

    def delete_post(self, *, actor: Actor, post_id: str) -> None:
        self._require_own_post(actor, Action.POST_DELETE, post_id, "delete")
        self._posts.delete(post_id)
        self._log.info("post_deleted", post_id=post_id, by=actor.user_id)

    def publish_post(self, *, actor: Actor, post_id: str) -> Post:
        self._require_own_post(actor, Action.POST_PUBLISH, post_id, "publish")
        updated = self._posts.update(post_id, {"status": PostStatus.PUBLISHED, "published_at": now_utc()})
        if not updated:
            raise NotFoundError("Post not found")
        self._log.info("post_published", post_id=post_id, by=actor.user_id)
        return updated

    def unpublish_post(self, *, actor: Actor, post_id: str) -> Post:
        self._require_own_post(actor, Action.POST_PUBLISH, post_id, "unpublish")
        updated = self._posts.update(post_id, {"status": PostStatus.DRAFT, "published_at": None})
        if not updated:
            raise NotFoundError("Post not found")
        self._log.info("post_unpublished", post_id=post_id, by=actor.user_id)
        return updated

    def upload_image(self, *, actor: Actor, file: Optional[UploadFile]) -> str:
        ensure_can_act(actor, Action.POST_UPLOAD_IMAGE)
        if file is None:
            raise ValidationError("file is required")
        return self._blob_store.upload(self._image_bucket, file)
