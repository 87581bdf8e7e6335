from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import iso
from ..core.enums import PostStatus


@dataclass(frozen=True)
class AuthorSummary:
    id: str
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass(frozen=True)
class Package:
    """A blog category grouping posts."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    post_count: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "description": self.description,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if self.post_count is not None:
            data["post_count"] = self.post_count
        return data


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    slug: str
    content: str
    package_id: str
    author_id: str
    status: PostStatus = PostStatus.DRAFT
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author: Optional[AuthorSummary] = None
    package_name: Optional[str] = None

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "content": self.content,
            "excerpt": self.excerpt,
            "featured_image": self.featured_image,
            "package_id": self.package_id,
            "package": {"id": self.package_id, "name": self.package_name} if self.package_name else None,
            "author_id": self.author_id,
            "author": self.author.to_dict() if self.author else None,
            "status": self.status.value,
            "published_at": iso(self.published_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }


@dataclass(frozen=True)
class PackageView:
    package: Package
    posts: Sequence[Post] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = self.package.to_dict()
        data["posts"] = [p.to_dict() for p in self.posts]
        return data


@dataclass(frozen=True)
class NewPost:
    title: str
    content: str
    package_id: str
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None


@dataclass(frozen=True)
class PostFilter:
    package_id: Optional[str] = None
    status: Optional[PostStatus] = None
    author_id: Optional[str] = None
    search: Optional[str] = None
