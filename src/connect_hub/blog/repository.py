from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import Package, Post, PostFilter


class PackageRepository(Protocol):
    def get_by_id(self, package_id: str) -> Optional[Package]:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> Optional[Package]:
        raise NotImplementedError

    def create(self, *, name: str, slug: str, description: Optional[str]) -> Package:
        raise NotImplementedError

    def update(self, package_id: str, fields: Mapping[str, Any]) -> Optional[Package]:
        raise NotImplementedError

    def delete(self, package_id: str) -> bool:
        raise NotImplementedError

    def list_with_counts(self) -> Sequence[Package]:
        raise NotImplementedError

    def count_posts(self, package_id: str) -> int:
        raise NotImplementedError


class PostRepository(Protocol):
    def get_by_id(self, post_id: str) -> Optional[Post]:
        raise NotImplementedError

    def get_by_slug(self, slug: str) -> Optional[Post]:
        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        slug: str,
        content: str,
        excerpt: Optional[str],
        featured_image: Optional[str],
        package_id: str,
        author_id: str,
    ) -> Post:
        raise NotImplementedError

    def update(self, post_id: str, fields: Mapping[str, Any]) -> Optional[Post]:
        raise NotImplementedError

    def delete(self, post_id: str) -> bool:
        raise NotImplementedError

    def list(self, flt: PostFilter, page: PageRequest) -> Page[Post]:
        raise NotImplementedError

    def list_published_by_package(self, package_id: str) -> Sequence[Post]:
        raise NotImplementedError
