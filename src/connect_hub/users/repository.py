from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from ..common.pagination import Page, PageRequest
from .model import NewUser, User, UserFilter


class UserRepository(Protocol):
    """Storage port for users.

    Services depend on this protocol, never on a concrete database adapter.
    """

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        raise NotImplementedError

    def create(self, new_user: NewUser) -> User:
        raise NotImplementedError

    def update(self, user_id: str, fields: Mapping[str, Any]) -> Optional[User]:
        raise NotImplementedError

    def delete(self, user_id: str) -> bool:
        raise NotImplementedError

    def list(self, flt: UserFilter, page: PageRequest) -> Page[User]:
        raise NotImplementedError

    def list_by_group(self, group_id: str) -> Sequence[User]:
        raise NotImplementedError
