from __future__ import annotations

from typing import Protocol

from .model import AuthSession, IdentityUser


class IdentityProvider(Protocol):
    """External identity provider (OAuth sign-in, token introspection and refresh)."""

    def get_user(self, token: str) -> IdentityUser:
        raise NotImplementedError

    def sign_in_with_oauth(self, provider: str) -> str:
        raise NotImplementedError

    def refresh_token(self, refresh_token: str) -> AuthSession:
        raise NotImplementedError
