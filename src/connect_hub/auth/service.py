from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..core.logging import get_logger
from ..core.policy import Actor
from ..users.model import NewUser, User
from ..users.service import UserService
from .identity_provider import IdentityProvider
from .model import AuthSession


@dataclass(frozen=True)
class LoginResult:
    user: User
    profile_pic: Optional[str]
    session: AuthSession


class AuthService:
    """Use case: sign users in through the identity provider and resolve bearer tokens."""

    def __init__(self, identity: IdentityProvider, users: UserService, *, logger=None):
        self._identity = identity
        self._users = users
        self._log = logger or get_logger(__name__)

    def login_url(self, provider: str = "google") -> str:
        return self._identity.sign_in_with_oauth(provider)

    def handle_callback(
        self,
        *,
        access_token: str,
        refresh_token: str = "",
        expires_in: Optional[int] = None,
        token_type: Optional[str] = None,
    ) -> LoginResult:
        if not access_token:
            raise AuthenticationError("Access token is missing")

        identity = self._identity.get_user(access_token)
        if not identity.email:
            raise AuthenticationError("Identity has no email address")

        user = self._users.find_by_google_id(identity.id)
        if user is None:
            user = self._users.insert_user(
                NewUser(
                    name=identity.full_name or identity.email,
                    email=identity.email,
                    role=Role.MEMBER,
                    phone=identity.phone,
                )
            )
            if user.google_id != identity.id:
                user = self._users.link_google_id(user.id, identity.id)

        self._log.info("user_signed_in", user_id=user.id, provider=identity.provider)
        return LoginResult(
            user=user,
            profile_pic=identity.picture,
            session=AuthSession(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_in=expires_in,
                token_type=token_type,
            ),
        )

    def refresh(self, refresh_token: str) -> AuthSession:
        return self._identity.refresh_token(require_non_empty(refresh_token, "refresh_token"))

    def authenticate(self, token: str) -> Tuple[User, Actor]:
        if not token:
            raise AuthenticationError("Missing bearer token")
        identity = self._identity.get_user(token)
        user = self._users.find_by_google_id(identity.id)
        if user is None:
            self._log.warning("auth_user_not_found", google_id=identity.id)
            raise AuthenticationError("User is not registered")
        return user, Actor(user_id=user.id, role=user.role)
