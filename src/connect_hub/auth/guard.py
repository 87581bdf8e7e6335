from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import g, request

from ..core.exceptions import AuthenticationError
from ..core.logging import bind_request_context
from ..core.policy import Action, Actor, ensure_can_act
from .service import AuthService


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def current_actor() -> Actor:
    actor = g.get("actor")
    if actor is None:
        raise AuthenticationError("Authentication required")
    return actor


def optional_actor(auth_service: AuthService) -> Optional[Actor]:
    """Resolve the caller when a token is sent; public routes use this to widen what they return."""
    if g.get("actor") is not None:
        return g.actor
    token = bearer_token()
    if not token:
        return None
    _authenticate(auth_service, token)
    return g.actor


def _authenticate(auth_service: AuthService, token: str) -> None:
    user, actor = auth_service.authenticate(token)
    g.user = user
    g.actor = actor
    bind_request_context(user_id=actor.user_id)


class Guards:
    """Route decorators bound to one ``AuthService``.

    ``login_required`` rejects anonymous callers with 401; ``requires(action)`` additionally
    consults the authorization policy and rejects with 403.
    """

    def __init__(self, auth_service: AuthService):
        self._auth = auth_service

    def login_required(self, view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if not token:
                raise AuthenticationError("Missing bearer token")
            _authenticate(self._auth, token)
            return view(*args, **kwargs)

        return wrapper

    def requires(self, action: Action) -> Callable[[Callable], Callable]:
        def decorator(view: Callable) -> Callable:
            @wraps(view)
            def wrapper(*args, **kwargs):
                ensure_can_act(current_actor(), action)
                return view(*args, **kwargs)

            return self.login_required(wrapper)

        return decorator
