"""
Supabase Auth integration over its REST API.

Endpoints used:
- GET  /auth/v1/user                          (resolve an access token)
- GET  /auth/v1/authorize?provider=...        (OAuth redirect URL, built locally)
- POST /auth/v1/token?grant_type=refresh_token
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

import requests

from ..core.exceptions import AuthenticationError, DependencyError
from ..core.logging import get_logger
from .identity_provider import IdentityProvider
from .model import AuthSession, IdentityUser


class SupabaseIdentityProvider(IdentityProvider):
    def __init__(self, url: str, anon_key: str, *, redirect_url: str, timeout: float = 10, session: Optional[requests.Session] = None, logger=None):
        self._url = (url or "").rstrip("/")
        self._anon_key = anon_key or ""
        self._redirect_url = redirect_url
        self._timeout = timeout
        self._http = session or requests.Session()
        self._log = logger or get_logger(__name__)

    def is_configured(self) -> bool:
        return bool(self._url and self._anon_key)

    def _headers(self, token: Optional[str] = None) -> dict:
        headers = {"apikey": self._anon_key, "Content-Type": "application/json"}
        headers["Authorization"] = f"Bearer {token or self._anon_key}"
        return headers

    def _require_configured(self) -> None:
        if not self.is_configured():
            raise DependencyError("Identity provider is not configured")

    def get_user(self, token: str) -> IdentityUser:
        self._require_configured()
        try:
            response = self._http.get(f"{self._url}/auth/v1/user", headers=self._headers(token), timeout=self._timeout)
        except requests.RequestException as e:
            self._log.error("identity_provider_unreachable", error=str(e))
            raise DependencyError("Identity provider is unreachable")

        if response.status_code in (401, 403):
            raise AuthenticationError("Invalid or expired token")
        if response.status_code != 200:
            self._log.error("identity_provider_error", status=response.status_code, body=response.text[:200])
            raise DependencyError(f"Identity provider error: {response.status_code}")

        data = response.json()
        return IdentityUser(
            id=str(data["id"]),
            email=data.get("email"),
            phone=data.get("phone") or None,
            provider=(data.get("app_metadata") or {}).get("provider"),
            metadata=data.get("user_metadata") or {},
        )

    def sign_in_with_oauth(self, provider: str) -> str:
        self._require_configured()
        query = urlencode({"provider": provider, "redirect_to": self._redirect_url})
        return f"{self._url}/auth/v1/authorize?{query}"

    def refresh_token(self, refresh_token: str) -> AuthSession:
        self._require_configured()
        try:
            response = self._http.post(
                f"{self._url}/auth/v1/token",
                params={"grant_type": "refresh_token"},
                headers=self._headers(),
                json={"refresh_token": refresh_token},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            self._log.error("identity_provider_unreachable", error=str(e))
            raise DependencyError("Identity provider is unreachable")

        if response.status_code in (400, 401):
            raise AuthenticationError("Failed to refresh session")
        if response.status_code != 200:
            self._log.error("identity_provider_error", status=response.status_code, body=response.text[:200])
            raise DependencyError(f"Identity provider error: {response.status_code}")

        data = response.json()
        return AuthSession(
            access_token=data["access_token"],
            refresh_token=data["refresh_token"],
            expires_in=data.get("expires_in"),
            token_type=data.get("token_type"),
        )
