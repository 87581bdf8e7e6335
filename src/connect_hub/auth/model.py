from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class IdentityUser:
    """The subject returned by the identity provider for an access token."""

    id: str
    email: Optional[str]
    phone: Optional[str] = None
    provider: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def full_name(self) -> Optional[str]:
        return self.metadata.get("full_name") or self.metadata.get("name")

    @property
    def picture(self) -> Optional[str]:
        return self.metadata.get("picture") or self.metadata.get("avatar_url")


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    refresh_token: str
    expires_in: Optional[int] = None
    token_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "token_type": self.token_type,
        }
