from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FormSubmission:
    """A form posted by the public site (e.g. an event registration form)."""

    name: str
    email: str
    phone: Optional[str] = None
    additional_data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Recipient:
    email: str
    name: Optional[str] = None
