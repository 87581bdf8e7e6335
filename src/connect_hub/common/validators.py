from __future__ import annotations

import re
from typing import Optional, Type, TypeVar
from enum import Enum

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = str(value).strip()
    return v or None


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters")
    return value


def require_email(value: Optional[str], field_name: str = "email") -> str:
    v = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(v):
        raise ValidationError(f"{field_name} is not a valid email address")
    return v


def require_uuid(value: Optional[str], field_name: str) -> str:
    v = require_non_empty(value, field_name)
    if not _UUID_RE.match(v):
        raise ValidationError(f"{field_name} must be a UUID")
    return v.lower()


def parse_enum(enum_cls: Type[E], value: Optional[str], field_name: str) -> E:
    v = require_non_empty(value, field_name)
    try:
        return enum_cls(v)
    except ValueError:
        try:
            return enum_cls(v.upper())
        except ValueError:
            allowed = ", ".join(str(m.value) for m in enum_cls)
            raise ValidationError(f"{field_name} must be one of: {allowed}")


def parse_bool(value, field_name: str) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if v in ("1", "true", "yes", "on"):
        return True
    if v in ("0", "false", "no", "off"):
        return False
    raise ValidationError(f"{field_name} must be a boolean")
