from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Optional


@dataclass(frozen=True)
class UploadFile:
    """A file received from a client, independent of the web framework's own type."""

    filename: str
    stream: BinaryIO
    content_type: Optional[str] = None

    @classmethod
    def from_werkzeug(cls, storage) -> Optional["UploadFile"]:
        if storage is None or not getattr(storage, "filename", ""):
            return None
        return cls(filename=storage.filename, stream=storage.stream, content_type=storage.mimetype or None)
