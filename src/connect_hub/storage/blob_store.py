from __future__ import annotations

from typing import Protocol

from .model import UploadFile


class BlobStore(Protocol):
    def upload(self, bucket: str, file: UploadFile) -> str:
        """Store ``file`` in ``bucket`` and return its public URL."""
        raise NotImplementedError
