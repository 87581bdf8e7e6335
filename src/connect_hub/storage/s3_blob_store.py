from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from ..core.exceptions import DependencyError, ValidationError
from ..core.logging import get_logger
from .blob_store import BlobStore
from .model import UploadFile


def object_key(filename: str, *, now: Optional[datetime] = None) -> str:
    """``<timestamp>_<uuid8><ext>`` built from a sanitised client filename."""
    original = secure_filename(filename or "")
    extension = os.path.splitext(original)[1].lower()
    timestamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}{extension}"


class S3BlobStore(BlobStore):
    """Blob store for any S3-compatible endpoint (Supabase Storage, Cloudflare R2, AWS S3)."""

    def __init__(self, storage_config: Mapping[str, Any], *, client=None, logger=None):
        self._endpoint_url = storage_config.get("endpoint_url") or None
        self._public_base_url = (storage_config.get("public_base_url") or "").rstrip("/")
        self._log = logger or get_logger(__name__)
        self._client = client
        if self._client is None and storage_config.get("access_key_id") and storage_config.get("secret_access_key"):
            self._client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url,
                aws_access_key_id=storage_config.get("access_key_id"),
                aws_secret_access_key=storage_config.get("secret_access_key"),
                region_name=storage_config.get("region") or "auto",
            )

    def is_configured(self) -> bool:
        return self._client is not None

    def public_url(self, bucket: str, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url}/{bucket}/{key}"
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{bucket}/{key}"
        return f"https://{bucket}.s3.amazonaws.com/{key}"

    def upload(self, bucket: str, file: UploadFile) -> str:
        if not file or not file.filename:
            raise ValidationError("File is required")
        if self._client is None:
            raise DependencyError("Blob storage is not configured")

        key = object_key(file.filename)
        extra = {"ContentType": file.content_type} if file.content_type else {}
        try:
            if hasattr(file.stream, "seek"):
                file.stream.seek(0)
            self._client.upload_fileobj(file.stream, bucket, key, ExtraArgs=extra)
        except (ClientError, BotoCoreError) as e:
            self._log.error("blob_upload_failed", bucket=bucket, key=key, error=str(e))
            raise DependencyError(f"Failed to upload file: {e}")

        url = self.public_url(bucket, key)
        self._log.info("blob_uploaded", bucket=bucket, key=key)
        return url
