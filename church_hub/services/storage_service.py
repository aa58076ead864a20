"""
Blob storage for sermon videos and blog images.

Two gateways share one contract, ``upload(container, path, data, content_type)``
returning ``{"url", "path"}`` and ``delete(container, path)``:

- GCSBlobStorage stores objects in a single Google Cloud Storage bucket under
  ``{container}/{path}``.
- LocalBlobStorage writes to ``settings.upload_directory`` for development and tests.

The gateway is built once at startup by ``build_blob_storage`` and held on
``app.state``.
"""

import json
import logging
import mimetypes
import os
import re
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from fastapi import UploadFile
from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound
from google.oauth2 import service_account

from church_hub.core.config import Settings
from church_hub.core.exceptions import ApplicationError, ValidationFailedError

logger = logging.getLogger(__name__)

SERMON_CONTAINER = "sermons"
BLOG_IMAGE_CONTAINER = "blog-images"


class StorageError(ApplicationError):
    error_code = "StorageError"
    default_message = "Failed to store file. Please try again."


class BlobStorage(Protocol):
    def upload(self, container: str, path: str, data: bytes, content_type: str) -> dict: ...

    def delete(self, container: str, path: str) -> None: ...


class GCSBlobStorage:
    """Google Cloud Storage gateway."""

    def __init__(self, project_id: str | None, bucket_name: str):
        """Initialize GCS client and bucket."""
        gcs_creds_json = os.getenv("GCS_CREDENTIALS_JSON")
        if gcs_creds_json:
            creds_dict = json.loads(gcs_creds_json)
            credentials = service_account.Credentials.from_service_account_info(creds_dict)
            self.client = storage.Client(project=project_id, credentials=credentials)
            logger.info("Initialized GCS client with service account credentials from environment")
        else:
            # Application Default Credentials (local gcloud login, Cloud Run)
            self.client = storage.Client(project=project_id)
            logger.info("Initialized GCS client with Application Default Credentials")

        self.bucket = self.client.bucket(bucket_name)
        logger.info(f"Initialized blob storage for bucket: {bucket_name}")

    def upload(self, container: str, path: str, data: bytes, content_type: str) -> dict:
        blob_path = f"{container}/{path}"
        try:
            blob = self.bucket.blob(blob_path)
            blob.upload_from_string(data, content_type=content_type)
        except GoogleCloudError as e:
            logger.error(f"GCS error uploading {blob_path}: {e}")
            raise StorageError() from None

        logger.info(f"Uploaded blob {blob_path} ({len(data)} bytes, {content_type})")
        return {"url": blob.public_url, "path": path}

    def delete(self, container: str, path: str) -> None:
        blob_path = f"{container}/{path}"
        try:
            self.bucket.blob(blob_path).delete()
        except NotFound:
            logger.warning(f"Blob already absent: {blob_path}")
            return
        except GoogleCloudError as e:
            logger.error(f"GCS error deleting {blob_path}: {e}")
            raise StorageError("Failed to delete file from storage") from None
        logger.info(f"Deleted blob {blob_path}")


class LocalBlobStorage:
    """Filesystem gateway used when GCS is disabled."""

    def __init__(self, root: str | Path, base_url: str = "/media"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized local blob storage at {self.root.absolute()}")

    def _resolve(self, container: str, path: str) -> Path:
        target = (self.root / container / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValidationFailedError("Invalid storage path")
        return target

    def upload(self, container: str, path: str, data: bytes, content_type: str) -> dict:
        target = self._resolve(container, path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info(f"Stored {container}/{path} locally ({len(data)} bytes, {content_type})")
        return {"url": f"{self.base_url}/{container}/{path}", "path": path}

    def delete(self, container: str, path: str) -> None:
        target = self._resolve(container, path)
        if target.exists():
            target.unlink()
            logger.info(f"Deleted local blob {container}/{path}")
        else:
            logger.warning(f"Local blob already absent: {container}/{path}")


def build_blob_storage(settings: Settings) -> BlobStorage:
    if settings.use_gcs:
        return GCSBlobStorage(settings.gcs_project_id, settings.gcs_bucket_name)
    return LocalBlobStorage(settings.upload_directory, settings.media_base_url)


def sanitize_filename(filename: str) -> str:
    """
    Make a filename storage-safe.

    Lowercases, replaces spaces with underscores and drops everything except
    letters, digits, underscores, hyphens and dots.
    """
    filename = filename.lower().replace(" ", "_")
    filename = re.sub(r"[^a-z0-9._-]", "", filename)
    filename = re.sub(r"_+", "_", filename)
    return filename.strip("_.")


def read_upload(
    file: UploadFile, allowed_extensions: list[str], max_size_bytes: int
) -> tuple[bytes, str, str]:
    """
    Validate an uploaded file and read its content.

    Args:
        file: FastAPI UploadFile object
        allowed_extensions: Accepted lowercase extensions including the dot
        max_size_bytes: Largest accepted file size

    Returns:
        tuple: (content, unique storage path, content type)

    Raises:
        ValidationFailedError: If the extension or size is not acceptable
    """
    original = file.filename or ""
    file_ext = Path(original).suffix.lower()
    if file_ext not in allowed_extensions:
        raise ValidationFailedError(
            f"File type {file_ext or 'unknown'} not allowed. "
            f"Allowed types: {', '.join(allowed_extensions)}",
            errors=[{"field": "file", "message": "Unsupported file type"}],
        )

    file.file.seek(0, 2)
    file_size = file.file.tell()
    file.file.seek(0)

    if file_size == 0:
        raise ValidationFailedError(
            "Uploaded file is empty", errors=[{"field": "file", "message": "File is empty"}]
        )
    if file_size > max_size_bytes:
        raise ValidationFailedError(
            f"File size ({file_size / 1024 / 1024:.2f}MB) exceeds maximum allowed size "
            f"({max_size_bytes / 1024 / 1024:.0f}MB)",
            errors=[{"field": "file", "message": "File too large"}],
        )

    content = file.file.read()

    stem = sanitize_filename(Path(original).stem) or "file"
    path = f"{uuid4().hex[:12]}-{stem}{file_ext}"
    content_type = (
        file.content_type
        or mimetypes.guess_type(original)[0]
        or "application/octet-stream"
    )
    return content, path, content_type
