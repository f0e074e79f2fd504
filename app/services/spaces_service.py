import logging
import uuid
from functools import lru_cache
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.utils.errors import DependencyFailureError, InvalidInputError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".gif", ".pdf"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "application/pdf"}
UNSUPPORTED_FILE_MESSAGE = "Only images (JPEG, JPG, PNG, GIF) and PDF files are allowed"


@lru_cache(maxsize=1)
def get_client():
    session = boto3.session.Session()
    return session.client(
        "s3",
        region_name=settings.SPACES_REGION,
        endpoint_url=settings.SPACES_ENDPOINT,
        aws_access_key_id=settings.SPACES_KEY,
        aws_secret_access_key=settings.SPACES_SECRET,
    )


def _join_path(*segments: str) -> str:
    cleaned = [segment.strip("/") for segment in segments if segment and segment.strip("/")]
    return "/".join(cleaned)


def _public_url(key: str) -> str:
    if settings.SPACES_CDN_URL:
        return f"{settings.SPACES_CDN_URL.rstrip('/')}/{key}"
    endpoint = (settings.SPACES_ENDPOINT or "").rstrip("/")
    return f"{endpoint}/{settings.SPACES_NAME}/{key}"


def validate_attachment(original_name: str | None, content_type: str | None, size: int) -> str:
    """Check type and size of an upload; returns the normalised extension."""
    extension = Path(original_name or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS or (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise InvalidInputError(UNSUPPORTED_FILE_MESSAGE)
    if size == 0:
        raise InvalidInputError("Empty file upload")
    if size > settings.MAX_UPLOAD_BYTES:
        raise InvalidInputError(f"File too large. Maximum size is {settings.MAX_UPLOAD_BYTES // (1024 * 1024)}MB")
    return extension


def upload_attachment(data: bytes, original_name: str, content_type: str, folder: str) -> dict:
    """Store an attachment and return its metadata record."""
    extension = validate_attachment(original_name, content_type, len(data))
    filename = f"{uuid.uuid4().hex}{extension}"
    key = _join_path(settings.SPACES_BASE_PATH, folder, filename)

    try:
        get_client().put_object(
            Bucket=settings.SPACES_NAME,
            Key=key,
            Body=data,
            ACL="public-read",
            ContentType=content_type,
        )
    except (BotoCoreError, ClientError) as exc:
        logger.warning("Upload of %s failed: %s", original_name, exc)
        raise DependencyFailureError("Failed to upload file") from exc

    logger.info("Stored attachment %s (%s bytes) at %s", original_name, len(data), key)
    return {
        "filename": filename,
        "original_name": original_name,
        "mimetype": content_type,
        "size": len(data),
        "url": _public_url(key),
        "key": key,
    }


def discard_attachments(records: list[dict]) -> None:
    """Best-effort removal of stored objects that no row will reference."""
    for record in records:
        key = record.get("key")
        if not key:
            continue
        try:
            get_client().delete_object(Bucket=settings.SPACES_NAME, Key=key)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("Could not remove orphaned attachment %s: %s", key, exc)


async def store_uploads(uploads, folder: str) -> list[dict]:
    """Validate every ``UploadFile`` first, then push them all to the object store."""
    staged = []
    for upload in uploads:
        data = await upload.read()
        original_name = upload.filename or ""
        content_type = upload.content_type or ""
        validate_attachment(original_name, content_type, len(data))
        staged.append((data, original_name, content_type))

    stored = []
    try:
        for data, original_name, content_type in staged:
            stored.append(upload_attachment(data, original_name, content_type, folder))
    except DependencyFailureError:
        discard_attachments(stored)
        raise
    return stored


async def store_upload(upload, folder: str) -> dict:
    stored = await store_uploads([upload], folder)
    return stored[0]
