"""
Upload policies, object key naming and media URL helpers.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

from mirrosocial.storage import StorageClient

logger = logging.getLogger(__name__)

MB = 1024 * 1024


class UploadRejected(ValueError):
    """Raised when an uploaded file fails a policy check."""


@dataclass(frozen=True)
class UploadPolicy:
    name: str
    max_bytes: int
    allowed_prefixes: tuple[str, ...] = ()
    allowed_types: frozenset[str] = field(default_factory=frozenset)
    # Videos may have a larger ceiling than everything else.
    max_video_bytes: Optional[int] = None
    type_error: str = "Invalid file type"


POST_MEDIA = UploadPolicy(
    name="post-media",
    max_bytes=10 * MB,
    max_video_bytes=50 * MB,
    allowed_prefixes=("image/", "video/"),
    type_error="File must be an image or video",
)

EVENT_VIDEO = UploadPolicy(
    name="event-video",
    max_bytes=99 * MB,
    allowed_prefixes=("video/", "image/"),
    type_error="Invalid file type. Please upload a video or image.",
)

MESSAGE_ATTACHMENT = UploadPolicy(
    name="messages",
    max_bytes=10 * MB,
    allowed_types=frozenset(
        {
            "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp", "image/bmp",
            "audio/mp3", "audio/mpeg", "audio/wav", "audio/ogg", "audio/m4a", "audio/aac",
            "video/mp4", "video/webm", "video/ogg", "video/avi", "video/mov",
            "application/pdf", "text/plain",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        }
    ),
)


def media_kind(content_type: Optional[str]) -> str:
    content_type = (content_type or "").lower()
    for kind in ("image", "video", "audio"):
        if content_type.startswith(f"{kind}/"):
            return kind
    return "file"


def _size_limit(policy: UploadPolicy, content_type: str) -> int:
    if policy.max_video_bytes and media_kind(content_type) == "video":
        return policy.max_video_bytes
    return policy.max_bytes


def _size_error(policy: UploadPolicy, content_type: str) -> str:
    limit_mb = _size_limit(policy, content_type) // MB
    if policy is POST_MEDIA:
        noun = "videos" if media_kind(content_type) == "video" else "images"
        return f"File too large (max {limit_mb}MB for {noun})"
    if policy is EVENT_VIDEO:
        return f"File too large. Maximum size is {limit_mb}MB."
    return f"File too large (max {limit_mb}MB)"


def validate_upload(policy: UploadPolicy, content_type: Optional[str], size: int) -> None:
    """Raise UploadRejected when the file does not satisfy the policy."""
    content_type = (content_type or "").lower()
    if policy.allowed_types:
        if content_type not in policy.allowed_types:
            raise UploadRejected(
                f"File type '{content_type}' not allowed. Supported types: images, "
                "audio, video, PDF, text, and Office documents."
            )
    elif not content_type.startswith(policy.allowed_prefixes):
        raise UploadRejected(policy.type_error)

    if size > _size_limit(policy, content_type):
        raise UploadRejected(_size_error(policy, content_type))


def file_extension(filename: Optional[str]) -> str:
    if not filename or "." not in filename:
        return "bin"
    ext = filename.rsplit(".", 1)[1].strip().lower()
    return ext or "bin"


def build_object_key(folder: str, filename: Optional[str], now: Optional[float] = None) -> str:
    """Return a unique `folder/<epoch-ms>-<random>.<ext>` object key."""
    timestamp = int((now if now is not None else time.time()) * 1000)
    return f"{folder.strip('/')}/{timestamp}-{secrets.token_hex(4)}.{file_extension(filename)}"


def upload_media(
    storage: StorageClient,
    data: bytes,
    filename: Optional[str],
    content_type: str,
    folder: str,
) -> str:
    """Store the bytes under a fresh key and return the public URL."""
    key = build_object_key(folder, filename)
    storage.upload_bytes(key, data, content_type)
    url = storage.public_url(key)
    logger.info("Uploaded %s as %s", filename, url)
    return url


def rewrite_media_url(url: Optional[str], old_base: str, new_base: str) -> Optional[str]:
    """
    Move a URL from one media host to another.

    Returns None when the URL is empty or not served from `old_base`.
    """
    if not url:
        return None
    old_base = old_base.rstrip("/")
    if url != old_base and not url.startswith(old_base + "/"):
        return None
    return new_base.rstrip("/") + url[len(old_base):]


def is_valid_http_url(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
