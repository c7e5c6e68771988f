"""
Storage abstraction for Cloudflare R2 (S3-compatible) and in-memory testing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import urlparse
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def public_url(self, key: str) -> str:
        ...

    def key_from_url(self, url: str) -> Optional[str]:
        ...

    def presign_get(self, key: str, expires_in: int = 3600) -> str:
        ...

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "application/octet-stream"
    ) -> str:
        ...

    def check_connection(self) -> bool:
        ...


def _key_from_url(url: str) -> Optional[str]:
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.scheme or not parsed.netloc:
        return None
    key = parsed.path.lstrip("/")
    return key or None


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self.stored_objects[key] = {"body": bytes(data), "content_type": content_type}

    def delete(self, key: str) -> None:
        self.stored_objects.pop(key, None)

    def public_url(self, key: str) -> str:
        return f"{self.base_url.rstrip('/')}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = self.base_url.rstrip("/") + "/"
        if url.startswith(prefix):
            return url[len(prefix):] or None
        return _key_from_url(url)

    def presign_get(self, key: str, expires_in: int = 3600) -> str:
        return f"{self.base_url}/{key}?op=get&expires={expires_in}"

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "application/octet-stream"
    ) -> str:
        return f"{self.base_url}/{key}?op=put&expires={expires_in}"

    def check_connection(self) -> bool:
        return True

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class R2StorageClient:
    """
    S3-compatible storage client for Cloudflare R2.

    R2 has no object ACLs; public reads are configured on the bucket, so the
    public URL is simply the bucket's public base joined with the key.
    """

    bucket: str
    endpoint: str
    access_key_id: str
    secret_access_key: str
    public_base_url: str

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint,
            region_name="auto",
            aws_access_key_id=self.access_key_id,
            aws_secret_access_key=self.secret_access_key,
            config=config,
        )

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        logger.info(
            "Uploading %s (%d bytes, %s) to bucket %s",
            key,
            len(data),
            content_type,
            self.bucket,
        )
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    def delete(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Deleted %s from bucket %s", key, self.bucket)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        return _key_from_url(url)

    def presign_get(self, key: str, expires_in: int = 3600) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def presign_put(
        self, key: str, expires_in: int = 3600, content_type: str = "application/octet-stream"
    ) -> str:
        return self._client.generate_presigned_url(
            ClientMethod="put_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ContentType": content_type,
            },
            ExpiresIn=expires_in,
        )

    def check_connection(self) -> bool:
        try:
            self._client.head_bucket(Bucket=self.bucket)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("R2 bucket %s not reachable: %s", self.bucket, exc)
            return False
        return True
