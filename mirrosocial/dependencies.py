"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

from mirrosocial.config import get_settings
from mirrosocial.db import DbClient, InMemoryDbClient, SqlDbClient
from mirrosocial.queue import InMemoryJobQueue, JobQueue, RedisJobQueue
from mirrosocial.storage import InMemoryStorageClient, R2StorageClient, StorageClient

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_queue_client: JobQueue | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so sessions and job state persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        _db_client = InMemoryDbClient()
    else:
        _db_client = SqlDbClient(settings.database_url)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.r2_bucket_name:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = R2StorageClient(
            bucket=settings.r2_bucket_name,
            endpoint=settings.r2_endpoint or "",
            access_key_id=settings.r2_access_key_id or "",
            secret_access_key=settings.r2_secret_access_key or "",
            public_base_url=settings.r2_public_url or "",
        )
    return _storage_client


def get_queue_client() -> JobQueue:
    """
    Return a singleton queue client for dispatching maintenance jobs to the worker.
    """
    global _queue_client
    if _queue_client:
        return _queue_client

    settings = get_settings()
    if settings.redis_url and not settings.use_in_memory_backends:
        _queue_client = RedisJobQueue(
            url=settings.redis_url,
            queue_key=settings.redis_queue_key,
        )
    else:
        _queue_client = InMemoryJobQueue()
    return _queue_client
