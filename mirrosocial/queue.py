"""
Queue abstraction for maintenance job dispatching.

Entries carry the job id and kind so the worker can log what it picked up
before claiming the row. Jobs are always written to the jobs table first,
so a queue outage only delays them until the worker's table poll.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from mirrosocial.db import MaintenanceJobRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedJob:
    job_id: str
    kind: str

    @classmethod
    def for_job(cls, job: MaintenanceJobRecord) -> "QueuedJob":
        return cls(job_id=job.job_id, kind=job.kind)

    def encode(self) -> str:
        return json.dumps({"jobId": self.job_id, "kind": self.kind})

    @classmethod
    def decode(cls, raw) -> Optional["QueuedJob"]:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.warning("Dropping malformed queue entry %r", raw)
            return None
        if not isinstance(payload, dict) or not payload.get("jobId"):
            logger.warning("Dropping queue entry without a job id: %r", raw)
            return None
        return cls(job_id=payload["jobId"], kind=payload.get("kind", ""))


class JobQueue(Protocol):
    """Hands maintenance jobs from the API to the worker."""

    def enqueue(self, job: MaintenanceJobRecord) -> QueuedJob:
        ...

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[QueuedJob]:
        ...


@dataclass
class InMemoryJobQueue:
    """FIFO list used when no Redis URL is configured."""

    items: list[QueuedJob] = field(default_factory=list)

    def enqueue(self, job: MaintenanceJobRecord) -> QueuedJob:
        entry = QueuedJob.for_job(job)
        self.items.append(entry)
        logger.info("[%s] Queued %s", entry.job_id, entry.kind)
        return entry

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[QueuedJob]:
        if not self.items:
            return None
        return self.items.pop(0)


@dataclass
class RedisJobQueue:
    """Redis list of JSON entries: RPUSH to enqueue, BLPOP/LPOP to dequeue."""

    url: str
    queue_key: str = "mirro:jobs"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _reconnect(self) -> None:
        self.client = redis.Redis.from_url(self.url)

    def enqueue(self, job: MaintenanceJobRecord) -> QueuedJob:
        entry = QueuedJob.for_job(job)
        try:
            self.client.rpush(self.queue_key, entry.encode())
        except redis_exceptions.ConnectionError:
            # The WAITING row is still picked up by the worker's table poll.
            logger.warning(
                "[%s] Redis unavailable, %s left for the table poll", entry.job_id, entry.kind
            )
            self._reconnect()
            return entry
        logger.info("[%s] Queued %s on %s", entry.job_id, entry.kind, self.queue_key)
        return entry

    def dequeue(self, *, block: bool = True, timeout: int | None = None) -> Optional[QueuedJob]:
        try:
            if block:
                result = self.client.blpop(self.queue_key, timeout=timeout or 0)
                if result is None:
                    return None
                _, raw = result
            else:
                raw = self.client.lpop(self.queue_key)
                if raw is None:
                    return None
        except redis_exceptions.ConnectionError:
            # Managed Redis drops idle connections; reconnect and report an empty queue.
            logger.warning("Redis connection lost while reading %s, reconnecting", self.queue_key)
            self._reconnect()
            return None
        return QueuedJob.decode(raw)
