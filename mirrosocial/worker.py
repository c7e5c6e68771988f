"""
Worker loop that runs queued maintenance jobs.

Run with `python -m mirrosocial.worker` next to the API process.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from mirrosocial.config import get_settings
from mirrosocial.db import DbClient, JobStatus, MaintenanceJobRecord
from mirrosocial.dependencies import get_db_client, get_queue_client
from mirrosocial.maintenance import rewrite_legacy_media_urls
from mirrosocial.queue import JobQueue

logger = logging.getLogger(__name__)

FIX_MEDIA_URLS = "fix_media_urls"


def _run_fix_media_urls(job: MaintenanceJobRecord, db: DbClient) -> dict:
    settings = get_settings()
    old_base = job.params.get("old_base") or settings.legacy_media_base_url
    new_base = job.params.get("new_base") or settings.r2_public_url
    if not new_base:
        raise ValueError("No target media base URL configured (R2_PUBLIC_URL)")
    return rewrite_legacy_media_urls(
        db, old_base, new_base, dry_run=bool(job.params.get("dry_run"))
    )


HANDLERS = {
    FIX_MEDIA_URLS: _run_fix_media_urls,
}


def process_job(job: MaintenanceJobRecord, db: DbClient) -> None:
    """Run one claimed job and record SUCCESS or ERROR with its result."""
    handler = HANDLERS.get(job.kind)
    if handler is None:
        logger.warning("[%s] Unknown job kind %s", job.job_id, job.kind)
        db.update_job(
            job.job_id,
            status=JobStatus.ERROR,
            result={"error": f"Unknown job kind: {job.kind}"},
        )
        return

    logger.info("[%s] Running %s", job.job_id, job.kind)
    try:
        result = handler(job, db)
    except Exception as exc:
        logger.exception("[%s] %s failed", job.job_id, job.kind)
        db.update_job(job.job_id, status=JobStatus.ERROR, result={"error": str(exc)})
        return
    db.update_job(job.job_id, status=JobStatus.SUCCESS, result=result)
    logger.info("[%s] %s complete", job.job_id, job.kind)


def process_next(
    *,
    db: Optional[DbClient] = None,
    queue: Optional[JobQueue] = None,
    block: bool = True,
    timeout: Optional[int] = None,
) -> bool:
    """
    Fetch and process one job from the queue (or DB fallback). Returns True if processed.
    """
    db = db or get_db_client()
    queue = queue or get_queue_client()

    entry = queue.dequeue(block=block, timeout=timeout)
    if entry:
        job = db.claim_job(entry.job_id)
        if not job:
            logger.warning("[%s] Skipping %s: missing or already claimed", entry.job_id, entry.kind)
            return False
    else:
        # Jobs created while the queue was unreachable are only in the table.
        job = db.claim_next_waiting_job()
        if not job:
            return False

    process_job(job, db)
    return True


def run_loop(poll_interval_seconds: float = 2.0, lock_timeout_seconds: float = 900) -> None:
    """
    Polling loop that blocks on the queue. Intended to be run under systemd/supervisor.
    """
    db = get_db_client()
    queue = get_queue_client()
    while True:
        try:
            requeued = db.requeue_stale_locks(lock_timeout_seconds=lock_timeout_seconds)
            if requeued:
                logger.info("Requeued %d stale jobs", requeued)
        except Exception:
            logger.exception("Failed to requeue stale locks")
        processed = process_next(db=db, queue=queue, block=True, timeout=int(poll_interval_seconds))
        if not processed:
            time.sleep(poll_interval_seconds)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run_loop()
