"""
Check the R2 configuration and, optionally, push a small test object.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from botocore.exceptions import BotoCoreError, ClientError

from mirrosocial.config import get_settings, r2_missing_settings
from mirrosocial.dependencies import get_storage_client
from mirrosocial.media import upload_media

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Check R2 storage connectivity")
    parser.add_argument(
        "--upload",
        action="store_true",
        help="Upload a small text file to the test/ folder",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    settings = get_settings()
    missing = r2_missing_settings(settings)
    if missing:
        logger.error("Missing environment variables: %s", ", ".join(missing))
        return 1
    logger.info(
        "Endpoint %s, bucket %s, public URL %s",
        settings.r2_endpoint,
        settings.r2_bucket_name,
        settings.r2_public_url,
    )

    storage = get_storage_client()
    if not storage.check_connection():
        logger.error("Bucket %s is not reachable", settings.r2_bucket_name)
        return 1
    logger.info("Bucket %s is reachable", settings.r2_bucket_name)

    if args.upload:
        body = f"R2 Upload Test - {datetime.now(timezone.utc).isoformat()}".encode("utf-8")
        try:
            url = upload_media(storage, body, "test.txt", "text/plain", "test")
        except (BotoCoreError, ClientError):
            logger.exception("Test upload failed")
            return 1
        logger.info("Test object uploaded to %s", url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
