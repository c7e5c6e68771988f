"""
Rewrite post and event media URLs that still point at the retired media host.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mirrosocial.config import get_settings
from mirrosocial.dependencies import get_db_client
from mirrosocial.maintenance import rewrite_legacy_media_urls

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Fix legacy media URLs")
    parser.add_argument(
        "--old-base",
        default=settings.legacy_media_base_url,
        help="URL prefix to replace",
    )
    parser.add_argument(
        "--new-base",
        default=settings.r2_public_url,
        help="Replacement prefix (defaults to R2_PUBLIC_URL)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report affected rows without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    if not args.new_base:
        logger.error("No --new-base given and R2_PUBLIC_URL is not set")
        return 1

    report = rewrite_legacy_media_urls(
        get_db_client(), args.old_base, args.new_base, dry_run=args.dry_run
    )
    print(json.dumps(report, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
