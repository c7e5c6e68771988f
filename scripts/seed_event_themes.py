"""
Seed the stock event themes.

Themes are matched by name, so running this repeatedly only inserts the ones
that are missing.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mirrosocial.db import InMemoryDbClient
from mirrosocial.dependencies import get_db_client
from mirrosocial.themes import DEFAULT_THEMES, seed_default_themes

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed default event themes")
    parser.add_argument(
        "--category",
        default=None,
        help="Only seed themes from this category (business, party, community)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    db = get_db_client()
    if isinstance(db, InMemoryDbClient):
        logger.warning("DATABASE_URL is not set; seeding the in-memory store only")

    themes = [t for t in DEFAULT_THEMES if args.category in (None, t["category"])]
    created = seed_default_themes(db, themes)
    logger.info("Created %d of %d themes", created, len(themes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
