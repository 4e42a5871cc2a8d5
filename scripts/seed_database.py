"""
CLI helper to populate the configured database with demo content.

Every collection the demo data touches is cleared first, so the script can
be run again on a seeded database.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.config import configure_logging, get_settings
from portfolio.db import DatabaseStorage
from portfolio.seed import reseed_demo_data

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the portfolio database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Override DATABASE_URL",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    database_url = args.database_url or settings.database_url
    if not database_url:
        logger.error("DATABASE_URL is not set")
        return 2

    storage = DatabaseStorage(database_url)
    reseed_demo_data(storage)
    return 0


if __name__ == "__main__":
    sys.exit(main())
