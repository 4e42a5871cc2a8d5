"""
Hard-delete soft-deleted records once they exceed the trash retention window.

Runs once by default; pass --interval-seconds to keep purging periodically.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.config import configure_logging, get_settings
from portfolio.db import DatabaseStorage
from portfolio.trash import purge_trash

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Purge expired trash")
    parser.add_argument(
        "-d",
        "--days",
        type=int,
        default=settings.trash_retention_days,
        help="Retention window in days",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report what would be deleted",
    )
    parser.add_argument(
        "--interval-seconds",
        type=int,
        default=0,
        help="Repeat every N seconds (0 runs once)",
    )
    args = parser.parse_args()

    configure_logging(settings.log_level)
    if not settings.database_url:
        logger.error("DATABASE_URL is not set")
        return 2
    if args.days < 1:
        parser.error("--days must be at least 1")

    storage = DatabaseStorage(settings.database_url)
    while True:
        _, purged = purge_trash(storage, args.days, dry_run=args.dry_run)
        logger.info("Total: %d", sum(purged.values()))
        if args.interval_seconds <= 0:
            return 0
        time.sleep(args.interval_seconds)


if __name__ == "__main__":
    raise SystemExit(main())
