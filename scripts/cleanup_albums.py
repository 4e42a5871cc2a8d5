"""
Delete albums by name, e.g. leftovers created by an older import.
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
from portfolio.db import DatabaseStorage, Storage

logger = logging.getLogger(__name__)


def delete_albums_named(storage: Storage, names: list[str]) -> list[int]:
    wanted = set(names)
    deleted = []
    for album in storage.albums.list_all():
        if album.name in wanted and storage.albums.delete(album.id):
            logger.info('Deleted album id=%d name="%s"', album.id, album.name)
            deleted.append(album.id)
    return deleted


def main() -> int:
    parser = argparse.ArgumentParser(description="Delete albums by name")
    parser.add_argument(
        "-n",
        "--name",
        action="append",
        required=True,
        help="Album name to delete (repeatable)",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level)
    if not settings.database_url:
        logger.error("DATABASE_URL is not set")
        return 2

    storage = DatabaseStorage(settings.database_url)
    deleted = delete_albums_named(storage, args.name)
    if not deleted:
        logger.info("No matching albums found. Nothing to delete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
