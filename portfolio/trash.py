"""
Retention handling for soft-deleted records.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, Optional

from portfolio.conventions import trash_cutoff
from portfolio.db import COLLECTIONS, Storage

logger = logging.getLogger(__name__)


def purge_trash(
    storage: Storage,
    retention_days: int,
    *,
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> tuple[datetime, Dict[str, int]]:
    """
    Hard-delete records that have been in the trash longer than
    ``retention_days``.

    Returns the cutoff used and the number of records removed per collection
    (or that would be removed, with ``dry_run``).
    """
    cutoff = trash_cutoff(retention_days, now)
    purged: Dict[str, int] = {}
    for name, collection in COLLECTIONS.items():
        if not collection.soft_delete:
            continue
        repo = storage.repository(name)
        if dry_run:
            purged[name] = sum(
                1 for record in repo.list_trashed() if record.deleted_at < cutoff
            )
        else:
            purged[name] = repo.purge_deleted(cutoff)
    logger.info(
        "%s trash older than %s: %s",
        "Would purge" if dry_run else "Purged",
        cutoff.isoformat(),
        purged,
    )
    return cutoff, purged
