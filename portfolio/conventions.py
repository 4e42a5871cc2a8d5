"""
Helpers for the frontend conventions layered on top of plain records.

Neither convention has a dedicated column: a writing is pinned when its tag
list carries ``PIN_TAG``, and a record is in the trash when ``deleted_at`` is
set.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, TypeVar

PIN_TAG = "__pinned__"

T = TypeVar("T")


def is_pinned(writing: Any) -> bool:
    return PIN_TAG in (getattr(writing, "tags", None) or [])


def visible_tags(tags: Iterable[str]) -> List[str]:
    """Tags meant for display, without the reserved pin marker."""
    return [tag for tag in tags if tag != PIN_TAG]


def order_pinned_first(writings: Iterable[T]) -> List[T]:
    # sorted() is stable, so unpinned items keep their relative order.
    return sorted(writings, key=lambda writing: not is_pinned(writing))


def is_trashed(record: Any) -> bool:
    return getattr(record, "deleted_at", None) is not None


def trash_cutoff(retention_days: int, now: Optional[datetime] = None) -> datetime:
    """Records trashed before the returned instant are due for purging."""
    if retention_days < 1:
        raise ValueError("retention_days must be at least 1")
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=retention_days)
