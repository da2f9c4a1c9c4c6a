"""Filtering of navigation history records.

User-facing filter categories map to sets of stored statuses through
CATEGORY_STATUSES. The "cancelled" category covers both CANCELLED and FAILED
records, which are shown to users as one group.
"""
from enum import Enum
from typing import AbstractSet, FrozenSet, Iterable, List
import logging

from multistop.domain.history import HistoryRecord, NavigationStatus

logger = logging.getLogger(__name__)


class FilterCategory(str, Enum):
    ALL = "all"
    COMPLETED = "completed"
    IN_PROGRESS = "in_progress"
    CANCELLED = "cancelled"


CATEGORY_STATUSES = {
    FilterCategory.ALL: frozenset(),
    FilterCategory.COMPLETED: frozenset({NavigationStatus.COMPLETED}),
    FilterCategory.IN_PROGRESS: frozenset({NavigationStatus.IN_PROGRESS}),
    FilterCategory.CANCELLED: frozenset({NavigationStatus.CANCELLED, NavigationStatus.FAILED}),
}


def statuses_for_categories(categories: Iterable[FilterCategory]) -> FrozenSet[NavigationStatus]:
    """Union of the statuses behind the selected categories.

    Selecting ALL clears every other selection (empty set = no status filter).
    """
    selected = set()
    for category in categories:
        category = FilterCategory(category)
        if category is FilterCategory.ALL:
            return frozenset()
        selected |= CATEGORY_STATUSES[category]
    return frozenset(selected)


def matches_status(record: HistoryRecord, statuses: AbstractSet[NavigationStatus]) -> bool:
    return not statuses or record.status in statuses


def matches_query(record: HistoryRecord, query: str) -> bool:
    """Case-insensitive substring match on the description or any stop name."""
    if not query:
        return True
    needle = query.lower()
    if needle in record.route_description.lower():
        return True
    return any(needle in destination.name.lower() for destination in record.destinations)


def filter_history(records: Iterable[HistoryRecord],
                   statuses: AbstractSet[NavigationStatus] = frozenset(),
                   query: str = "") -> List[HistoryRecord]:
    """Records matching both the status set and the search text, in input order.

    Args:
        records: History records to filter (not modified)
        statuses: Accepted statuses; empty means any status
        query: Search text; empty means no text filter

    Returns:
        List of matching records
    """
    query = (query or "").strip()
    result = [r for r in records if matches_status(r, statuses) and matches_query(r, query)]
    logger.debug(f"History filter statuses={sorted(s.value for s in statuses)} query={query!r}: {len(result)} match")
    return result


def sort_by_start_time(records: Iterable[HistoryRecord], descending: bool = True) -> List[HistoryRecord]:
    """Order records by start time, newest first by default."""
    return sorted(records, key=lambda r: r.start_time, reverse=descending)
