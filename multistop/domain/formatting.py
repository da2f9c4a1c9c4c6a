"""Formatting and derivation helpers shared by routes and history records."""
from datetime import datetime
from typing import Optional, Sequence

POINT_LABELS = "ABCDEFGHIJ"

NO_DESTINATIONS = "No destinations"
ROUTE_ARROW = " → "
ROUTE_ELLIPSIS = "..."

START_TIME_FORMAT = "%b %d, %Y at %H:%M"


def point_label(order: int) -> str:
    """Display label for a waypoint position.

    Letters A-J for the first ten stops, then the 1-based position as a number.
    """
    if order < 0:
        raise ValueError(f"order must be non-negative, got {order}")
    if order < len(POINT_LABELS):
        return POINT_LABELS[order]
    return str(order + 1)


def describe_stops(names: Sequence[str]) -> str:
    """Build the one-line route description from ordered stop names."""
    if not names:
        return NO_DESTINATIONS
    if len(names) == 1:
        return f"Single destination: {names[0]}"
    if len(names) <= 3:
        return ROUTE_ARROW.join(names)
    return ROUTE_ARROW.join([names[0], ROUTE_ELLIPSIS, names[-1]])


def format_duration(minutes: int) -> str:
    """Format a duration in minutes as '45m', '2h 5m' or '1d 3h'."""
    if minutes < 60:
        return f"{minutes}m"
    if minutes < 1440:
        return f"{minutes // 60}h {minutes % 60}m"
    return f"{minutes // 1440}d {(minutes % 1440) // 60}h"


def completion_percentage(completed: int, total: int) -> int:
    """Whole percentage of completed stops, 0 for an empty route."""
    if total <= 0:
        return 0
    return (completed * 100) // total


def elapsed_minutes(start: datetime, end: Optional[datetime] = None) -> int:
    """Whole minutes between two timestamps (never negative)."""
    end = end or datetime.now()
    seconds = (end - start).total_seconds()
    return max(0, int(seconds // 60))


def format_timestamp(value: datetime) -> str:
    return value.strftime(START_TIME_FORMAT)
