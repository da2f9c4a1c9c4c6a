"""Aggregate statistics over navigation history."""
from collections import Counter
from dataclasses import dataclass
from typing import Iterable, Optional

from multistop.domain.history import HistoryRecord, NavigationStatus


@dataclass
class HistoryStatistics:
    """Totals across a set of history records."""
    total_navigations: int = 0
    completed_navigations: int = 0
    cancelled_navigations: int = 0
    failed_navigations: int = 0
    total_distance: float = 0.0  # kilometers
    total_duration: int = 0  # minutes
    average_duration: float = 0.0  # minutes
    total_alarms: int = 0
    most_visited_destination: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert statistics to dictionary."""
        return {
            "total_navigations": self.total_navigations,
            "completed_navigations": self.completed_navigations,
            "cancelled_navigations": self.cancelled_navigations,
            "failed_navigations": self.failed_navigations,
            "total_distance": self.total_distance,
            "total_duration": self.total_duration,
            "average_duration": self.average_duration,
            "total_alarms": self.total_alarms,
            "most_visited_destination": self.most_visited_destination
        }


def compute_statistics(records: Iterable[HistoryRecord]) -> HistoryStatistics:
    """Summarise records; durations use the actual value when one was recorded."""
    records = list(records)
    if not records:
        return HistoryStatistics()

    statuses = Counter(r.status for r in records)
    durations = [
        r.actual_duration if r.actual_duration is not None else r.estimated_duration
        for r in records
    ]
    destinations = Counter(d.name for r in records for d in r.destinations)
    most_visited = destinations.most_common(1)[0][0] if destinations else None

    return HistoryStatistics(
        total_navigations=len(records),
        completed_navigations=statuses[NavigationStatus.COMPLETED],
        cancelled_navigations=statuses[NavigationStatus.CANCELLED],
        failed_navigations=statuses[NavigationStatus.FAILED],
        total_distance=sum(r.total_distance for r in records),
        total_duration=sum(durations),
        average_duration=sum(durations) / len(durations),
        total_alarms=sum(r.alarms_triggered for r in records),
        most_visited_destination=most_visited
    )
