"""Navigation history domain model.

A HistoryRecord is a frozen snapshot of one route traversal. It is created
IN_PROGRESS when navigation starts (or directly in a terminal status by
``finalize_route``) and moves to exactly one terminal status afterwards.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Collection, Dict, Iterable, Optional, Tuple
import logging
import uuid

from multistop.domain.formatting import (
    completion_percentage, elapsed_minutes, format_duration, format_timestamp
)
from multistop.domain.route import Route

logger = logging.getLogger(__name__)


class InvalidStatusTransition(ValueError):
    """Raised when a history record is moved out of a terminal status."""


class HistoryStorageError(RuntimeError):
    """Raised when a history record could not be stored; callers may retry."""


class NavigationStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def display_text(self) -> str:
        return _STATUS_DISPLAY[self]

    @property
    def is_terminal(self) -> bool:
        return self is not NavigationStatus.IN_PROGRESS

    @classmethod
    def parse(cls, value: Optional[str]) -> "NavigationStatus":
        """Read a stored status tag; unknown tags are treated as cancelled."""
        try:
            return cls(value)
        except ValueError:
            return cls.CANCELLED


_STATUS_DISPLAY = {
    NavigationStatus.IN_PROGRESS: "In Progress",
    NavigationStatus.COMPLETED: "Completed",
    NavigationStatus.CANCELLED: "Cancelled",
    NavigationStatus.FAILED: "Failed",
}


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class NavigationDestination:
    """Outcome of one stop within a recorded traversal."""
    name: str
    address: str
    latitude: float
    longitude: float
    order: int
    is_completed: bool = False
    arrival_time: Optional[datetime] = None
    alarm_triggered: bool = False

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "order": self.order,
            "is_completed": self.is_completed,
            "arrival_time": self.arrival_time.isoformat() if self.arrival_time else None,
            "alarm_triggered": self.alarm_triggered
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NavigationDestination":
        return cls(
            name=data.get("name", ""),
            address=data.get("address", ""),
            latitude=data.get("latitude", 0.0),
            longitude=data.get("longitude", 0.0),
            order=data.get("order", 0),
            is_completed=data.get("is_completed", False),
            arrival_time=_parse_time(data.get("arrival_time")),
            alarm_triggered=data.get("alarm_triggered", False)
        )


@dataclass(frozen=True)
class HistoryRecord:
    """Summary of one finished, aborted or ongoing route traversal."""
    route_description: str
    start_time: datetime
    status: NavigationStatus = NavigationStatus.IN_PROGRESS
    destinations: Tuple[NavigationDestination, ...] = ()
    total_distance: float = 0.0  # kilometers
    estimated_duration: int = 0  # minutes
    end_time: Optional[datetime] = None
    start_location: Optional[Tuple[float, float]] = None  # (latitude, longitude)
    actual_duration: Optional[int] = None  # minutes
    alarms_triggered: int = 0
    completed_stops: int = 0
    total_stops: Optional[int] = None
    user_id: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        """Normalise collections and check stop accounting."""
        object.__setattr__(self, "destinations", tuple(self.destinations))
        if self.start_location is not None:
            object.__setattr__(self, "start_location", tuple(self.start_location))
        if self.total_stops is None:
            object.__setattr__(self, "total_stops", len(self.destinations))
        if self.total_stops != len(self.destinations):
            raise ValueError(
                f"total_stops ({self.total_stops}) must equal the number of destinations ({len(self.destinations)})"
            )
        if not 0 <= self.completed_stops <= self.total_stops:
            raise ValueError(
                f"completed_stops must be within 0..{self.total_stops}, got {self.completed_stops}"
            )

    @property
    def formatted_duration(self) -> str:
        duration = self.actual_duration if self.actual_duration is not None else self.estimated_duration
        return format_duration(duration)

    @property
    def completion_percentage(self) -> int:
        return completion_percentage(self.completed_stops, self.total_stops)

    @property
    def is_frozen(self) -> bool:
        """Ended records (terminal status or an end time) never change again."""
        return self.status.is_terminal or self.end_time is not None

    @property
    def status_display_text(self) -> str:
        return self.status.display_text

    @property
    def formatted_start_time(self) -> str:
        return format_timestamp(self.start_time)

    def with_progress(self, completed_stops: Optional[int] = None,
                      alarms_triggered: Optional[int] = None,
                      destinations: Optional[Iterable[NavigationDestination]] = None) -> "HistoryRecord":
        """Return a copy with updated progress counters.

        Only open records (IN_PROGRESS, no end time) can be updated.
        """
        if self.is_frozen:
            raise InvalidStatusTransition(f"Record {self.id} is {self.status.value} and can no longer change")
        changes = {}
        if completed_stops is not None:
            changes["completed_stops"] = completed_stops
        if alarms_triggered is not None:
            changes["alarms_triggered"] = alarms_triggered
        if destinations is not None:
            changes["destinations"] = tuple(destinations)
            changes["total_stops"] = len(changes["destinations"])
        return replace(self, **changes)

    def finish(self, status: NavigationStatus, end_time: Optional[datetime] = None,
               actual_duration: Optional[int] = None) -> "HistoryRecord":
        """Return the terminal copy of this record.

        Args:
            status: COMPLETED, CANCELLED or FAILED
            end_time: When the traversal ended (default: now)
            actual_duration: Minutes travelled (default: elapsed since start_time)

        Raises:
            InvalidStatusTransition: if the record already ended or status is IN_PROGRESS
        """
        if self.is_frozen:
            raise InvalidStatusTransition(
                f"Record {self.id} is already {self.status.value}, cannot become {status.value}"
            )
        if not status.is_terminal:
            raise InvalidStatusTransition(f"Cannot finish record {self.id} as {status.value}")
        end_time = end_time or datetime.now()
        if actual_duration is None:
            actual_duration = elapsed_minutes(self.start_time, end_time)
        return replace(self, status=status, end_time=end_time, actual_duration=actual_duration)

    def to_dict(self) -> dict:
        """Convert record to its persisted dictionary shape."""
        return {
            "id": self.id,
            "route_description": self.route_description,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status.value,
            "start_location": (
                {"latitude": self.start_location[0], "longitude": self.start_location[1]}
                if self.start_location else None
            ),
            "destinations": [d.to_dict() for d in self.destinations],
            "total_distance": self.total_distance,
            "estimated_duration": self.estimated_duration,
            "actual_duration": self.actual_duration,
            "alarms_triggered": self.alarms_triggered,
            "completed_stops": self.completed_stops,
            "total_stops": self.total_stops,
            "user_id": self.user_id
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryRecord":
        """Create record from its persisted dictionary shape."""
        location = data.get("start_location")
        start_location = (location["latitude"], location["longitude"]) if location else None
        destinations = [NavigationDestination.from_dict(d) for d in data.get("destinations", [])]
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(
            route_description=data.get("route_description", ""),
            start_time=datetime.fromisoformat(data["start_time"]),
            end_time=_parse_time(data.get("end_time")),
            status=NavigationStatus.parse(data.get("status")),
            start_location=start_location,
            destinations=destinations,
            total_distance=data.get("total_distance", 0.0),
            estimated_duration=data.get("estimated_duration", 0),
            actual_duration=data.get("actual_duration"),
            alarms_triggered=data.get("alarms_triggered", 0),
            completed_stops=data.get("completed_stops", 0),
            total_stops=data.get("total_stops", len(destinations)),
            user_id=data.get("user_id"),
            **kwargs
        )


def snapshot_destinations(route: Route,
                          arrival_times: Optional[Dict[str, datetime]] = None,
                          alarms: Optional[Collection[str]] = None,
                          reached_all: bool = False) -> Tuple[NavigationDestination, ...]:
    """Copy the route's stops into destination summaries.

    Args:
        route: Route being recorded
        arrival_times: Arrival timestamp per waypoint id
        alarms: Ids of waypoints whose arrival alarm fired
        reached_all: Count every stop as completed (successful finish)
    """
    arrival_times = arrival_times or {}
    alarms = alarms or ()
    return tuple(
        NavigationDestination(
            name=wp.place.name,
            address=wp.place.address,
            latitude=wp.place.latitude,
            longitude=wp.place.longitude,
            order=wp.order,
            is_completed=reached_all or wp.is_completed,
            arrival_time=arrival_times.get(wp.id),
            alarm_triggered=wp.id in alarms
        )
        for wp in route.points
    )


def start_record(route: Route, start_time: Optional[datetime] = None,
                 start_location: Optional[Tuple[float, float]] = None,
                 user_id: Optional[str] = None) -> HistoryRecord:
    """Create the IN_PROGRESS record for a route that is about to be navigated."""
    destinations = snapshot_destinations(route)
    return HistoryRecord(
        route_description=route.description(),
        start_time=start_time or datetime.now(),
        status=NavigationStatus.IN_PROGRESS,
        start_location=start_location,
        destinations=destinations,
        total_distance=route.total_distance,
        estimated_duration=route.total_estimated_time,
        completed_stops=sum(1 for d in destinations if d.is_completed),
        user_id=user_id
    )


def finalize_route(route: Route, status: NavigationStatus,
                   start_time: Optional[datetime] = None,
                   end_time: Optional[datetime] = None,
                   start_location: Optional[Tuple[float, float]] = None,
                   user_id: Optional[str] = None,
                   arrival_times: Optional[Dict[str, datetime]] = None,
                   alarms: Optional[Collection[str]] = None,
                   alarms_triggered: Optional[int] = None,
                   actual_duration: Optional[int] = None) -> HistoryRecord:
    """Snapshot a route into a history record with the given terminal status.

    The description is computed once here and frozen into the record.
    A COMPLETED status counts every stop as reached, since ``Route.advance``
    never marks the last stop itself.

    Raises:
        InvalidStatusTransition: if status is IN_PROGRESS
    """
    if not status.is_terminal:
        raise InvalidStatusTransition(f"Cannot finalize route {route.id} as {status.value}")
    destinations = snapshot_destinations(
        route, arrival_times, alarms, reached_all=status is NavigationStatus.COMPLETED
    )
    if alarms_triggered is None:
        alarms_triggered = sum(1 for d in destinations if d.alarm_triggered)
    record = HistoryRecord(
        route_description=route.description(),
        start_time=start_time or route.created_at or datetime.now(),
        start_location=start_location,
        destinations=destinations,
        total_distance=route.total_distance,
        estimated_duration=route.total_estimated_time,
        alarms_triggered=alarms_triggered,
        completed_stops=sum(1 for d in destinations if d.is_completed),
        user_id=user_id
    )
    record = record.finish(status, end_time=end_time, actual_duration=actual_duration)
    logger.debug(f"Finalized route {route.id} as {status.value}: {record.completed_stops}/{record.total_stops} stops")
    return record
