"""Route domain model: an ordered set of stops with a progression cursor."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional
import logging
import uuid

from multistop.domain.formatting import describe_stops
from multistop.domain.place import Place
from multistop.domain.waypoint import Waypoint

logger = logging.getLogger(__name__)


class RouteState(str, Enum):
    """Progression state, derived from the cursor position."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass
class Route:
    """A multi-point route traversed stop by stop.

    The route owns its waypoint list. Callers must serialise mutations
    (append/remove/advance) on one instance; see NavigationSession.
    """
    name: str = ""
    points: List[Waypoint] = field(default_factory=list)
    current_point_index: int = 0
    alarm_for_each_stop: bool = True
    voice_announcements_enabled: bool = True
    is_active: bool = False
    created_at: Optional[datetime] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        """Initialize timestamp and check the cursor."""
        if self.created_at is None:
            self.created_at = datetime.now()
        if not 0 <= self.current_point_index <= len(self.points):
            raise ValueError(
                f"current_point_index must be within 0..{len(self.points)}, got {self.current_point_index}"
            )

    # Progression

    def append(self, place: Place, estimated_time_from_previous: int = 0,
               distance_from_previous: float = 0.0) -> Waypoint:
        """Add a stop at the end of the route.

        Args:
            place: Place the stop refers to
            estimated_time_from_previous: Minutes from the previous stop
            distance_from_previous: Kilometers from the previous stop

        Returns:
            The created Waypoint
        """
        waypoint = Waypoint(
            place=place,
            order=len(self.points),
            alarm_enabled=self.alarm_for_each_stop,
            estimated_time_from_previous=estimated_time_from_previous,
            distance_from_previous=distance_from_previous
        )
        self.points.append(waypoint)
        return waypoint

    def remove(self, waypoint_id: str):
        """Remove a stop by id and renumber the remaining stops.

        Unknown ids are ignored. The cursor is left untouched, so removing a
        stop at or before the cursor shifts which stop it points at.
        """
        index = next((i for i, wp in enumerate(self.points) if wp.id == waypoint_id), None)
        if index is None:
            return
        del self.points[index]
        for new_index, waypoint in enumerate(self.points):
            waypoint.order = new_index
        logger.debug(f"Removed stop {waypoint_id} from route {self.id}, {len(self.points)} left")

    def advance(self) -> bool:
        """Mark the current stop completed and move the cursor forward.

        Returns False without changing anything when the route is empty or the
        cursor is already on the last stop; finishing the route from there is
        the caller's decision.
        """
        if self.current_point_index < len(self.points) - 1:
            self.points[self.current_point_index].is_completed = True
            self.current_point_index += 1
            logger.debug(f"Route {self.id} advanced to stop {self.current_point_index}")
            return True
        return False

    # Derived views

    @property
    def current_point(self) -> Optional[Waypoint]:
        if self.current_point_index < len(self.points):
            return self.points[self.current_point_index]
        return None

    @property
    def next_point(self) -> Optional[Waypoint]:
        if self.current_point_index + 1 < len(self.points):
            return self.points[self.current_point_index + 1]
        return None

    @property
    def remaining_points(self) -> List[Waypoint]:
        """Stops after the next one to visit."""
        return self.points[self.current_point_index + 1:]

    @property
    def completed_points(self) -> List[Waypoint]:
        return self.points[:self.current_point_index]

    @property
    def is_completed(self) -> bool:
        return self.current_point_index >= len(self.points)

    @property
    def progress(self) -> float:
        """Fraction of stops passed, in [0, 1]."""
        if not self.points:
            return 0.0
        return min(1.0, self.current_point_index / len(self.points))

    @property
    def state(self) -> RouteState:
        if self.is_completed:
            return RouteState.COMPLETED
        if self.current_point_index == 0 and not any(wp.is_completed for wp in self.points):
            return RouteState.NOT_STARTED
        return RouteState.IN_PROGRESS

    @property
    def total_distance(self) -> float:
        """Sum of the per-stop distances, in kilometers."""
        return sum(wp.distance_from_previous for wp in self.points)

    @property
    def total_estimated_time(self) -> int:
        """Sum of the per-stop travel times, in minutes."""
        return sum(wp.estimated_time_from_previous for wp in self.points)

    def find_point(self, waypoint_id: str) -> Optional[Waypoint]:
        return next((wp for wp in self.points if wp.id == waypoint_id), None)

    def description(self) -> str:
        """Human-readable summary of the stops, e.g. 'Home → ... → Office'."""
        return describe_stops([wp.place.name for wp in self.points])

    def to_dict(self) -> dict:
        """Convert route to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "points": [wp.to_dict() for wp in self.points],
            "current_point_index": self.current_point_index,
            "alarm_for_each_stop": self.alarm_for_each_stop,
            "voice_announcements_enabled": self.voice_announcements_enabled,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "description": self.description(),
            "progress": self.progress,
            "state": self.state.value,
            "total_distance": self.total_distance,
            "total_estimated_time": self.total_estimated_time
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Route":
        """Create route from dictionary."""
        points = [Waypoint.from_dict(wp) for wp in data.get("points", [])]
        created_at = datetime.fromisoformat(data["created_at"]) if data.get("created_at") else None
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(
            name=data.get("name", ""),
            points=points,
            current_point_index=data.get("current_point_index", 0),
            alarm_for_each_stop=data.get("alarm_for_each_stop", True),
            voice_announcements_enabled=data.get("voice_announcements_enabled", True),
            is_active=data.get("is_active", False),
            created_at=created_at,
            **kwargs
        )
