"""Waypoint domain model."""
from dataclasses import dataclass, field
from typing import Tuple
import uuid

from multistop.domain.formatting import point_label
from multistop.domain.place import Place


@dataclass
class Waypoint:
    """A single stop of a multi-point route."""
    place: Place
    order: int = 0
    alarm_enabled: bool = True
    estimated_time_from_previous: int = 0  # minutes
    distance_from_previous: float = 0.0  # kilometers
    is_completed: bool = False
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        """Validate stop metadata."""
        if self.order < 0:
            raise ValueError(f"order must be non-negative, got {self.order}")
        if self.estimated_time_from_previous < 0:
            raise ValueError(
                f"estimated_time_from_previous must be non-negative, got {self.estimated_time_from_previous}"
            )
        if self.distance_from_previous < 0:
            raise ValueError(f"distance_from_previous must be non-negative, got {self.distance_from_previous}")

    @property
    def label(self) -> str:
        """Map label for this stop (A-J, then 11, 12, ...)."""
        return point_label(self.order)

    @property
    def name(self) -> str:
        return self.place.name

    @property
    def coordinates(self) -> Tuple[float, float]:
        return self.place.coordinates

    def to_dict(self) -> dict:
        """Convert waypoint to dictionary."""
        return {
            "id": self.id,
            "place": self.place.to_dict(),
            "order": self.order,
            "label": self.label,
            "alarm_enabled": self.alarm_enabled,
            "estimated_time_from_previous": self.estimated_time_from_previous,
            "distance_from_previous": self.distance_from_previous,
            "is_completed": self.is_completed
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Waypoint":
        """Create waypoint from dictionary."""
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = data["id"]
        return cls(
            place=Place.from_dict(data["place"]),
            order=data.get("order", 0),
            alarm_enabled=data.get("alarm_enabled", True),
            estimated_time_from_previous=data.get("estimated_time_from_previous", 0),
            distance_from_previous=data.get("distance_from_previous", 0.0),
            is_completed=data.get("is_completed", False),
            **kwargs
        )
