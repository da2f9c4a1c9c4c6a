"""Place domain model."""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class Place:
    """A named location that a route stop refers to."""
    name: str
    address: str = ""
    latitude: float = 0.0
    longitude: float = 0.0
    id: Optional[str] = None
    category: Optional[str] = None

    @property
    def coordinates(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    def to_dict(self) -> dict:
        """Convert place to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "category": self.category
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Place":
        """Create place from dictionary."""
        return cls(
            name=data["name"],
            address=data.get("address", ""),
            latitude=data.get("latitude", 0.0),
            longitude=data.get("longitude", 0.0),
            id=data.get("id"),
            category=data.get("category")
        )
