"""Validators for imported places."""
from typing import Tuple, Optional
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.validation import make_valid
from shapely.errors import ShapelyError


def validate_coordinates(latitude: float, longitude: float) -> Tuple[bool, Optional[str]]:
    """Validate place coordinates."""
    if not -90 <= latitude <= 90:
        return False, f"Latitude must be between -90 and 90, got {latitude}"
    if not -180 <= longitude <= 180:
        return False, f"Longitude must be between -180 and 180, got {longitude}"
    return True, None


def validate_place_name(name: Optional[str]) -> Tuple[bool, Optional[str]]:
    if not name or not name.strip():
        return False, "Place name must not be empty"
    return True, None


def validate_geojson_geometry(geometry: dict) -> Tuple[bool, Optional[str], Optional[BaseGeometry]]:
    """Validate and create Shapely geometry from GeoJSON."""
    try:
        geom = shape(geometry)
        if not geom.is_valid:
            geom = make_valid(geom)
        return True, None, geom
    except (ShapelyError, ValueError, TypeError, AttributeError, KeyError) as e:
        return False, f"Invalid geometry: {str(e)}", None
