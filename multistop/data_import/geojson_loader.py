"""GeoJSON loader for places."""
import json
from typing import List
from multistop.domain.place import Place
from multistop.data_import.validators import (
    validate_coordinates, validate_geojson_geometry, validate_place_name
)


def load_places_from_geojson(file_path: str) -> List[Place]:
    """Load places from GeoJSON file (Point features).

    Features that are not points are skipped. Each point needs a ``name``
    property; ``address`` and ``category`` are optional.

    Args:
        file_path: Path to GeoJSON file

    Returns:
        List of Place objects
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        geojson_data = json.load(f)

    if geojson_data.get("type") == "FeatureCollection":
        features = geojson_data.get("features", [])
    elif geojson_data.get("type") == "Feature":
        features = [geojson_data]
    else:
        raise ValueError(f"Unsupported GeoJSON type: {geojson_data.get('type')}")

    places = []
    for idx, feature in enumerate(features):
        geometry_data = feature.get("geometry")
        if not geometry_data:
            continue

        is_valid, error, geometry = validate_geojson_geometry(geometry_data)
        if not is_valid:
            raise ValueError(f"Feature {idx + 1}: {error}")
        if geometry.geom_type != "Point":
            continue

        properties = feature.get("properties") or {}
        name = properties.get("name")
        for is_valid, error in (validate_place_name(name), validate_coordinates(geometry.y, geometry.x)):
            if not is_valid:
                raise ValueError(f"Feature {idx + 1}: {error}")

        places.append(Place(
            name=name,
            address=properties.get("address", ""),
            latitude=geometry.y,
            longitude=geometry.x,
            id=properties.get("id"),
            category=properties.get("category")
        ))

    return places
