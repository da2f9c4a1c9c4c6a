"""GeoJSON exporter for navigation history records."""
import json
from shapely.geometry import LineString, Point, mapping
from multistop.domain.formatting import point_label
from multistop.domain.history import HistoryRecord


class GeoJSONExporter:
    """Exports a recorded traversal as a GeoJSON FeatureCollection."""

    @staticmethod
    def record_to_feature_collection(record: HistoryRecord, include_path: bool = True) -> dict:
        """Build the FeatureCollection for one record.

        Args:
            record: History record to export
            include_path: Add a LineString through the stops in order

        Returns:
            GeoJSON dictionary
        """
        features = []

        if record.start_location:
            latitude, longitude = record.start_location
            features.append({
                "type": "Feature",
                "geometry": mapping(Point(longitude, latitude)),
                "properties": {"kind": "start", "name": "Start"}
            })

        for destination in record.destinations:
            features.append({
                "type": "Feature",
                "geometry": mapping(Point(destination.longitude, destination.latitude)),
                "properties": {
                    "kind": "destination",
                    "name": destination.name,
                    "address": destination.address,
                    "order": destination.order,
                    "label": point_label(destination.order),
                    "is_completed": destination.is_completed,
                    "alarm_triggered": destination.alarm_triggered,
                    "arrival_time": destination.arrival_time.isoformat() if destination.arrival_time else None
                }
            })

        # A LineString needs at least two positions
        stops = [(d.longitude, d.latitude) for d in record.destinations]
        if record.start_location:
            stops.insert(0, (record.start_location[1], record.start_location[0]))
        if include_path and len(stops) >= 2:
            features.append({
                "type": "Feature",
                "geometry": mapping(LineString(stops)),
                "properties": {"kind": "path", "name": record.route_description}
            })

        return {
            "type": "FeatureCollection",
            "features": features,
            "properties": {
                "id": record.id,
                "route_description": record.route_description,
                "status": record.status.value,
                "completion_percentage": record.completion_percentage,
                "duration": record.formatted_duration
            }
        }

    @staticmethod
    def export_record(record: HistoryRecord, file_path: str, include_path: bool = True):
        """Export record to GeoJSON file.

        Args:
            record: History record to export
            file_path: Output file path
            include_path: Add a LineString through the stops in order
        """
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(GeoJSONExporter.record_to_feature_collection(record, include_path),
                      f, indent=2, ensure_ascii=False)
