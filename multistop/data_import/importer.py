"""Main importer interface."""
from typing import List
from pathlib import Path
from multistop.domain.place import Place
from multistop.data_import.csv_loader import load_places_from_csv, save_places_to_csv
from multistop.data_import.geojson_loader import load_places_from_geojson


class DataImporter:
    """Main interface for importing route stops."""

    @staticmethod
    def import_places(file_path: str) -> List[Place]:
        """Import places from file (CSV or GeoJSON).

        Args:
            file_path: Path to CSV or GeoJSON file

        Returns:
            List of Place objects
        """
        suffix = Path(file_path).suffix.lower()

        if suffix == '.csv':
            return load_places_from_csv(file_path)
        elif suffix in ['.geojson', '.json']:
            return load_places_from_geojson(file_path)
        else:
            raise ValueError(f"Unsupported file format: {suffix}. Supported: .csv, .geojson, .json")

    @staticmethod
    def export_places(places: List[Place], file_path: str):
        """Export places to CSV file.

        Args:
            places: List of Place objects
            file_path: Output CSV file path
        """
        suffix = Path(file_path).suffix.lower()

        if suffix == '.csv':
            save_places_to_csv(places, file_path)
        else:
            raise ValueError(f"Unsupported export format: {suffix}. Supported: .csv")
