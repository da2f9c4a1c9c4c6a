"""JSON exporter for routes and navigation history."""
import json
from typing import Iterable
from multistop.domain.history import HistoryRecord
from multistop.domain.route import Route


class JSONExporter:
    """Exports routes and history records to JSON format."""

    @staticmethod
    def export_history(records: Iterable[HistoryRecord], file_path: str):
        """Export history records to JSON file.

        Args:
            records: History records to export, in the order given
            file_path: Output file path
        """
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump([record.to_dict() for record in records], f, indent=2, ensure_ascii=False)

    @staticmethod
    def export_route(route: Route, file_path: str):
        """Export route to JSON file.

        Args:
            route: Route to export
            file_path: Output file path
        """
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(route.to_dict(), f, indent=2, ensure_ascii=False)
