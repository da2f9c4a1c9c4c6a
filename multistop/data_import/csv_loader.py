"""CSV loader for places."""
import csv
from typing import List
from multistop.domain.place import Place
from multistop.data_import.validators import validate_coordinates, validate_place_name


def load_places_from_csv(file_path: str,
                         name_col: str = "name",
                         address_col: str = "address",
                         lat_col: str = "latitude",
                         lon_col: str = "longitude",
                         category_col: str = "category") -> List[Place]:
    """Load places from CSV file.

    Args:
        file_path: Path to CSV file
        name_col: Name of name column
        address_col: Name of address column (optional in the file)
        lat_col: Name of latitude column
        lon_col: Name of longitude column
        category_col: Name of category column (optional in the file)

    Returns:
        List of Place objects
    """
    places = []

    with open(file_path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)

        for row_num, row in enumerate(reader, start=2):  # Start at 2 (header is row 1)
            try:
                name = row[name_col]
                lat = float(row[lat_col])
                lon = float(row[lon_col])
            except KeyError as e:
                raise ValueError(f"Row {row_num}: Missing required column: {e}")
            except (TypeError, ValueError) as e:
                raise ValueError(f"Row {row_num}: {str(e)}")

            for is_valid, error in (validate_place_name(name), validate_coordinates(lat, lon)):
                if not is_valid:
                    raise ValueError(f"Row {row_num}: {error}")

            places.append(Place(
                name=name.strip(),
                address=(row.get(address_col) or "").strip(),
                latitude=lat,
                longitude=lon,
                category=row.get(category_col) or None
            ))

    return places


def save_places_to_csv(places: List[Place], file_path: str):
    """Save places to CSV file."""
    with open(file_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(['name', 'address', 'latitude', 'longitude', 'category'])

        for place in places:
            writer.writerow([
                place.name,
                place.address,
                place.latitude,
                place.longitude,
                place.category or ''
            ])
