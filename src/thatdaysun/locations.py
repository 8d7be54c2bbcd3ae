"""Named-location catalog and longitude proximity ranking."""

import csv
from pathlib import Path

from thatdaysun.models import NamedLocation

_CATALOG_PATH = Path(__file__).parent / "data" / "cities.csv"


def load_catalog(path: Path = _CATALOG_PATH) -> tuple[NamedLocation, ...]:
    """Parse a ``name,lat,lng`` CSV into catalog order.

    Returns:
        Tuple of NamedLocation, in file order.
    """
    with path.open(encoding="utf-8", newline="") as f:
        return tuple(
            NamedLocation(name=row["name"], lat=float(row["lat"]), lng=float(row["lng"]))
            for row in csv.DictReader(f)
        )


CITIES: tuple[NamedLocation, ...] = load_catalog()


def circular_distance(a: float, b: float) -> float:
    """Angular separation of two longitudes across the antimeridian, [0, 180]."""
    d = abs(a - b) % 360.0
    if d > 180.0:
        d = 360.0 - d
    return d


def nearest_locations(
    target_lng: float,
    k: int = 3,
    catalog: tuple[NamedLocation, ...] = CITIES,
) -> tuple[NamedLocation, ...]:
    """The k catalog entries whose longitude is closest to target_lng.

    Latitude is ignored: only the hour of local solar time matters. Ties keep
    catalog order.
    """
    ranked = sorted(catalog, key=lambda loc: circular_distance(loc.lng, target_lng))
    return tuple(ranked[:k])
