"""
Geographic primitives for Labor Scout.

Coordinates, human-readable locations, and great-circle distance on a
spherical Earth via geopy.
"""

from dataclasses import dataclass

from geopy.distance import great_circle

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinate:
    """A latitude/longitude pair in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"latitude must be between -90 and 90, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"longitude must be between -180 and 180, got {self.longitude}")

    def as_tuple(self) -> tuple[float, float]:
        return (self.latitude, self.longitude)

    def format(self) -> str:
        """Render as a fixed-precision "lat, lng" string."""
        return f"{self.latitude:.4f}, {self.longitude:.4f}"


@dataclass(frozen=True)
class Location:
    """A coordinate plus its human-readable address (may be empty)."""
    coordinate: Coordinate
    address: str = ""

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude


def haversine_distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates in kilometers.

    Args:
        a: First coordinate.
        b: Second coordinate.

    Returns:
        Distance in kilometers on a sphere of radius 6371 km.
    """
    return great_circle(a.as_tuple(), b.as_tuple(), radius=EARTH_RADIUS_KM).km


def format_distance(distance_km: float) -> str:
    """Format a distance for end users, e.g. "3.2 km away"."""
    return f"{distance_km:.1f} km away"
