from math import radians, sin, cos, sqrt, asin
from typing import Optional

from wayguard.core.errors import ValidationError
from wayguard.models.domain import Coordinate

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    Great-circle distance between two coordinates using the haversine formula.

    Inputs are not range-checked here; build coordinates with
    `make_coordinate` at the edges.

    Returns:
        Distance in meters. Symmetric, and 0.0 for identical points.
    """
    lat1, lon1, lat2, lon2 = map(radians, [a.latitude, a.longitude, b.latitude, b.longitude])

    dlon = lon2 - lon1
    dlat = lat2 - lat1

    h = sin(dlat / 2)**2 + cos(lat1) * cos(lat2) * sin(dlon / 2)**2
    # Rounding can push h a hair above 1 for antipodal points
    c = 2 * asin(sqrt(min(1.0, h)))

    return EARTH_RADIUS_M * c


def make_coordinate(latitude: Optional[float], longitude: Optional[float]) -> Coordinate:
    """Build a Coordinate, raising ValidationError naming the bad field."""
    if latitude is None:
        raise ValidationError("Latitude is required.", field="latitude")
    if longitude is None:
        raise ValidationError("Longitude is required.", field="longitude")
    if not -90 <= latitude <= 90:
        raise ValidationError(f"Latitude {latitude} is outside [-90, 90].", field="latitude")
    if not -180 <= longitude <= 180:
        raise ValidationError(f"Longitude {longitude} is outside [-180, 180].", field="longitude")
    return Coordinate(latitude=latitude, longitude=longitude)


def format_address_stub(coordinate: Coordinate) -> str:
    """Deterministic stand-in for reverse geocoding."""
    return f"Location at {coordinate.latitude:.4f}, {coordinate.longitude:.4f}"


def require_positive_radius(radius_meters: Optional[float]) -> float:
    if radius_meters is None or not radius_meters > 0:
        raise ValidationError("Radius must be greater than 0 meters.", field="radius")
    return radius_meters
