"""Geodesic primitives: coordinates, circles and great-circle distance."""
import math
from dataclasses import dataclass

from errors import InvalidCoordinate, InvalidRadius

EARTH_RADIUS_M = 6_371_000.0

# Below this separation two centers are treated as the same point.
DEGENERATE_DISTANCE_M = 0.1


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_coordinate(latitude: float, longitude: float) -> None:
    """Raise InvalidCoordinate unless both values are finite and in range."""
    if not (_is_number(latitude) and _is_number(longitude)):
        raise InvalidCoordinate(
            f"Coordinates must be numbers, got ({latitude!r}, {longitude!r})"
        )
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        raise InvalidCoordinate(f"Non-finite coordinate ({latitude}, {longitude})")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidCoordinate(f"Latitude {latitude} outside [-90, 90]")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidCoordinate(f"Longitude {longitude} outside [-180, 180]")


def is_valid_coordinate(latitude, longitude) -> bool:
    try:
        validate_coordinate(latitude, longitude)
    except InvalidCoordinate:
        return False
    return True


@dataclass(frozen=True)
class Coordinate:
    """A WGS84 point in decimal degrees. Validated on construction."""

    latitude: float
    longitude: float

    def __post_init__(self):
        validate_coordinate(self.latitude, self.longitude)


@dataclass(frozen=True)
class Circle:
    """A center point plus a radius in meters."""

    center: Coordinate
    radius_m: float

    def __post_init__(self):
        if not isinstance(self.center, Coordinate):
            raise InvalidCoordinate(f"Circle center must be a Coordinate, got {self.center!r}")
        if not _is_number(self.radius_m) or not math.isfinite(self.radius_m):
            raise InvalidRadius(f"Radius must be a finite number, got {self.radius_m!r}")
        if self.radius_m <= 0:
            raise InvalidRadius(f"Radius must be > 0 m, got {self.radius_m}")

    @property
    def area_m2(self) -> float:
        return math.pi * self.radius_m * self.radius_m


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Haversine great-circle distance in meters.

    Symmetric, and exactly 0.0 for identical points. The haversine term is
    clamped to [0, 1] so rounding near antipodes cannot push ``sqrt(1 - h)``
    into a domain error.
    """
    if a == b:
        return 0.0

    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2.0) ** 2
    h = min(1.0, max(0.0, h))
    c = 2.0 * math.atan2(math.sqrt(h), math.sqrt(1.0 - h))
    return EARTH_RADIUS_M * c


def is_inside_circle(point: Coordinate, circle: Circle) -> bool:
    """Check whether a point is inside or on the boundary of a circle."""
    return distance_m(point, circle.center) <= circle.radius_m
