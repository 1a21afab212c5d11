"""Unit tests for coordinates and great-circle distance."""
import math

import pytest

from errors import InvalidCoordinate, InvalidRadius
from geo import EARTH_RADIUS_M, Circle, Coordinate, distance_m, is_inside_circle, is_valid_coordinate

# meters per degree of latitude on the model sphere
M_PER_DEG = EARTH_RADIUS_M * math.pi / 180.0


class TestCoordinate:
    """Test cases for coordinate validation."""

    def test_valid_bounds(self):
        """Extreme but legal values are accepted."""
        Coordinate(90, 180)
        Coordinate(-90, -180)
        Coordinate(0.0, 0.0)

    @pytest.mark.parametrize(
        "lat, lon",
        [(90.0001, 0), (-91, 0), (0, 180.5), (0, -181), (float("nan"), 0), (0, float("inf"))],
    )
    def test_invalid_values_rejected(self, lat, lon):
        """Out-of-range and non-finite values raise InvalidCoordinate."""
        with pytest.raises(InvalidCoordinate):
            Coordinate(lat, lon)

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidCoordinate):
            Coordinate("48.85", 2.35)

    def test_is_valid_coordinate(self):
        assert is_valid_coordinate(48.8566, 2.3522) is True
        assert is_valid_coordinate(None, 2.3522) is False
        assert is_valid_coordinate(100, 0) is False

    def test_coordinate_is_immutable(self):
        c = Coordinate(1, 2)
        with pytest.raises(AttributeError):
            c.latitude = 3


class TestCircle:
    """Test cases for circle construction."""

    @pytest.mark.parametrize("radius", [0, -1, float("nan"), float("inf")])
    def test_bad_radius(self, radius):
        with pytest.raises(InvalidRadius):
            Circle(Coordinate(0, 0), radius)

    def test_area(self):
        assert Circle(Coordinate(0, 0), 2).area_m2 == pytest.approx(4 * math.pi)

    def test_is_inside_circle(self):
        circle = Circle(Coordinate(0, 0), 10)
        assert is_inside_circle(Coordinate(5 / M_PER_DEG, 0), circle)
        assert not is_inside_circle(Coordinate(11 / M_PER_DEG, 0), circle)


class TestDistance:
    """Test cases for the Haversine distance."""

    def test_zero_for_same_point(self):
        a = Coordinate(48.8566, 2.3522)
        assert distance_m(a, a) == 0.0
        assert distance_m(a, Coordinate(48.8566, 2.3522)) == 0.0

    @pytest.mark.parametrize(
        "a, b",
        [
            (Coordinate(48.8566, 2.3522), Coordinate(51.5074, -0.1278)),
            (Coordinate(-33.8688, 151.2093), Coordinate(40.7128, -74.0060)),
            (Coordinate(0, 0), Coordinate(0.00001, 0.00001)),
        ],
    )
    def test_symmetric(self, a, b):
        assert distance_m(a, b) == pytest.approx(distance_m(b, a), abs=1e-9)

    def test_one_degree_of_latitude(self):
        assert distance_m(Coordinate(0, 0), Coordinate(1, 0)) == pytest.approx(M_PER_DEG)

    def test_known_city_pair(self):
        """Paris to London is about 344 km."""
        d = distance_m(Coordinate(48.8566, 2.3522), Coordinate(51.5074, -0.1278))
        assert d == pytest.approx(343_500, rel=0.01)

    def test_near_identical_points(self):
        d = distance_m(Coordinate(12.9716, 77.5946), Coordinate(12.9716, 77.594600001))
        assert 0 < d < 0.001

    def test_antipodal_points(self):
        d = distance_m(Coordinate(0, 0), Coordinate(0, 180))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)
        d = distance_m(Coordinate(45, 10), Coordinate(-45, -170))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_M)
        assert not math.isnan(d)

    def test_ten_meters_north(self):
        d = distance_m(Coordinate(0, 0), Coordinate(10 / M_PER_DEG, 0))
        assert d == pytest.approx(10.0, abs=1e-6)
