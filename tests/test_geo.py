import math

import pytest

from wayguard.core.errors import ValidationError
from wayguard.models.domain import Coordinate
from wayguard.utils.geo import (
    distance_meters,
    format_address_stub,
    make_coordinate,
    require_positive_radius,
)

POINTS = [
    Coordinate(latitude=28.6139, longitude=77.2090),
    Coordinate(latitude=12.97, longitude=77.59),
    Coordinate(latitude=-33.8688, longitude=151.2093),
    Coordinate(latitude=51.5074, longitude=-0.1278),
    Coordinate(latitude=90.0, longitude=0.0),
    Coordinate(latitude=0.0, longitude=180.0),
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_distance_is_non_negative_and_symmetric(a, b):
    d = distance_meters(a, b)
    assert d >= 0
    assert d == distance_meters(b, a)


@pytest.mark.parametrize("a", POINTS)
def test_distance_to_self_is_zero(a):
    assert distance_meters(a, a) == 0


def test_one_degree_of_longitude_on_equator():
    d = distance_meters(Coordinate(latitude=0, longitude=0), Coordinate(latitude=0, longitude=1))
    assert d == pytest.approx(6_371_000 * math.pi / 180, rel=1e-9)


def test_antipodal_points_are_half_circumference():
    d = distance_meters(Coordinate(latitude=0, longitude=0), Coordinate(latitude=0, longitude=180))
    assert d == pytest.approx(math.pi * 6_371_000, rel=1e-9)


def test_city_hospital_is_within_100_meters():
    hospital = Coordinate(latitude=28.6139, longitude=77.2090)
    user = Coordinate(latitude=28.6140, longitude=77.2095)
    assert 0 < distance_meters(hospital, user) < 100


def test_make_coordinate_names_bad_field():
    with pytest.raises(ValidationError) as exc:
        make_coordinate(None, 10)
    assert exc.value.field == "latitude"

    with pytest.raises(ValidationError) as exc:
        make_coordinate(10, 181)
    assert exc.value.field == "longitude"

    with pytest.raises(ValidationError):
        make_coordinate(float("nan"), 10)


def test_address_stub_is_deterministic():
    coord = make_coordinate(12.971598, 77.594566)
    assert format_address_stub(coord) == "Location at 12.9716, 77.5946"
    assert format_address_stub(coord) == format_address_stub(make_coordinate(12.971598, 77.594566))


@pytest.mark.parametrize("radius", [0, -5, None])
def test_radius_must_be_positive(radius):
    with pytest.raises(ValidationError):
        require_positive_radius(radius)
