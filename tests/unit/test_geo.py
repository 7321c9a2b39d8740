"""Unit tests for haversine distance and region radius policy."""

import math

import pytest

from src.models.deal import GeoPoint
from src.services.geo import (
    DEFAULT_RADIUS_KM,
    SUBURBAN_RADIUS_KM,
    URBAN_RADIUS_KM,
    RegionRadiusPolicy,
    format_distance,
    haversine_km,
    radius_for_region,
)


POINTS = [
    GeoPoint(lat=0.0, lng=0.0),
    GeoPoint(lat=35.227, lng=-80.843),
    GeoPoint(lat=40.7128, lng=-74.0060),
    GeoPoint(lat=-33.8688, lng=151.2093),
    GeoPoint(lat=89.9, lng=179.9),
]


@pytest.mark.parametrize("point", POINTS)
def test_distance_to_self_is_zero(point):
    """Test identical coordinates are 0 km apart."""
    assert haversine_km(point, point) == 0.0


def test_distance_is_symmetric():
    """Test distance does not depend on argument order."""
    for a in POINTS:
        for b in POINTS:
            assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))
            assert haversine_km(a, b) >= 0


def test_one_degree_of_latitude_is_about_111_km():
    """Test one degree of latitude along a meridian."""
    distance = haversine_km(GeoPoint(lat=10.0, lng=20.0), GeoPoint(lat=11.0, lng=20.0))
    assert distance == pytest.approx(111.19, abs=0.5)


def test_known_city_pair_distance():
    """Test New York to Charlotte is roughly 855 km."""
    distance = haversine_km(POINTS[2], POINTS[1])
    assert 840 < distance < 870


def test_nan_propagates():
    """Test non-finite input yields NaN instead of raising."""
    a = GeoPoint.model_construct(lat=float("nan"), lng=0.0)
    assert math.isnan(haversine_km(a, GeoPoint(lat=0.0, lng=0.0)))


class TestRegionRadiusPolicy:
    """Tests for the per-region inclusion radius."""

    def test_unknown_region_uses_default(self):
        assert radius_for_region("Plainfield") == DEFAULT_RADIUS_KM
        assert DEFAULT_RADIUS_KM == 10

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_missing_name_uses_default(self, name):
        assert radius_for_region(name) == DEFAULT_RADIUS_KM

    @pytest.mark.parametrize("name", ["Downtown", "Uptown Charlotte", "Arts District", "City Center"])
    def test_urban_regions_get_tight_radius(self, name):
        assert radius_for_region(name) == URBAN_RADIUS_KM

    @pytest.mark.parametrize("name", ["South End", "Beverly Hills", "Oak Park", "NORTH SHORE"])
    def test_suburban_regions_get_wide_radius(self, name):
        assert radius_for_region(name) == SUBURBAN_RADIUS_KM

    def test_urban_keyword_wins_over_suburban(self):
        """Test 'South Downtown' is treated as urban."""
        assert radius_for_region("South Downtown") == URBAN_RADIUS_KM

    def test_custom_default(self):
        policy = RegionRadiusPolicy(default_radius_km=25.0)
        assert policy.radius_for("Somewhere") == 25.0
        assert policy.radius_for(None) == 25.0
        assert policy.radius_for("Downtown") == URBAN_RADIUS_KM


def test_format_distance_in_miles():
    assert format_distance(1.609344) == "1.0mi away"


def test_format_distance_in_feet_when_close():
    assert format_distance(0.1) == "328ft away"
