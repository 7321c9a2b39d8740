"""Geospatial helpers: haversine distance and per-region radius policy."""

import math
from typing import Optional

from src.models.deal import GeoPoint

# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

DEFAULT_RADIUS_KM = 10.0
URBAN_RADIUS_KM = 5.0
SUBURBAN_RADIUS_KM = 15.0

# Checked in order; the first matching keyword group wins
RADIUS_RULES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("downtown", "uptown", "center", "plaza", "district"), URBAN_RADIUS_KM),
    (("south", "north", "east", "west", "hills", "park"), SUBURBAN_RADIUS_KM),
)

_KM_TO_MILES = 0.621371
_FEET_PER_MILE = 5280


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """Calculate great-circle distance between two points using the Haversine formula.

    Returns distance in kilometers.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_KM * c


class RegionRadiusPolicy:
    """Maps a region name to the maximum inclusion radius for its deals.

    Dense urban cores get a tight radius, spread-out districts a wider one.
    Names matching no rule (and missing names) use the default radius.
    """

    def __init__(
        self,
        default_radius_km: float = DEFAULT_RADIUS_KM,
        rules: tuple[tuple[tuple[str, ...], float], ...] = RADIUS_RULES,
    ):
        self.default_radius_km = default_radius_km
        self.rules = rules

    def radius_for(self, region_name: Optional[str]) -> float:
        if not region_name or not region_name.strip():
            return self.default_radius_km

        name = region_name.lower()
        for keywords, radius_km in self.rules:
            if any(keyword in name for keyword in keywords):
                return radius_km
        return self.default_radius_km


_default_policy = RegionRadiusPolicy()


def radius_for_region(region_name: Optional[str]) -> float:
    """Radius in km for a region name using the default policy."""
    return _default_policy.radius_for(region_name)


def format_distance(distance_km: float) -> str:
    """Format distance for display in miles (feet when very close)."""
    miles = distance_km * _KM_TO_MILES
    if miles < 0.1:
        return f"{round(miles * _FEET_PER_MILE)}ft away"
    return f"{miles:.1f}mi away"
