"""Approximate distances between U.S. ZIP codes.

Each ZIP is mapped to a coordinate by its first three digits, then the
haversine great-circle distance is taken.  This is an estimate for pickup
eligibility and display copy, not geocoding: two ZIPs sharing a prefix are
always 0 miles apart.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

EARTH_RADIUS_MILES = 3958.8
# The older exact-ZIP lookup used a rounder figure; kept for comparison.
LEGACY_EARTH_RADIUS_MILES = 3959.0


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float


_BOSTON = Coordinates(42.3601, -71.0589)
_WASHINGTON = Coordinates(38.9072, -77.0369)
_NEW_YORK = Coordinates(40.7128, -74.0060)
_ATLANTA = Coordinates(33.7490, -84.3880)
_LOUISVILLE = Coordinates(38.2527, -85.7585)
_CHICAGO = Coordinates(41.8781, -87.6298)
_MINNEAPOLIS = Coordinates(44.9778, -93.2650)
_DENVER = Coordinates(39.7392, -104.9903)
_HOUSTON = Coordinates(29.7604, -95.3698)
_SAN_FRANCISCO = Coordinates(37.7749, -122.4194)
_LOS_ANGELES = Coordinates(34.0522, -118.2437)


def _span(first: int, last: int, coords: Coordinates) -> dict[str, Coordinates]:
    return {f"{prefix:03d}": coords for prefix in range(first, last + 1)}


ZIP_PREFIX_COORDINATES: dict[str, Coordinates] = {
    **_span(10, 19, _BOSTON),
    **_span(20, 27, _WASHINGTON),
    **_span(100, 119, _NEW_YORK),
    **_span(300, 312, _ATLANTA),
    **_span(400, 416, _LOUISVILLE),
    **_span(500, 527, _CHICAGO),
    **_span(530, 550, _MINNEAPOLIS),
    **_span(600, 606, _DENVER),
    **_span(700, 720, _HOUSTON),
    **_span(800, 808, _SAN_FRANCISCO),
    **_span(900, 928, _LOS_ANGELES),
    **_span(930, 935, _LOS_ANGELES),
    # market towns with a fixed centre
    "288": Coordinates(35.5951, -82.5515),  # Asheville
    "331": Coordinates(25.7751, -80.1947),  # Miami
    "372": Coordinates(36.1627, -86.7816),  # Nashville
    "787": Coordinates(30.2672, -97.7431),  # Austin
    "972": Coordinates(45.5152, -122.6784),  # Portland
    "981": Coordinates(47.6062, -122.3321),  # Seattle
}


def haversine_miles(
    a: Coordinates,
    b: Coordinates,
    radius: float = EARTH_RADIUS_MILES,
) -> float:
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude))
        * math.cos(math.radians(b.latitude))
        * math.sin(d_lon / 2) ** 2
    )
    return radius * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def zip_to_coordinates(zip_code: str | None) -> Coordinates | None:
    """Approximate coordinates for a ZIP, or None when its prefix is unknown."""
    if not isinstance(zip_code, str):
        return None
    zip_code = zip_code.strip()
    if len(zip_code) < 3:
        return None
    return ZIP_PREFIX_COORDINATES.get(zip_code[:3])


def distance_between_zips(
    zip_a: str | None,
    zip_b: str | None,
    radius: float = EARTH_RADIUS_MILES,
) -> float | None:
    coords_a = zip_to_coordinates(zip_a)
    coords_b = zip_to_coordinates(zip_b)
    if coords_a is None or coords_b is None:
        logger.debug("zip_coordinates_missing", zip_a=zip_a, zip_b=zip_b)
        return None
    return haversine_miles(coords_a, coords_b, radius)


def format_distance(miles: float) -> str:
    if miles < 1:
        return "Less than 1 mile away"
    if miles < 10:
        return f"{miles:.1f} miles away"
    return f"{round(miles)} miles away"
