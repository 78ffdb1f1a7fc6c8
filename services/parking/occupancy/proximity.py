"""
Proximity search: which parking lots lie within a radius of the user.

Haversine great-circle distance on a spherical Earth (R = 6371 km).
Coordinates are decimal degrees; distances come back in kilometres,
unrounded. Rounding is a presentation concern (lot details round to
DISTANCE_DECIMALS).
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from numbers import Real
from typing import Any

from services.parking.occupancy.types import Facility

logger = logging.getLogger(__name__)

# Earth radius in kilometres
_EARTH_RADIUS_KM = 6371.0

DEFAULT_RADIUS_KM = 10.0

# Decimal places used when a distance is surfaced to a client
DISTANCE_DECIMALS = 2


def is_number(value: Any) -> bool:
    """True for finite int/float coordinates; bools, NaN and infinities are rejected."""
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute haversine distance between two points in kilometres.

    Args:
        lat1, lon1: First point (decimal degrees)
        lat2, lon2: Second point (decimal degrees)

    Returns:
        Distance in kilometres.
    """
    lat1_r = math.radians(lat1)
    lat2_r = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return _EARTH_RADIUS_KM * c


class ProximitySearch:
    """Classify parking lots as near or not near a user location.

    Pure and stateless apart from the radius. Callers are responsible for
    validating that the user coordinates are present and numeric.
    """

    def __init__(self, radius_km: float = DEFAULT_RADIUS_KM) -> None:
        if radius_km <= 0:
            raise ValueError("radius_km must be positive")
        self.radius_km = radius_km

    def distance_km(self, user_lat: float, user_lon: float, facility: Facility) -> float:
        return haversine_km(user_lat, user_lon, facility.latitude, facility.longitude)

    def is_near(self, user_lat: float, user_lon: float, facility: Facility) -> bool:
        # Boundary is inclusive
        return self.distance_km(user_lat, user_lon, facility) <= self.radius_km

    def find_nearby(
        self,
        user_lat: float,
        user_lon: float,
        facilities: Iterable[Facility],
    ) -> list[Facility]:
        """Return the facilities within radius_km, in input order."""
        facilities = list(facilities)
        nearby = [f for f in facilities if self.is_near(user_lat, user_lon, f)]
        logger.info(
            "Proximity search: user=(%f,%f) radius=%.2fkm scanned=%d found=%d",
            user_lat,
            user_lon,
            self.radius_km,
            len(facilities),
            len(nearby),
        )
        return nearby

    def rank_by_distance(
        self,
        user_lat: float,
        user_lon: float,
        facilities: Iterable[Facility],
    ) -> list[tuple[Facility, float]]:
        """Nearby facilities paired with their distance, closest first."""
        scored = [(f, self.distance_km(user_lat, user_lon, f)) for f in facilities]
        return sorted(
            ((f, d) for f, d in scored if d <= self.radius_km),
            key=lambda pair: pair[1],
        )


def rounded_distance(distance_km: float) -> float:
    return round(distance_km, DISTANCE_DECIMALS)
