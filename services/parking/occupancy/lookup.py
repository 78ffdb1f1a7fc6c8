"""
Single-lot lookups: list, nearby, lot details, delete.

Thin wrappers over the store. Nearby and lot details hand distance math to
ProximitySearch; lot details derive counters from the slot collection.
"""

from __future__ import annotations

import logging
from typing import Any

from services.parking.occupancy.errors import InvalidRequest, NotFound
from services.parking.occupancy.proximity import ProximitySearch, is_number, rounded_distance
from services.parking.occupancy.store import FacilityStore
from services.parking.occupancy.types import Facility, LotDetails

logger = logging.getLogger(__name__)


def _require_user_location(user_lat: Any, user_lon: Any) -> None:
    if not is_number(user_lat) or not is_number(user_lon):
        raise InvalidRequest("User location (latitude, longitude) is required")


class ParkingLotLookup:
    def __init__(self, store: FacilityStore, proximity: ProximitySearch) -> None:
        self.store = store
        self.proximity = proximity

    async def list_facilities(self) -> list[Facility]:
        return await self.store.list_facilities(include_slots=True)

    async def find_nearby(self, user_lat: Any, user_lon: Any) -> list[Facility]:
        _require_user_location(user_lat, user_lon)
        facilities = await self.store.list_facilities(include_slots=False)
        return self.proximity.find_nearby(user_lat, user_lon, facilities)

    async def lot_details(
        self,
        name: str | None,
        user_lat: float | None = None,
        user_lon: float | None = None,
    ) -> LotDetails:
        """Derived counters for one lot; distance only when both coordinates are given."""
        if not name:
            raise InvalidRequest("parkingLotName is required")

        facility = await self.store.find_facility_by_name(name)
        if facility is None:
            raise NotFound("Parking lot not found")

        distance = None
        if user_lat is not None and user_lon is not None:
            _require_user_location(user_lat, user_lon)
            distance = rounded_distance(self.proximity.distance_km(user_lat, user_lon, facility))

        return LotDetails(
            parking_lot_name=facility.name,
            latitude=facility.latitude,
            longitude=facility.longitude,
            counters=facility.counters(),
            distance_km=distance,
        )

    async def delete_facility(self, name: str) -> None:
        """Delete a lot and, by cascade, all of its slots."""
        async with self.store.transaction():
            facility = await self.store.find_facility_by_name(name, for_update=True)
            if facility is None:
                raise NotFound(f"Parking lot '{name}' not found")
            await self.store.delete_facility(facility.id)

        logger.info("parking_lot_deleted name=%s slots=%d", name, len(facility.slots))
