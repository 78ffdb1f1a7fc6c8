"""
Occupancy reconciliation: apply a batch of slot-status changes to a
parking lot, creating the lot on first sight.

State machine per call, keyed on the lot name:

  Absent  -> Created   name, location, latitude, longitude, total_slots
                       required; filled/free must be lists. Slots
                       1..total_slots are generated, slot n filled iff n is
                       in filled_slots. Numbers in neither list start free.
  Present -> Updated   for each existing slot: in filled_slots -> filled,
                       else in free_slots -> free, else unchanged.

Policy:
  - Fill wins when a number appears in both lists (checked first).
  - Numbers that match no existing slot are ignored, not rejected.
  - total_slots (and the other creation attributes) are ignored on update;
    a lot is never resized.
  - The lookup, merge and write happen inside one store transaction with
    the lot row locked, so the batch lands whole or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from services.parking.occupancy.errors import InvalidRequest
from services.parking.occupancy.proximity import is_number
from services.parking.occupancy.store import FacilityStore
from services.parking.occupancy.types import Facility, FacilityAttributes, ReconcileResult

logger = logging.getLogger(__name__)

_CREATE_FIELDS_MESSAGE = (
    "Invalid request. Ensure name, location, latitude, longitude, totalSlots, "
    "filledSlots, and freeSlots are provided."
)

# Upper bound on slots per lot; creation materialises every slot row up front
MAX_TOTAL_SLOTS = 10_000


def _slot_numbers(values: Any, field: str, *, required: bool) -> set[int]:
    """Collect the integer slot numbers of a list field.

    Non-integer entries are dropped along with out-of-range ones; only the
    container itself is validated.
    """
    if values is None:
        if required:
            raise InvalidRequest(_CREATE_FIELDS_MESSAGE)
        return set()
    if not isinstance(values, (list, tuple)):
        raise InvalidRequest(f"{field} must be a list of slot numbers.")
    return {v for v in values if isinstance(v, int) and not isinstance(v, bool)}


class OccupancyReconciler:
    """Create-or-update a parking lot's slot set from a sensor batch."""

    def __init__(self, store: FacilityStore) -> None:
        self.store = store

    async def reconcile(
        self,
        *,
        name: str | None,
        location: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        total_slots: int | None = None,
        filled_slots: Iterable[int] | None = None,
        free_slots: Iterable[int] | None = None,
    ) -> ReconcileResult:
        if not isinstance(name, str) or not name:
            raise InvalidRequest(_CREATE_FIELDS_MESSAGE)

        async with self.store.transaction():
            existing = await self.store.find_facility_by_name(name, for_update=True)
            if existing is None:
                facility = await self._create(
                    FacilityAttributes(
                        name=name,
                        location=location,
                        latitude=latitude,
                        longitude=longitude,
                        total_slots=total_slots,
                    ),
                    filled_slots,
                    free_slots,
                )
                return ReconcileResult(facility=facility, created=True)

            facility = await self._update(existing, filled_slots, free_slots, total_slots)
            return ReconcileResult(facility=facility, created=False)

    async def _create(
        self,
        attrs: FacilityAttributes,
        filled_slots: Any,
        free_slots: Any,
    ) -> Facility:
        if (
            not isinstance(attrs.location, str)
            or not attrs.location
            or not is_number(attrs.latitude)
            or not is_number(attrs.longitude)
            or not isinstance(attrs.total_slots, int)
            or isinstance(attrs.total_slots, bool)
        ):
            raise InvalidRequest(_CREATE_FIELDS_MESSAGE)
        if attrs.total_slots < 0:
            raise InvalidRequest("totalSlots must not be negative.")
        if attrs.total_slots > MAX_TOTAL_SLOTS:
            raise InvalidRequest(f"totalSlots must not exceed {MAX_TOTAL_SLOTS}.")

        filled = _slot_numbers(filled_slots, "filledSlots", required=True)
        # free_slots only matters for validation here: unlisted slots start free anyway
        _slot_numbers(free_slots, "freeSlots", required=True)

        slots = [(number, number in filled) for number in range(1, attrs.total_slots + 1)]
        facility = await self.store.create_facility(attrs, slots)

        logger.info(
            "parking_lot_created name=%s slots=%d filled=%d",
            facility.name,
            len(facility.slots),
            facility.counters().filled_slots,
        )
        return facility

    async def _update(
        self,
        facility: Facility,
        filled_slots: Any,
        free_slots: Any,
        total_slots: Any,
    ) -> Facility:
        filled = _slot_numbers(filled_slots, "filledSlots", required=False)
        free = _slot_numbers(free_slots, "freeSlots", required=False)

        if total_slots is not None and total_slots != len(facility.slots):
            logger.warning(
                "parking_lot_resize_ignored name=%s current=%d requested=%s",
                facility.name,
                len(facility.slots),
                total_slots,
            )

        changes: list[tuple[str, bool]] = []
        for slot in facility.slots:
            if slot.slot_number in filled:
                occupied = True
            elif slot.slot_number in free:
                occupied = False
            else:
                continue
            if occupied != slot.occupied:
                changes.append((slot.id, occupied))
                slot.occupied = occupied

        if changes:
            await self.store.update_slots(facility.id, changes)

        known = {slot.slot_number for slot in facility.slots}
        ignored = (filled | free) - known
        if ignored:
            logger.debug(
                "parking_lot_unknown_slots name=%s ignored=%s",
                facility.name,
                sorted(ignored),
            )

        logger.info(
            "parking_lot_updated name=%s changed=%d ignored=%d",
            facility.name,
            len(changes),
            len(ignored),
        )
        return facility
