"""
Domain records for parking lots and their slots.

These are plain dataclasses detached from any session: stores convert
their rows into them, so nothing downstream can trigger a lazy load or
hold on to a stale ORM instance between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Slot:
    """A single numbered parking slot. occupied=True means filled."""

    id: str
    slot_number: int
    occupied: bool
    parking_lot_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slotNumber": self.slot_number,
            "status": self.occupied,
            "parkingLotId": self.parking_lot_id,
        }


@dataclass(frozen=True)
class OccupancyCounters:
    total_slots: int
    filled_slots: int

    @property
    def available_slots(self) -> int:
        return self.total_slots - self.filled_slots


@dataclass
class Facility:
    """A parking lot, identified by its unique name, owning its slots."""

    id: str
    name: str
    location: str
    latitude: float
    longitude: float
    total_slots: int
    slots: list[Slot] = field(default_factory=list)

    def counters(self) -> OccupancyCounters:
        """Derive occupancy from the slot collection, not the declared total."""
        filled = sum(1 for slot in self.slots if slot.occupied)
        return OccupancyCounters(total_slots=len(self.slots), filled_slots=filled)

    def occupancy(self) -> list[bool]:
        """Occupancy flags ordered by slot number."""
        return [slot.occupied for slot in sorted(self.slots, key=lambda s: s.slot_number)]

    def to_dict(self, include_slots: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "totalSlots": self.total_slots,
        }
        if include_slots:
            data["slots"] = [
                slot.to_dict() for slot in sorted(self.slots, key=lambda s: s.slot_number)
            ]
        return data


@dataclass(frozen=True)
class FacilityAttributes:
    """Creation attributes for a new parking lot."""

    name: str
    location: str
    latitude: float
    longitude: float
    total_slots: int


@dataclass
class ReconcileResult:
    facility: Facility
    created: bool


@dataclass(frozen=True)
class LotDetails:
    parking_lot_name: str
    latitude: float
    longitude: float
    counters: OccupancyCounters
    distance_km: float | None = None

    def to_dict(self) -> dict:
        data = {
            "parkingLotName": self.parking_lot_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "totalSlots": self.counters.total_slots,
            "availableSlots": self.counters.available_slots,
            "filledSlots": self.counters.filled_slots,
        }
        if self.distance_km is not None:
            data["distance"] = self.distance_km
        return data
