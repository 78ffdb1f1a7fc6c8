"""
Occupancy core: parking lot / slot records, proximity search and the
create-or-reconcile algorithm for sensor batches.
"""

from services.parking.occupancy.errors import (
    InvalidRequest,
    NotFound,
    OccupancyError,
    PersistenceFailure,
)
from services.parking.occupancy.lookup import ParkingLotLookup
from services.parking.occupancy.proximity import ProximitySearch, haversine_km
from services.parking.occupancy.reconciler import OccupancyReconciler
from services.parking.occupancy.store import FacilityStore, SAFacilityStore
from services.parking.occupancy.types import (
    Facility,
    FacilityAttributes,
    LotDetails,
    OccupancyCounters,
    ReconcileResult,
    Slot,
)

__all__ = [
    "InvalidRequest",
    "NotFound",
    "OccupancyError",
    "PersistenceFailure",
    "ParkingLotLookup",
    "ProximitySearch",
    "haversine_km",
    "OccupancyReconciler",
    "FacilityStore",
    "SAFacilityStore",
    "Facility",
    "FacilityAttributes",
    "LotDetails",
    "OccupancyCounters",
    "ReconcileResult",
    "Slot",
]
