"""Shared dependencies for parking routers.

Each request gets its own store over its own session; components are
built per request around it and hold no state of their own.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from services.parking.db.session import get_db
from services.parking.occupancy.lookup import ParkingLotLookup
from services.parking.occupancy.proximity import ProximitySearch
from services.parking.occupancy.reconciler import OccupancyReconciler
from services.parking.occupancy.store import FacilityStore, SAFacilityStore


async def get_store(session: AsyncSession = Depends(get_db)) -> FacilityStore:
    return SAFacilityStore(session)


def get_proximity(request: Request) -> ProximitySearch:
    return ProximitySearch(radius_km=request.app.state.settings.proximity_radius_km)


def get_reconciler(store: FacilityStore = Depends(get_store)) -> OccupancyReconciler:
    return OccupancyReconciler(store)


def get_lookup(
    store: FacilityStore = Depends(get_store),
    proximity: ProximitySearch = Depends(get_proximity),
) -> ParkingLotLookup:
    return ParkingLotLookup(store, proximity)
