"""
Parking lot endpoints.

Endpoints:
  GET    /api/parking-lots              -- every lot with its slots
  POST   /api/nearby-parking-lots       -- lots within the proximity radius of the user
  POST   /api/lot-details               -- derived occupancy counters (+ distance) for one lot
  PUT    /api/update-parking-lot        -- sensor batch: create the lot or reconcile its slots
  DELETE /api/parking-lots/{name}       -- delete a lot and its slots

Field names are camelCase on the wire. Domain errors raised by the
occupancy core are rendered by the exception handlers in main.py.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict

from services.parking.occupancy.lookup import ParkingLotLookup
from services.parking.occupancy.reconciler import OccupancyReconciler
from services.parking.routers._deps import get_lookup, get_reconciler

router = APIRouter(prefix="/api", tags=["parking-lots"])


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", str(uuid.uuid4()))


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class NearbyRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    userLat: float | None = None
    userLon: float | None = None


class LotDetailsRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    parkingLotName: str | None = None
    userLat: float | None = None
    userLon: float | None = None


class UpdateParkingLotRequest(BaseModel):
    """Sensor batch. Creation fields are only required for an unseen name."""

    model_config = ConfigDict(allow_inf_nan=False)

    name: str | None = None
    location: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    totalSlots: int | None = None
    filledSlots: list[int] | None = None
    freeSlots: list[int] | None = None


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/parking-lots")
async def list_parking_lots(
    request: Request,
    lookup: ParkingLotLookup = Depends(get_lookup),
) -> dict:
    facilities = await lookup.list_facilities()
    return {
        "success": True,
        "data": [facility.to_dict() for facility in facilities],
        "requestId": _request_id(request),
    }


@router.post("/nearby-parking-lots")
async def nearby_parking_lots(
    body: NearbyRequest,
    request: Request,
    lookup: ParkingLotLookup = Depends(get_lookup),
) -> dict:
    nearby = await lookup.find_nearby(body.userLat, body.userLon)
    return {
        "success": True,
        "data": [facility.to_dict(include_slots=False) for facility in nearby],
        "requestId": _request_id(request),
    }


@router.post("/lot-details")
async def lot_details(
    body: LotDetailsRequest,
    request: Request,
    lookup: ParkingLotLookup = Depends(get_lookup),
) -> dict:
    details = await lookup.lot_details(body.parkingLotName, body.userLat, body.userLon)
    return {
        "success": True,
        "data": details.to_dict(),
        "requestId": _request_id(request),
    }


@router.put("/update-parking-lot")
async def update_parking_lot(
    body: UpdateParkingLotRequest,
    request: Request,
    response: Response,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
) -> dict:
    result = await reconciler.reconcile(
        name=body.name,
        location=body.location,
        latitude=body.latitude,
        longitude=body.longitude,
        total_slots=body.totalSlots,
        filled_slots=body.filledSlots,
        free_slots=body.freeSlots,
    )

    if result.created:
        response.status_code = 201
        message = "Parking lot created successfully."
    else:
        message = "Parking lot and slot statuses updated successfully."

    counters = result.facility.counters()
    return {
        "success": True,
        "message": message,
        "data": {
            "parkingLot": result.facility.to_dict(),
            "availableSlots": counters.available_slots,
            "filledSlots": counters.filled_slots,
        },
        "requestId": _request_id(request),
    }


@router.delete("/parking-lots/{name}")
async def delete_parking_lot(
    name: str,
    request: Request,
    lookup: ParkingLotLookup = Depends(get_lookup),
) -> dict:
    await lookup.delete_facility(name)
    return {
        "success": True,
        "message": f"Parking lot '{name}' deleted successfully",
        "requestId": _request_id(request),
    }
