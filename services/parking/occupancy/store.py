"""
Parking lot store: the persistence capability the occupancy core calls into.

FacilityStore is the protocol; SAFacilityStore is the production
implementation over an async SQLAlchemy session. Tests substitute an
in-memory store (tests/helpers/fake_store.py).

Transactions:
  - transaction() wraps a read-modify-write. It commits when the block
    exits cleanly and rolls back on any exception, so slot creation and
    slot batch updates are each all-or-nothing.
  - find_facility_by_name(for_update=True) takes a row lock on the lot
    (SELECT ... FOR UPDATE on PostgreSQL) so concurrent reconciles of the
    same lot serialise instead of losing updates.

Store errors (SQLAlchemyError, connection OSError) are logged and raised
as PersistenceFailure with the cause chained.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any, Protocol, runtime_checkable
from uuid import uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from services.parking.db.models import ParkingLot, Slot as SlotRow
from services.parking.occupancy.errors import PersistenceFailure
from services.parking.occupancy.types import Facility, FacilityAttributes, Slot

logger = logging.getLogger(__name__)

_STORE_ERRORS = (SQLAlchemyError, OSError)
_FAILURE_MESSAGE = "The parking store rejected the operation."


@runtime_checkable
class FacilityStore(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[None]: ...
    async def find_facility_by_name(self, name: str, *, for_update: bool = False) -> Facility | None: ...
    async def list_facilities(self, *, include_slots: bool = True) -> list[Facility]: ...
    async def create_facility(
        self, attrs: FacilityAttributes, slots: list[tuple[int, bool]]
    ) -> Facility: ...
    async def update_slots(self, facility_id: str, changes: list[tuple[str, bool]]) -> None: ...
    async def delete_facility(self, facility_id: str) -> None: ...


def _to_facility(lot: Any, include_slots: bool = True) -> Facility:
    """Detach an ORM ParkingLot (and its loaded slots) into domain records."""
    slots = []
    if include_slots:
        slots = [
            Slot(
                id=row.id,
                slot_number=row.slotNumber,
                occupied=bool(row.status),
                parking_lot_id=lot.id,
            )
            for row in lot.slots
        ]
    return Facility(
        id=lot.id,
        name=lot.name,
        location=lot.location,
        latitude=lot.latitude,
        longitude=lot.longitude,
        total_slots=lot.totalSlots,
        slots=slots,
    )


class SAFacilityStore:
    """FacilityStore backed by one AsyncSession (one per request)."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self):
        try:
            yield
            await self.session.commit()
        except _STORE_ERRORS as exc:
            await self.session.rollback()
            logger.exception("Store transaction failed, rolled back")
            raise PersistenceFailure(_FAILURE_MESSAGE) from exc
        except BaseException:
            await self.session.rollback()
            raise

    async def _execute(self, stmt):
        try:
            return await self.session.execute(stmt)
        except _STORE_ERRORS as exc:
            logger.exception("Store statement failed: %s", type(exc).__name__)
            raise PersistenceFailure(_FAILURE_MESSAGE) from exc

    async def find_facility_by_name(self, name: str, *, for_update: bool = False) -> Facility | None:
        stmt = (
            select(ParkingLot)
            .options(selectinload(ParkingLot.slots))
            .where(ParkingLot.name == name)
        )
        if for_update:
            stmt = stmt.with_for_update(of=ParkingLot)
        result = await self._execute(stmt)
        lot = result.scalars().first()
        if lot is None:
            return None
        return _to_facility(lot)

    async def list_facilities(self, *, include_slots: bool = True) -> list[Facility]:
        stmt = select(ParkingLot).order_by(ParkingLot.name)
        if include_slots:
            stmt = stmt.options(selectinload(ParkingLot.slots))
        result = await self._execute(stmt)
        return [_to_facility(lot, include_slots) for lot in result.scalars().all()]

    async def create_facility(
        self, attrs: FacilityAttributes, slots: list[tuple[int, bool]]
    ) -> Facility:
        lot = ParkingLot(
            id=str(uuid4()),
            name=attrs.name,
            location=attrs.location,
            latitude=attrs.latitude,
            longitude=attrs.longitude,
            totalSlots=attrs.total_slots,
            slots=[
                SlotRow(id=str(uuid4()), slotNumber=number, status=occupied)
                for number, occupied in slots
            ],
        )
        self.session.add(lot)
        try:
            await self.session.flush()
        except _STORE_ERRORS as exc:
            logger.exception("Parking lot insert failed name=%s", attrs.name)
            raise PersistenceFailure(_FAILURE_MESSAGE) from exc
        return _to_facility(lot)

    async def update_slots(self, facility_id: str, changes: list[tuple[str, bool]]) -> None:
        # One UPDATE per target flag keeps the batch at two statements max
        to_fill = [slot_id for slot_id, occupied in changes if occupied]
        to_free = [slot_id for slot_id, occupied in changes if not occupied]
        for slot_ids, occupied in ((to_fill, True), (to_free, False)):
            if not slot_ids:
                continue
            await self._execute(
                update(SlotRow)
                .where(SlotRow.parkingLotId == facility_id, SlotRow.id.in_(slot_ids))
                .values(status=occupied)
            )

    async def delete_facility(self, facility_id: str) -> None:
        # Explicit slot delete so backends without FK enforcement still cascade
        await self._execute(delete(SlotRow).where(SlotRow.parkingLotId == facility_id))
        await self._execute(delete(ParkingLot).where(ParkingLot.id == facility_id))
