"""
SQLAlchemy DeclarativeBase models for parking lots and slots.

Column names use camelCase to match the PostgreSQL column names of the
existing Prisma-managed schema (ParkingLot / Slot). SA does NOT convert
attribute names, so Python attributes are camelCase as well.

Slots are owned by their lot: the FK cascades on delete in the database
and the relationship cascades delete-orphan in the ORM.
"""

import uuid as _uuid

from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class ParkingLot(Base):
    __tablename__ = "parking_lots"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(_uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, unique=True)
    location: Mapped[str] = mapped_column(String)
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)
    totalSlots: Mapped[int] = mapped_column(Integer)

    slots: Mapped[list["Slot"]] = relationship(
        back_populates="parkingLot",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Slot.slotNumber",
    )


class Slot(Base):
    __tablename__ = "slots"
    __table_args__ = (UniqueConstraint("parkingLotId", "slotNumber"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(_uuid.uuid4()))
    slotNumber: Mapped[int] = mapped_column(Integer)
    # True = filled, False = free
    status: Mapped[bool] = mapped_column(Boolean, default=False)
    parkingLotId: Mapped[str] = mapped_column(
        String, ForeignKey("parking_lots.id", ondelete="CASCADE"), index=True
    )

    parkingLot: Mapped["ParkingLot"] = relationship(back_populates="slots")
