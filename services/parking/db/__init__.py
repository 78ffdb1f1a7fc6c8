"""
SQLAlchemy async database module.

Re-exports engine, session, and model utilities for the FastAPI service.
"""

from services.parking.db.engine import create_engine, create_tables, standalone_session
from services.parking.db.session import get_db
from services.parking.db.models import Base, ParkingLot, Slot

__all__ = [
    "create_engine",
    "create_tables",
    "standalone_session",
    "get_db",
    "Base",
    "ParkingLot",
    "Slot",
]
