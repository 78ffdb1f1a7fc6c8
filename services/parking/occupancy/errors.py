"""Exception hierarchy for occupancy operations.

Each error carries the envelope code and HTTP status the transport layer
renders it with; the core never catches its own errors.
"""

from __future__ import annotations


class OccupancyError(Exception):
    """Base exception for all occupancy errors."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequest(OccupancyError):
    """Missing or malformed request fields."""

    code = "INVALID_REQUEST"
    status_code = 400


class NotFound(OccupancyError):
    """No parking lot with the requested name."""

    code = "NOT_FOUND"
    status_code = 404


class PersistenceFailure(OccupancyError):
    """The store rejected a read or write. Nothing was persisted."""

    code = "PERSISTENCE_FAILURE"
    status_code = 500
