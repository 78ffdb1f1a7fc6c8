"""
MockSASession -- test helper standing in for an AsyncSession so the
SQLAlchemy parking store can be tested without a database.

Each execute() pops the next queued result:

    session = MockSASession()
    session.returns_one(lot)              # next execute -> scalars().first()
    session.returns_many([lot1, lot2])    # next execute -> scalars().all()
    session.returns_none()                # next execute -> scalars().first() = None
    session.raises(OperationalError(...)) # next execute raises

Chain for sequential calls:
    session.returns_one(lot).returns_rowcount(1)

Assert via:
    session.mock.execute.assert_called_once()
    session.mock.commit.assert_called_once()
    session.statements  # compiled SQL of every executed statement
"""

from __future__ import annotations

from collections import deque
from typing import Any
from unittest.mock import AsyncMock, MagicMock

from sqlalchemy.dialects import postgresql


class _ScalarsResult:
    """Mock for result.scalars() return value."""

    def __init__(self, items: list[Any] | None, single: Any | None = None):
        self._items = items
        self._single = single

    def all(self) -> list[Any]:
        return self._items if self._items is not None else []

    def first(self) -> Any | None:
        if self._single is not None:
            return self._single
        if self._items:
            return self._items[0]
        return None


class _ExecuteResult:
    """Mock for session.execute() return value."""

    def __init__(
        self,
        *,
        scalars_items: list[Any] | None = None,
        scalars_single: Any | None = None,
        rowcount: int | None = None,
    ):
        self._scalars_items = scalars_items
        self._scalars_single = scalars_single
        self._rowcount = rowcount

    def scalars(self) -> _ScalarsResult:
        return _ScalarsResult(self._scalars_items, self._scalars_single)

    @property
    def rowcount(self) -> int:
        return self._rowcount if self._rowcount is not None else 0


class MockSASession:
    """
    AsyncMock-backed session with a queue of results (or errors) for
    sequential execute() calls.
    """

    def __init__(self) -> None:
        self._queue: deque[_ExecuteResult | BaseException] = deque()
        self.executed: list[Any] = []
        self.mock = AsyncMock()
        self.mock.commit = AsyncMock()
        self.mock.rollback = AsyncMock()
        self.mock.close = AsyncMock()
        self.mock.flush = AsyncMock()
        self.mock.add = MagicMock()

        async def _execute_side_effect(stmt, *args, **kwargs):
            self.executed.append(stmt)
            if self._queue:
                nxt = self._queue.popleft()
                if isinstance(nxt, BaseException):
                    raise nxt
                return nxt
            # Default: empty result
            return _ExecuteResult()

        self.mock.execute = AsyncMock(side_effect=_execute_side_effect)

    @property
    def statements(self) -> list[str]:
        """Executed statements compiled for PostgreSQL with inline params."""
        return [
            str(stmt.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))
            for stmt in self.executed
        ]

    def returns_one(self, obj: Any) -> MockSASession:
        """Next execute() call returns this single object via scalars().first()."""
        self._queue.append(_ExecuteResult(scalars_single=obj))
        return self

    def returns_many(self, items: list[Any]) -> MockSASession:
        """Next execute() call returns these items via scalars().all()."""
        self._queue.append(_ExecuteResult(scalars_items=items))
        return self

    def returns_none(self) -> MockSASession:
        """Next execute() call returns None via scalars().first()."""
        self._queue.append(_ExecuteResult())
        return self

    def returns_rowcount(self, count: int) -> MockSASession:
        """Next execute() call returns this rowcount."""
        self._queue.append(_ExecuteResult(rowcount=count))
        return self

    def raises(self, exc: BaseException) -> MockSASession:
        """Next execute() call raises exc."""
        self._queue.append(exc)
        return self
