"""
Aggregation Engine

Grouped and scalar aggregates over one submission table within a window.

Every public method is a coroutine that runs its query in a worker thread
with its own session, so a report can fan out all of its sub-queries with
asyncio.gather and join them before composing the response.

Group ordering is count descending, then group value ascending (missing
values last), which keeps equal-count groups in a stable order.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, desc
from sqlalchemy.orm import Session, sessionmaker

from .stats import as_number
from .windows import Window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupCount:
    """One bucket of a grouped count."""
    value: Optional[str]
    count: int


@dataclass(frozen=True)
class GroupTotal:
    """One bucket of a grouped sum, with its member count."""
    value: Optional[str]
    total: float
    count: int


@dataclass(frozen=True)
class CrossTabCell:
    """Count of records sharing one (first, second) pair of values."""
    first: Optional[str]
    second: Optional[str]
    count: int


@dataclass(frozen=True)
class NumericStats:
    total: float
    average: float
    minimum: float
    maximum: float
    count: int


def _label(value: Any) -> Optional[str]:
    if isinstance(value, Enum):
        return value.value
    return value


def _value_key(value: Optional[str]):
    # Missing values sort after every real value
    return (value is None, value or "")


class AggregationEngine:
    """
    Aggregates over a single submission table.

    Usage:
        engine = AggregationEngine(SessionLocal, CrisisCallDB)
        by_county = await engine.group_count(window, "call_by_county")
    """

    def __init__(self, session_factory: sessionmaker, model):
        self.session_factory = session_factory
        self.model = model

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _column(self, field: str):
        column = getattr(self.model, field, None)
        if column is None:
            raise ValueError(f"{self.model.__name__} has no field '{field}'")
        return column

    def _filters(
        self,
        window: Optional[Window] = None,
        created_before: Optional[datetime] = None,
        equals: Optional[Dict[str, Any]] = None,
    ) -> list:
        criteria = []
        if window is not None:
            criteria.append(self.model.created_at >= window.start)
            criteria.append(self.model.created_at < window.end)
        if created_before is not None:
            criteria.append(self.model.created_at < created_before)
        for field, value in (equals or {}).items():
            criteria.append(self._column(field) == value)
        return criteria

    def _execute(self, query_fn: Callable[[Session], Any]) -> Any:
        db = self.session_factory()
        try:
            return query_fn(db)
        finally:
            db.close()

    async def _submit(self, query_fn: Callable[[Session], Any]) -> Any:
        return await asyncio.to_thread(self._execute, query_fn)

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    async def count(
        self,
        window: Optional[Window] = None,
        created_before: Optional[datetime] = None,
        **equals: Any,
    ) -> int:
        """Number of records matching the window and equality filters."""
        criteria = self._filters(window, created_before, equals)

        def query(db: Session) -> int:
            return db.query(func.count(self.model.id)).filter(*criteria).scalar() or 0

        return await self._submit(query)

    async def group_count(
        self,
        window: Window,
        field: str,
        skip_null: bool = False,
        limit: Optional[int] = None,
    ) -> List[GroupCount]:
        """Count records per value of a categorical field."""
        column = self._column(field)
        criteria = self._filters(window)
        if skip_null:
            criteria.append(column.isnot(None))

        def query(db: Session):
            return db.query(column, func.count(self.model.id)).filter(*criteria).group_by(column).all()

        rows = await self._submit(query)
        groups = sorted(
            (GroupCount(value=_label(value), count=count) for value, count in rows),
            key=lambda g: (-g.count, _value_key(g.value)),
        )
        return groups[:limit] if limit else groups

    async def group_sum(
        self,
        window: Window,
        field: str,
        sum_field: str,
        skip_null: bool = True,
    ) -> List[GroupTotal]:
        """Sum a numeric field per value of a categorical field."""
        column = self._column(field)
        summed = self._column(sum_field)
        criteria = self._filters(window)
        if skip_null:
            criteria.append(column.isnot(None))

        def query(db: Session):
            return db.query(
                column,
                func.coalesce(func.sum(summed), 0),
                func.count(self.model.id),
            ).filter(*criteria).group_by(column).all()

        rows = await self._submit(query)
        return sorted(
            (GroupTotal(value=_label(value), total=as_number(total), count=count) for value, total, count in rows),
            key=lambda g: (-g.total, -g.count, _value_key(g.value)),
        )

    async def cross_tab(self, window: Window, field_a: str, field_b: str) -> List[CrossTabCell]:
        """
        Count records per (field_a, field_b) pair.

        Sorted by field_a ascending, then count descending within each
        field_a bucket, then field_b ascending.
        """
        column_a = self._column(field_a)
        column_b = self._column(field_b)
        criteria = self._filters(window)

        def query(db: Session):
            return db.query(
                column_a, column_b, func.count(self.model.id)
            ).filter(*criteria).group_by(column_a, column_b).all()

        rows = await self._submit(query)
        return sorted(
            (CrossTabCell(first=_label(a), second=_label(b), count=count) for a, b, count in rows),
            key=lambda c: (_value_key(c.first), -c.count, _value_key(c.second)),
        )

    # -------------------------------------------------------------------------
    # Numeric aggregates
    # -------------------------------------------------------------------------

    async def numeric_stats(self, window: Window, field: str) -> NumericStats:
        """Sum, average, min, max and record count of a numeric field."""
        column = self._column(field)
        criteria = self._filters(window)

        def query(db: Session):
            return db.query(
                func.sum(column),
                func.avg(column),
                func.min(column),
                func.max(column),
                func.count(self.model.id),
            ).filter(*criteria).one()

        total, average, minimum, maximum, count = await self._submit(query)
        return NumericStats(
            total=as_number(total),
            average=as_number(average),
            minimum=as_number(minimum),
            maximum=as_number(maximum),
            count=count or 0,
        )

    async def _scalar(self, aggregate, window: Window, field: str):
        column = self._column(field)
        criteria = self._filters(window)

        def query(db: Session):
            return db.query(aggregate(column)).filter(*criteria).scalar()

        return as_number(await self._submit(query))

    async def sum_stat(self, window: Window, field: str):
        """Sum of a numeric field; 0 when no records match."""
        return await self._scalar(func.sum, window, field)

    async def avg_stat(self, window: Window, field: str):
        return await self._scalar(func.avg, window, field)

    async def min_stat(self, window: Window, field: str):
        return await self._scalar(func.min, window, field)

    async def max_stat(self, window: Window, field: str):
        return await self._scalar(func.max, window, field)

    # -------------------------------------------------------------------------
    # Record lookups
    # -------------------------------------------------------------------------

    async def latest_created_at(self, **equals: Any) -> datetime:
        """
        Creation time of the newest matching record.

        Raises LookupError when nothing matches, so callers racing several
        lookups treat an empty table as an unsuccessful attempt.
        """
        criteria = self._filters(equals=equals)

        def query(db: Session):
            return db.query(self.model.created_at).filter(*criteria).order_by(
                desc(self.model.created_at)
            ).first()

        row = await self._submit(query)
        if row is None:
            raise LookupError(f"No {self.model.__tablename__} records")
        return row[0]

    async def find_recent(
        self,
        window: Window,
        fields: Sequence[str],
        limit: int,
    ) -> List[Dict[str, Any]]:
        """Newest records in the window as plain dicts of the requested fields."""
        columns = [self._column(field) for field in fields]
        criteria = self._filters(window)

        def query(db: Session):
            return db.query(*columns).filter(*criteria).order_by(
                desc(self.model.created_at)
            ).limit(limit).all()

        rows = await self._submit(query)
        return [
            {field: _label(value) for field, value in zip(fields, row)}
            for row in rows
        ]

    async def created_timestamps(self, window: Window) -> List[datetime]:
        criteria = self._filters(window)

        def query(db: Session):
            return db.query(self.model.created_at).filter(*criteria).all()

        return [row[0] for row in await self._submit(query)]


async def first_successful(awaitables: Iterable[Awaitable[Any]]) -> Optional[Any]:
    """
    Race several lookups; return the first result that completes successfully.

    A lookup that raises (including LookupError for "nothing found") or
    returns None does not win. Losers are cancelled. Returns None when every
    lookup fails.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    pending = set(tasks)
    try:
        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                if task.cancelled():
                    continue
                error = task.exception()
                if error is not None:
                    logger.debug(f"Lookup lost the race: {error!r}")
                    continue
                if task.result() is not None:
                    return task.result()
        return None
    finally:
        for task in pending:
            task.cancel()
