"""Repository for lifecycles and their events."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from uuid import UUID

from huautla.db import connection
from huautla.errors import NotFoundError
from huautla.merge import Relation, Row, merge_rows
from huautla.models import Lifecycle, ReportAttrs
from huautla.repos.event_repo import EventRepo
from huautla.repos.rows import row_to_event, row_to_strain, row_to_substrate
from huautla.sql import STATEMENTS
from huautla.tracking import track

LIFECYCLE_PARAMS = ("lifecycle-id", "strain-id", "grain-id", "bulk-id", "eventtype-id")

EVENT_RELATION = Relation("events", key="event_uuid", decode=partial(row_to_event, prefix="event"))


def _row_to_lifecycle(row: Row) -> Lifecycle:
    """Convert a database row to a Lifecycle model, events left empty."""
    return Lifecycle(
        id=row["uuid"],
        name=row["name"],
        location=row["location"],
        strain_cost=row["strain_cost"],
        grain_cost=row["grain_cost"],
        bulk_cost=row["bulk_cost"],
        yield_=row["yield"],
        count=row["headcount"],
        gross=row["gross"],
        mtime=row["mtime"],
        ctime=row["ctime"],
        strain=row_to_strain(row),
        grain_substrate=row_to_substrate(row, "grain"),
        bulk_substrate=row_to_substrate(row, "bulk"),
    )


def merge_lifecycle_index(rows: Iterable[Row]) -> list[Lifecycle]:
    """Fold lifecycle rows, one per event, into lifecycles with bare events."""
    return merge_rows(rows, key="uuid", decode=_row_to_lifecycle, relations=(EVENT_RELATION,))


class LifecycleRepo:
    """Lifecycle reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["lifecycle"]
        self.events = EventRepo(sql)

    async def index(self, cid: str | None = None) -> list[Lifecycle]:
        """
        List every lifecycle with its events, without notes or photos.

        Returns:
            Lifecycles newest first, events newest first
        """
        with track("LifecycleRepo.index", cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["index"])
            return merge_lifecycle_index(rows)

    async def select(self, params: ReportAttrs, cid: str | None = None) -> list[Lifecycle]:
        """
        Select lifecycles matching report filters, fully loaded.

        Args:
            params: at least one of lifecycle-id, strain-id, grain-id,
                bulk-id or eventtype-id
            cid: Correlation id for logging

        Raises:
            ReportParamError: none of the supported filters is set
        """
        with track("LifecycleRepo.select", id=params, cid=cid):
            params.require(*LIFECYCLE_PARAMS)
            async with connection() as conn:
                rows = await conn.fetch(self.sql["select"], *(params.get(name) for name in LIFECYCLE_PARAMS))
            lifecycles = merge_rows(rows, key="uuid", decode=_row_to_lifecycle)
            for lifecycle in lifecycles:
                lifecycle.events = await self.events.list_for_observable(lifecycle.id, cid=cid)
            return lifecycles

    async def get(self, lifecycle_id: UUID, cid: str | None = None) -> Lifecycle:
        """
        Get one lifecycle, fully loaded.

        Raises:
            NotFoundError: no lifecycle has this id
        """
        lifecycles = await self.select(ReportAttrs(lifecycle_id=lifecycle_id), cid=cid)
        if not lifecycles:
            raise NotFoundError(f"lifecycle not found: {lifecycle_id}")
        return lifecycles[0]
