"""Repository for generations and their sources."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from uuid import UUID

from huautla.db import connection
from huautla.errors import NotFoundError
from huautla.merge import Relation, Row, merge_rows
from huautla.models import Generation, ReportAttrs
from huautla.repos.event_repo import EventRepo
from huautla.repos.rows import row_to_source, row_to_substrate
from huautla.sql import STATEMENTS
from huautla.tracking import track

GENERATION_PARAMS = ("generation-id", "strain-id", "plating-id", "liquid-id", "eventtype-id")

SOURCE_RELATION = Relation("sources", key="source_uuid", decode=row_to_source)


def _row_to_generation(row: Row) -> Generation:
    """Convert a database row to a Generation model, sources left empty."""
    return Generation(
        id=row["uuid"],
        plating_substrate=row_to_substrate(row, "plating"),
        liquid_substrate=row_to_substrate(row, "liquid"),
        mtime=row["mtime"],
        ctime=row["ctime"],
        dtime=row["dtime"],
    )


def merge_generations(rows: Iterable[Row]) -> list[Generation]:
    """Fold generation rows, one per source, into generations with sources."""
    return merge_rows(rows, key="uuid", decode=_row_to_generation, relations=(SOURCE_RELATION,))


class GenerationRepo:
    """Generation reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["generation"]
        self.events = EventRepo(sql)

    async def index(self, cid: str | None = None) -> list[Generation]:
        """
        List live (not deleted) generations with their sources.

        Events are not loaded; use select() or get() for those.

        Returns:
            Generations newest first
        """
        with track("GenerationRepo.index", cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["ndx"])
            return merge_generations(rows)

    async def select(self, params: ReportAttrs, cid: str | None = None) -> list[Generation]:
        """
        Select generations matching report filters, fully loaded.

        Args:
            params: at least one of generation-id, strain-id, plating-id,
                liquid-id or eventtype-id
            cid: Correlation id for logging

        Returns:
            Generations with sources and events (events with notes and photos)

        Raises:
            ReportParamError: none of the supported filters is set
        """
        with track("GenerationRepo.select", id=params, cid=cid):
            params.require(*GENERATION_PARAMS)
            async with connection() as conn:
                rows = await conn.fetch(self.sql["select"], *(params.get(name) for name in GENERATION_PARAMS))
            generations = merge_generations(rows)
            for generation in generations:
                generation.events = await self.events.list_for_observable(generation.id, cid=cid)
            return generations

    async def get(self, generation_id: UUID, cid: str | None = None) -> Generation:
        """
        Get one generation, fully loaded.

        Raises:
            NotFoundError: no generation has this id
        """
        generations = await self.select(ReportAttrs(generation_id=generation_id), cid=cid)
        if not generations:
            raise NotFoundError(f"generation not found: {generation_id}")
        return generations[0]
