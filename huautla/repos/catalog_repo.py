"""Repository for leaf lookups: strains, substrates, event types."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from uuid import UUID

from huautla.db import connection
from huautla.errors import NotFoundError
from huautla.merge import Relation, Row, merge_rows
from huautla.models import EventType, Ingredient, ReportAttrs, Strain, StrainAttribute, Substrate
from huautla.repos.rows import row_to_attribute, row_to_event_type, row_to_ingredient, row_to_strain, row_to_substrate
from huautla.sql import STATEMENTS
from huautla.tracking import track

STRAIN_PARAMS = ("strain-id", "vendor-id")
SUBSTRATE_PARAMS = ("substrate-id", "vendor-id")


def merge_strains(rows: Iterable[Row]) -> list[Strain]:
    """Fold strain rows, one per attribute, into strains with attributes."""
    return merge_rows(
        rows,
        key="strain_uuid",
        decode=row_to_strain,
        relations=(Relation("attributes", key="attribute_uuid", decode=row_to_attribute),),
    )


def merge_substrates(rows: Iterable[Row]) -> list[Substrate]:
    return merge_rows(
        rows,
        key="substrate_uuid",
        decode=partial(row_to_substrate, prefix="substrate"),
        relations=(Relation("ingredients", key="ingredient_uuid", decode=row_to_ingredient),),
    )


class StrainRepo:
    """Strain reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["strain"]
        self.attribute_sql = sql["strainattribute"]

    async def select(self, params: ReportAttrs, cid: str | None = None) -> list[Strain]:
        """
        Select strains with their attributes.

        strain-id and vendor-id narrow the result; with neither set every
        strain is returned.

        Returns:
            Strains sorted by name, attributes sorted by name
        """
        with track("StrainRepo.select", id=params, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["select"], *(params.get(name) for name in STRAIN_PARAMS))
            return merge_strains(rows)

    async def get(self, strain_id: UUID, cid: str | None = None) -> Strain:
        """
        Get a strain with its attributes, sorted by attribute name.

        Raises:
            NotFoundError: no strain has this id
        """
        strains = await self.select(ReportAttrs(strain_id=strain_id), cid=cid)
        if not strains:
            raise NotFoundError(f"strain not found: {strain_id}")
        return strains[0]

    async def generated(self, generation_id: UUID, cid: str | None = None) -> Strain | None:
        """The strain isolated from a generation, or None if there is none yet."""
        with track("StrainRepo.generated", id=generation_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["generated"], generation_id)
            strains = merge_strains(rows)
            return strains[0] if strains else None

    async def list_attributes(self, strain_id: UUID, cid: str | None = None) -> list[StrainAttribute]:
        with track("StrainRepo.list_attributes", id=strain_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.attribute_sql["all"], strain_id)
            return [row_to_attribute(row) for row in rows]


class SubstrateRepo:
    """Substrate reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["substrate"]
        self.ingredient_sql = sql["ingredient"]

    async def select(self, params: ReportAttrs, cid: str | None = None) -> list[Substrate]:
        """
        Select substrates with their ingredients.

        Raises:
            ReportParamError: neither substrate-id nor vendor-id is set
        """
        with track("SubstrateRepo.select", id=params, cid=cid):
            params.require(*SUBSTRATE_PARAMS)
            async with connection() as conn:
                rows = await conn.fetch(self.sql["select"], *(params.get(name) for name in SUBSTRATE_PARAMS))
            return merge_substrates(rows)

    async def get(self, substrate_id: UUID, cid: str | None = None) -> Substrate:
        """
        Get a substrate with its ingredients, sorted by ingredient name.

        Raises:
            NotFoundError: no substrate has this id
        """
        substrates = await self.select(ReportAttrs(substrate_id=substrate_id), cid=cid)
        if not substrates:
            raise NotFoundError(f"substrate not found: {substrate_id}")
        return substrates[0]

    async def list_ingredients(self, substrate_id: UUID, cid: str | None = None) -> list[Ingredient]:
        """Ingredients of one substrate, sorted by name."""
        with track("SubstrateRepo.list_ingredients", id=substrate_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.ingredient_sql["all-by-substrate"], substrate_id)
            return [row_to_ingredient(row) for row in rows]


class EventTypeRepo:
    """Event type reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["eventtype"]

    async def get(self, eventtype_id: UUID, cid: str | None = None) -> EventType:
        """
        Get an event type with its stage.

        Raises:
            NotFoundError: no event type has this id
        """
        with track("EventTypeRepo.get", id=eventtype_id, cid=cid):
            async with connection() as conn:
                row = await conn.fetchrow(self.sql["select"], eventtype_id)
            if row is None:
                raise NotFoundError(f"event type not found: {eventtype_id}")
            return row_to_event_type(row)
