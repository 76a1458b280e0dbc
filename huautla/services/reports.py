"""
Report service: loads an aggregate graph and expands it into report trees.

Loading and building are separate steps. A ReportLoad fills in everything a
report shows (notes, photo notes, ingredients, strain attributes and photos,
linked lifecycles, a generation's progeny) and fetches each generation and
lifecycle at most once per report. The builder then walks the finished
graph without touching the database.

Usage:
    service = ReportService()
    node = await service.generation_report(generation_id, cid="req-42")
    return node.to_dict()
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from uuid import UUID

from huautla.errors import HuautlaError, NotFoundError
from huautla.models import (
    Event,
    EventType,
    Generation,
    Ingredient,
    Lifecycle,
    LifecycleRef,
    ReportAttrs,
    Source,
    Strain,
    Substrate,
)
from huautla.report import EntityRegistry, GenericNode, PruneHook, ReportBuilder, default_registry
from huautla.repos import (
    EventTypeRepo,
    GenerationRepo,
    LifecycleRepo,
    NoteRepo,
    PhotoRepo,
    StrainRepo,
    SubstrateRepo,
)
from huautla.sql import STATEMENTS
from huautla.tracking import track

logger = logging.getLogger(__name__)

# Which filter selects the observables grown on a substrate of each type.
SUBSTRATE_FILTERS = {
    "Plating": ("generation", "plating_id"),
    "Liquid": ("generation", "liquid_id"),
    "Grain": ("lifecycle", "grain_id"),
    "Bulk": ("lifecycle", "bulk_id"),
}


def link_sources(sources: list[Source], lifecycles: Mapping[UUID, Lifecycle]) -> None:
    """
    Resolve source lifecycle refs in place.

    Each source whose lifecycle was loaded gets the Lifecycle itself, and the
    progenitor event in that lifecycle gets the source in its progeny. That
    closes the generation > source > lifecycle > event > source loop the
    report builder prunes.
    """
    for source in sources:
        if not isinstance(source.lifecycle, LifecycleRef):
            continue
        lifecycle = lifecycles.get(source.lifecycle.id)
        if lifecycle is None:
            logger.warning("report: lifecycle %s for source %s was not loaded", source.lifecycle.id, source.id)
            continue
        source.lifecycle = lifecycle
        for event in lifecycle.events:
            if event.id == source.progenitor_event_id and all(s.id != source.id for s in event.progeny):
                event.progeny.append(source)


class ReportLoad:
    """
    Fills in one report's graph.

    Generations and lifecycles are memoized by id: the first instance loaded
    is the one every later reference gets, so a loop in the data becomes a
    loop between the same objects instead of endless fetching.
    """

    def __init__(self, service: ReportService, cid: str | None) -> None:
        self.service = service
        self.cid = cid
        self.generations: dict[UUID, Generation] = {}
        self.lifecycles: dict[UUID, Lifecycle] = {}
        self.ingredients: dict[UUID, list[Ingredient]] = {}

    async def generation(self, generation: Generation) -> Generation:
        if generation.id in self.generations:
            return self.generations[generation.id]
        self.generations[generation.id] = generation
        s, cid = self.service, self.cid

        generation.notes = await s.notes.list_for(generation.id, cid=cid)
        await self.substrate(generation.plating_substrate)
        await self.substrate(generation.liquid_substrate)
        await self.event_photos(generation.events)

        progeny = await s.strains.generated(generation.id, cid=cid)
        if progeny is not None:
            progeny.photos = await s.photos.list_for(progeny.id, cid=cid)
            generation.progeny = progeny

        linked: dict[UUID, Lifecycle] = {}
        for source in generation.sources:
            await self.strain(source.strain)
            if isinstance(source.lifecycle, LifecycleRef) and source.lifecycle.id not in linked:
                linked[source.lifecycle.id] = await self.lifecycle_by_id(source.lifecycle.id)
        link_sources(generation.sources, linked)
        return generation

    async def lifecycle(self, lifecycle: Lifecycle) -> Lifecycle:
        if lifecycle.id in self.lifecycles:
            return self.lifecycles[lifecycle.id]
        self.lifecycles[lifecycle.id] = lifecycle

        lifecycle.notes = await self.service.notes.list_for(lifecycle.id, cid=self.cid)
        await self.strain(lifecycle.strain)
        await self.substrate(lifecycle.grain_substrate)
        await self.substrate(lifecycle.bulk_substrate)
        await self.event_photos(lifecycle.events)
        return lifecycle

    async def lifecycle_by_id(self, lifecycle_id: UUID) -> Lifecycle:
        if lifecycle_id in self.lifecycles:
            return self.lifecycles[lifecycle_id]
        return await self.lifecycle(await self.service.lifecycles.get(lifecycle_id, cid=self.cid))

    async def strain(self, strain: Strain) -> None:
        """Attributes and photos of a strain embedded in another row."""
        s = self.service
        strain.attributes = await s.strains.list_attributes(strain.id, cid=self.cid)
        strain.photos = await s.photos.list_for(strain.id, cid=self.cid)

    async def strain_graph(self, strain: Strain) -> Strain:
        """A report root strain: photos, where it came from, and what it grew in."""
        s, cid = self.service, self.cid
        strain.photos = await s.photos.list_for(strain.id, cid=cid)
        if strain.generation_id is not None:
            strain.generation = await self.generation(await s.generations.get(strain.generation_id, cid=cid))
        params = ReportAttrs(strain_id=strain.id)
        strain.generations = [await self.generation(g) for g in await s.generations.select(params, cid=cid)]
        strain.lifecycles = [await self.lifecycle(lc) for lc in await s.lifecycles.select(params, cid=cid)]
        return strain

    async def substrate(self, substrate: Substrate) -> None:
        # Every row decodes its own Substrate, but a few ids repeat across a report.
        if substrate.id not in self.ingredients:
            self.ingredients[substrate.id] = await self.service.substrates.list_ingredients(substrate.id, cid=self.cid)
        substrate.ingredients = list(self.ingredients[substrate.id])

    async def substrate_graph(self, substrate: Substrate) -> Substrate:
        """A report root substrate and the observables grown on it."""
        s, cid = self.service, self.cid
        kind, name = SUBSTRATE_FILTERS[substrate.type]
        params = ReportAttrs(**{name: substrate.id})
        if kind == "generation":
            substrate.generations = [await self.generation(g) for g in await s.generations.select(params, cid=cid)]
        else:
            substrate.lifecycles = [await self.lifecycle(lc) for lc in await s.lifecycles.select(params, cid=cid)]
        return substrate

    async def eventtype_graph(self, eventtype: EventType) -> EventType:
        """A report root event type and the observables that recorded it."""
        s, cid = self.service, self.cid
        params = ReportAttrs(eventtype_id=eventtype.id)
        eventtype.lifecycles = [await self.lifecycle(lc) for lc in await s.lifecycles.select(params, cid=cid)]
        eventtype.generations = [await self.generation(g) for g in await s.generations.select(params, cid=cid)]
        return eventtype

    async def event_photos(self, events: list[Event]) -> None:
        # The event statement brings photos without their notes.
        for event in events:
            if event.photos:
                event.photos = await self.service.photos.list_for(event.id, cid=self.cid)


class ReportService:
    """Builds generation, lifecycle, strain, substrate and event type reports."""

    def __init__(
        self,
        sql: Mapping[str, Mapping[str, str]] = STATEMENTS,
        registry: EntityRegistry | None = None,
        on_prune: PruneHook | None = None,
    ) -> None:
        self.generations = GenerationRepo(sql)
        self.lifecycles = LifecycleRepo(sql)
        self.strains = StrainRepo(sql)
        self.substrates = SubstrateRepo(sql)
        self.eventtypes = EventTypeRepo(sql)
        self.notes = NoteRepo(sql)
        self.photos = PhotoRepo(sql)
        self.builder = ReportBuilder(registry or default_registry(), on_prune=on_prune)

    async def generation_report(self, generation_id: UUID, cid: str | None = None) -> GenericNode:
        """
        Report on one generation: substrates, progeny, notes, sources with
        their lifecycles, and events.

        Raises:
            NotFoundError: no generation has this id
        """
        with track("ReportService.generation_report", id=generation_id, cid=cid):
            reports = await self.generation_reports(ReportAttrs(generation_id=generation_id), cid=cid)
            return _only(reports, "generation", generation_id)

    async def generation_reports(self, params: ReportAttrs, cid: str | None = None) -> list[GenericNode]:
        """
        Reports on every generation matching params.

        Raises:
            ReportParamError: none of the generation filters is set
        """
        with track("ReportService.generation_reports", id=params, cid=cid):
            load = ReportLoad(self, cid)
            return [self._build(await load.generation(g)) for g in await self.generations.select(params, cid=cid)]

    async def lifecycle_report(self, lifecycle_id: UUID, cid: str | None = None) -> GenericNode:
        """
        Report on one lifecycle: strain, substrates, notes, and events with
        notes and photos.

        Raises:
            NotFoundError: no lifecycle has this id
        """
        with track("ReportService.lifecycle_report", id=lifecycle_id, cid=cid):
            reports = await self.lifecycle_reports(ReportAttrs(lifecycle_id=lifecycle_id), cid=cid)
            return _only(reports, "lifecycle", lifecycle_id)

    async def lifecycle_reports(self, params: ReportAttrs, cid: str | None = None) -> list[GenericNode]:
        with track("ReportService.lifecycle_reports", id=params, cid=cid):
            load = ReportLoad(self, cid)
            return [self._build(await load.lifecycle(lc)) for lc in await self.lifecycles.select(params, cid=cid)]

    async def strain_report(self, strain_id: UUID, cid: str | None = None) -> GenericNode:
        """
        Report on one strain: attributes, photos, the generation it was
        isolated from, and the generations and lifecycles grown from it.

        Raises:
            NotFoundError: no strain has this id
        """
        with track("ReportService.strain_report", id=strain_id, cid=cid):
            reports = await self.strain_reports(ReportAttrs(strain_id=strain_id), cid=cid)
            return _only(reports, "strain", strain_id)

    async def strain_reports(self, params: ReportAttrs, cid: str | None = None) -> list[GenericNode]:
        """Reports on every strain matching strain-id and vendor-id; all strains if neither is set."""
        with track("ReportService.strain_reports", id=params, cid=cid):
            load = ReportLoad(self, cid)
            return [self._build(await load.strain_graph(s)) for s in await self.strains.select(params, cid=cid)]

    async def substrate_report(self, substrate_id: UUID, cid: str | None = None) -> GenericNode:
        """
        Report on one substrate: ingredients, and the generations (plating,
        liquid) or lifecycles (grain, bulk) that used it.

        Raises:
            NotFoundError: no substrate has this id
        """
        with track("ReportService.substrate_report", id=substrate_id, cid=cid):
            reports = await self.substrate_reports(ReportAttrs(substrate_id=substrate_id), cid=cid)
            return _only(reports, "substrate", substrate_id)

    async def substrate_reports(self, params: ReportAttrs, cid: str | None = None) -> list[GenericNode]:
        """
        Raises:
            ReportParamError: neither substrate-id nor vendor-id is set
        """
        with track("ReportService.substrate_reports", id=params, cid=cid):
            load = ReportLoad(self, cid)
            return [self._build(await load.substrate_graph(s)) for s in await self.substrates.select(params, cid=cid)]

    async def eventtype_report(self, eventtype_id: UUID, cid: str | None = None) -> GenericNode:
        """
        Report on one event type: the lifecycles and generations that
        recorded an event of this type.

        Raises:
            NotFoundError: no event type has this id
        """
        with track("ReportService.eventtype_report", id=eventtype_id, cid=cid):
            eventtype = await self.eventtypes.get(eventtype_id, cid=cid)
            return self._build(await ReportLoad(self, cid).eventtype_graph(eventtype))

    def _build(self, root: Generation | Lifecycle | Strain | Substrate | EventType) -> GenericNode:
        node = self.builder.build(root)
        if node is None:
            # Only a non-empty ancestor chain can prune, and a root has none.
            raise HuautlaError(f"report root {type(root).__name__} {root.id} was pruned")
        return node


def _only(reports: list[GenericNode], kind: str, value_id: UUID) -> GenericNode:
    if not reports:
        raise NotFoundError(f"{kind} not found: {value_id}")
    return reports[0]
