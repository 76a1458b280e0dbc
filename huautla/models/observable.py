"""
Observables and what hangs off them: events, lifecycles, sources, generations.

These models refer to each other in a loop (a generation's source points at
a lifecycle whose events can originate sources), so they share one module
and are rebuilt together once every name exists.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from huautla.models.catalog import Strain, Substrate
from huautla.models.event import EventType, Note, Photo


class Event(BaseModel):
    """
    One observation on a lifecycle or generation.

    notes and photos are ordered newest first. progeny holds the sources
    this event originated (spore prints, clones) once they are linked in.
    """

    id: UUID
    temperature: float | None = None
    humidity: int | None = None
    mtime: datetime
    ctime: datetime
    event_type: EventType
    notes: list[Note] = Field(default_factory=list)
    photos: list[Photo] = Field(default_factory=list)
    progeny: list[Source] = Field(default_factory=list)


class Lifecycle(BaseModel):
    """A grow from grain spawn to harvest."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    name: str
    location: str | None = None
    strain_cost: float = 0
    grain_cost: float = 0
    bulk_cost: float = 0
    yield_: float = Field(default=0, alias="yield")
    count: int = 0
    gross: float = 0
    mtime: datetime
    ctime: datetime
    strain: Strain
    grain_substrate: Substrate
    bulk_substrate: Substrate
    events: list[Event] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)


class LifecycleRef(BaseModel):
    """Unresolved pointer to a lifecycle, as read from a source row."""

    id: UUID


class Source(BaseModel):
    """
    Genetic input of a generation.

    lifecycle is a back-reference to the lifecycle whose event produced the
    source. Until it is resolved it holds a LifecycleRef built from the row.
    """

    id: UUID
    type: Literal["Spore", "Clone"]
    strain: Strain
    progenitor_event_id: UUID | None = None
    lifecycle: Lifecycle | LifecycleRef | None = None


class Generation(BaseModel):
    """
    A plating/liquid culture generation and the sources that seeded it.

    progeny is the strain isolated from this generation, linked in for
    reports only.
    """

    id: UUID
    plating_substrate: Substrate
    liquid_substrate: Substrate
    mtime: datetime | None = None
    ctime: datetime
    dtime: datetime | None = None
    sources: list[Source] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    progeny: Strain | None = Field(default=None, exclude=True)


# Strain, Substrate and EventType point back at observables for reports.
for _model in (Substrate, Strain, EventType, Event, Lifecycle, Source, Generation):
    _model.model_rebuild()
