"""Event details: stages, event types, notes and photos."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from huautla.models.observable import Generation, Lifecycle


class Stage(BaseModel):
    id: UUID
    name: str


class EventType(BaseModel):
    """
    What kind of thing happened, and at which stage.

    lifecycles and generations, filled in only for an event type report,
    are the observables that recorded an event of this type.
    """

    id: UUID
    name: str
    severity: str
    stage: Stage
    lifecycles: list[Lifecycle] = Field(default_factory=list, exclude=True)
    generations: list[Generation] = Field(default_factory=list, exclude=True)


class Note(BaseModel):
    """Free text attached to an event, photo, lifecycle or generation."""

    id: UUID
    note: str
    mtime: datetime
    ctime: datetime


class Photo(BaseModel):
    """A photo of an event or a strain, with its notes newest first."""

    id: UUID
    filename: str
    mtime: datetime
    ctime: datetime
    notes: list[Note] = Field(default_factory=list)
