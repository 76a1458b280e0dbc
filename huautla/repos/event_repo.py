"""Repository for events and their notes and photos."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from uuid import UUID

from huautla.db import connection
from huautla.errors import NotFoundError
from huautla.merge import Relation, Row, merge_rows
from huautla.models import Event
from huautla.repos.rows import row_to_event, row_to_note, row_to_photo
from huautla.sql import STATEMENTS
from huautla.tracking import track

# One row per (note, photo) pair; both collections are newest first in the
# statement's order, so both append.
EVENT_RELATIONS = (
    Relation("notes", key="note_uuid", decode=row_to_note),
    Relation("photos", key="photo_uuid", decode=row_to_photo),
)


def merge_events(rows: Iterable[Row]) -> list[Event]:
    """Fold event fan-out rows into events with notes and photos."""
    return merge_rows(rows, key="uuid", decode=row_to_event, relations=EVENT_RELATIONS)


class EventRepo:
    """Event reads. Events belong to a lifecycle or a generation (the observable)."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["event"]

    async def list_for_observable(self, observable_id: UUID, cid: str | None = None) -> list[Event]:
        """
        List the events of a lifecycle or generation.

        Args:
            observable_id: Lifecycle or generation UUID
            cid: Correlation id for logging

        Returns:
            Events newest first, each with notes and photos newest first
        """
        with track("EventRepo.list_for_observable", id=observable_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["all-by-observable"], observable_id)
            return merge_events(rows)

    async def list_by_eventtype(self, eventtype_id: UUID, cid: str | None = None) -> list[Event]:
        """
        List every event of one type, without notes or photos.

        Args:
            eventtype_id: EventType UUID
            cid: Correlation id for logging

        Returns:
            Events newest first
        """
        with track("EventRepo.list_by_eventtype", id=eventtype_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["all-by-eventtype"], eventtype_id)
            return merge_rows(rows, key="uuid", decode=row_to_event)

    async def get(self, event_id: UUID, cid: str | None = None) -> Event:
        """
        Get one event with its notes and photos.

        Raises:
            NotFoundError: no event has this id
        """
        with track("EventRepo.get", id=event_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["select"], event_id)
            events = merge_events(rows)
            if not events:
                raise NotFoundError(f"event not found: {event_id}")
            return events[0]
