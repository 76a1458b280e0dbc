"""Repository for photos of events and strains."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from functools import partial
from uuid import UUID

from huautla.db import connection
from huautla.merge import Relation, Row, merge_rows
from huautla.models import Photo
from huautla.repos.rows import row_to_note, row_to_photo
from huautla.sql import STATEMENTS
from huautla.tracking import track

# The statement sorts a photo's notes oldest first; prepending turns that
# into newest first.
PHOTO_RELATIONS = (Relation("notes", key="note_uuid", decode=row_to_note, prepend=True),)


def merge_photos(rows: Iterable[Row]) -> list[Photo]:
    return merge_rows(rows, key="uuid", decode=partial(row_to_photo, prefix=""), relations=PHOTO_RELATIONS)


class PhotoRepo:
    """Photo reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["eventphoto"]

    async def list_for(self, owner_id: UUID, cid: str | None = None) -> list[Photo]:
        """
        List the photos of an event or a strain, with their notes.

        Args:
            owner_id: Event or strain UUID
            cid: Correlation id for logging

        Returns:
            Photos newest first, notes newest first within each photo
        """
        with track("PhotoRepo.list_for", id=owner_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["get"], owner_id)
            return merge_photos(rows)
