"""Repository for notes."""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from uuid import UUID

from huautla.db import connection
from huautla.merge import merge_rows
from huautla.models import Note
from huautla.repos.rows import row_to_note
from huautla.sql import STATEMENTS
from huautla.tracking import track


class NoteRepo:
    """Note reads. Anything with a uuid can carry notes."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["note"]

    async def list_for(self, owner_id: UUID, cid: str | None = None) -> list[Note]:
        """
        List the notes attached to an event, photo, lifecycle or generation.

        Returns:
            Notes newest first
        """
        with track("NoteRepo.list_for", id=owner_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["get"], owner_id)
            return merge_rows(rows, key="uuid", decode=partial(row_to_note, prefix=""))
