"""Repository for generation sources."""

from __future__ import annotations

from collections.abc import Mapping
from uuid import UUID

from huautla.db import connection
from huautla.merge import merge_rows
from huautla.models import Source
from huautla.repos.rows import row_to_source
from huautla.sql import STATEMENTS
from huautla.tracking import track


class SourceRepo:
    """Source reads."""

    def __init__(self, sql: Mapping[str, Mapping[str, str]] = STATEMENTS) -> None:
        self.sql = sql["source"]

    async def list_for_generation(self, generation_id: UUID, cid: str | None = None) -> list[Source]:
        """
        List the sources that seeded a generation.

        Each source's lifecycle is a LifecycleRef (or None for strain sources);
        ReportService resolves it when a report needs the whole lifecycle.

        Returns:
            Sources ordered by strain name
        """
        with track("SourceRepo.list_for_generation", id=generation_id, cid=cid):
            async with connection() as conn:
                rows = await conn.fetch(self.sql["get"], generation_id)
            return merge_rows(rows, key="source_uuid", decode=row_to_source)
