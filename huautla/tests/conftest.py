"""
Pytest configuration and fixtures for huautla tests.

No database is needed: repository tests patch `connection` with an
AsyncMock connection whose fetch/fetchrow return plain dict rows shaped like
the statements in huautla.sql.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from huautla.repos import catalog_repo, event_repo, generation_repo, lifecycle_repo, note_repo, photo_repo, source_repo

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def at(minutes: int) -> datetime:
    """A timestamp `minutes` after T0; bigger is newer."""
    return T0 + timedelta(minutes=minutes)


class RowBuilder:
    """Builds dict rows with the column aliases the statements produce."""

    def __init__(self) -> None:
        self.vendor_id = uuid4()
        self.strain_id = uuid4()
        self.eventtype_id = uuid4()
        self.stage_id = uuid4()
        self.substrate_ids = {p: uuid4() for p in ("plating", "liquid", "grain", "bulk")}

    def _vendor(self, prefix: str) -> dict[str, Any]:
        return {
            f"{prefix}_vendor_uuid": self.vendor_id,
            f"{prefix}_vendor_name": "Spore Depot",
            f"{prefix}_vendor_website": "https://example.com",
        }

    def _substrate(self, prefix: str) -> dict[str, Any]:
        return {
            f"{prefix}_uuid": self.substrate_ids[prefix],
            f"{prefix}_name": f"{prefix} mix",
            f"{prefix}_type": prefix.capitalize(),
            **self._vendor(prefix),
        }

    def _strain(self, prefix: str) -> dict[str, Any]:
        return {
            f"{prefix}_uuid": self.strain_id,
            f"{prefix}_name": "B+",
            f"{prefix}_species": "P. cubensis",
            f"{prefix}_ctime": T0,
            **self._vendor(prefix),
        }

    def _event(self, prefix: str, event_id: UUID | None, mtime: int) -> dict[str, Any]:
        def col(name: str) -> str:
            return f"{prefix}_{name}" if prefix else name

        present = event_id is not None
        return {
            col("uuid"): event_id,
            col("temperature"): 22.5 if present else None,
            col("humidity"): 90 if present else None,
            col("mtime"): at(mtime) if present else None,
            col("ctime"): at(mtime) if present else None,
            col("eventtype_uuid"): self.eventtype_id if present else None,
            col("eventtype_name"): "Pinning" if present else None,
            col("eventtype_severity"): "Info" if present else None,
            col("stage_uuid"): self.stage_id if present else None,
            col("stage_name"): "Fruiting" if present else None,
        }

    @staticmethod
    def _note(prefix: str, note: tuple[UUID, int] | None) -> dict[str, Any]:
        note_id, mtime = note if note else (None, None)
        return {
            f"{prefix}uuid": note_id,
            f"{prefix}note": f"note {note_id}" if note_id else None,
            f"{prefix}mtime": at(mtime) if note_id else None,
            f"{prefix}ctime": at(mtime) if note_id else None,
        }

    @staticmethod
    def _photo(photo: tuple[UUID, int] | None) -> dict[str, Any]:
        photo_id, mtime = photo if photo else (None, None)
        return {
            "photo_uuid": photo_id,
            "photo_filename": f"{photo_id}.jpg" if photo_id else None,
            "photo_mtime": at(mtime) if photo_id else None,
            "photo_ctime": at(mtime) if photo_id else None,
        }

    def event(
        self,
        event_id: UUID,
        *,
        mtime: int = 0,
        note: tuple[UUID, int] | None = None,
        photo: tuple[UUID, int] | None = None,
    ) -> dict[str, Any]:
        """One row of the event fan-out statement."""
        return {**self._event("", event_id, mtime), **self._note("note_", note), **self._photo(photo)}

    def note(self, note_id: UUID, mtime: int = 0) -> dict[str, Any]:
        return self._note("", (note_id, mtime))

    def photo(self, photo_id: UUID, *, mtime: int = 0, note: tuple[UUID, int] | None = None) -> dict[str, Any]:
        """One row of the photo-with-notes statement."""
        return {
            "uuid": photo_id,
            "filename": f"{photo_id}.jpg",
            "mtime": at(mtime),
            "ctime": at(mtime),
            **self._note("note_", note),
        }

    def strain(
        self,
        strain_id: UUID | None = None,
        *,
        attribute: tuple[UUID, str] | None = None,
        generation_id: UUID | None = None,
    ) -> dict[str, Any]:
        """One row of the strain statements; strain_id defaults to the shared strain."""
        attribute_id, name = attribute if attribute else (None, None)
        return {
            **self._strain("strain"),
            "strain_uuid": strain_id or self.strain_id,
            "strain_generation_uuid": generation_id,
            "attribute_uuid": attribute_id,
            "attribute_name": name,
            "attribute_value": "yes" if attribute_id else None,
        }

    @staticmethod
    def attribute(attribute_id: UUID, name: str) -> dict[str, Any]:
        return {"attribute_uuid": attribute_id, "attribute_name": name, "attribute_value": "yes"}

    def substrate(self, kind: str, *, ingredient: tuple[UUID, str] | None = None) -> dict[str, Any]:
        """One row of the substrate select; kind is plating, liquid, grain or bulk."""
        ingredient_id, name = ingredient if ingredient else (None, None)
        columns = {key.replace(kind, "substrate", 1): value for key, value in self._substrate(kind).items()}
        return {**columns, "ingredient_uuid": ingredient_id, "ingredient_name": name}

    @staticmethod
    def ingredient(ingredient_id: UUID, name: str) -> dict[str, Any]:
        return {"ingredient_uuid": ingredient_id, "ingredient_name": name}

    def source(
        self,
        source_id: UUID | None,
        *,
        lifecycle_id: UUID | None = None,
        event_id: UUID | None = None,
        type: str = "Spore",
    ) -> dict[str, Any]:
        """The source_* columns; all None when source_id is None."""
        if source_id is None:
            strain = {k: None for k in self._strain("source_strain")}
            return {
                "source_uuid": None,
                "source_type": None,
                "source_event_uuid": None,
                "source_lifecycle_uuid": None,
                **strain,
            }
        return {
            "source_uuid": source_id,
            "source_type": type,
            "source_event_uuid": event_id,
            "source_lifecycle_uuid": lifecycle_id,
            **self._strain("source_strain"),
        }

    def generation(self, generation_id: UUID, *, source: dict[str, Any] | None = None) -> dict[str, Any]:
        """One row of the generation statements; pass source=self.source(...)."""
        return {
            "uuid": generation_id,
            "mtime": None,
            "ctime": T0,
            "dtime": None,
            **self._substrate("plating"),
            **self._substrate("liquid"),
            **(source if source is not None else self.source(None)),
        }

    def lifecycle(self, lifecycle_id: UUID, *, event_id: UUID | None = None, event_mtime: int = 0) -> dict[str, Any]:
        """One row of the lifecycle statements; event columns for the index."""
        return {
            "uuid": lifecycle_id,
            "name": "tub 3",
            "location": "closet",
            "strain_cost": 20,
            "grain_cost": 8,
            "bulk_cost": 6,
            "yield": 112.5,
            "headcount": 4,
            "gross": 0,
            "mtime": T0,
            "ctime": T0,
            **self._strain("strain"),
            **self._substrate("grain"),
            **self._substrate("bulk"),
            **self._event("event", event_id, event_mtime),
        }


@pytest.fixture
def rows() -> RowBuilder:
    return RowBuilder()


@pytest.fixture
def fake_conn(monkeypatch) -> AsyncMock:
    """
    Patch every repository's connection() to yield one AsyncMock connection.

    Set fake_conn.fetch.return_value (or side_effect for several queries).
    """
    conn = AsyncMock()

    @asynccontextmanager
    async def _connection():
        yield conn

    for module in (catalog_repo, event_repo, generation_repo, lifecycle_repo, note_repo, photo_repo, source_repo):
        monkeypatch.setattr(module, "connection", _connection)

    return conn


class FetchRoutes:
    """
    A fetch side_effect that answers by statement.

    on(sql, rows, arg=x) answers only calls whose parameters include x;
    on(sql, rows) answers the rest. Anything unrouted returns no rows.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str, Any], list[dict[str, Any]]] = {}

    def on(self, sql: str, rows: list[dict[str, Any]], arg: Any = None) -> FetchRoutes:
        self._routes[(sql, arg)] = rows
        return self

    def __call__(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        for (routed, arg), result in self._routes.items():
            if routed == sql and arg is not None and arg in args:
                return result
        return self._routes.get((sql, None), [])


@pytest.fixture
def routes(fake_conn) -> FetchRoutes:
    """Route fake_conn.fetch by statement; see FetchRoutes."""
    fake_conn.fetch.side_effect = FetchRoutes()
    return fake_conn.fetch.side_effect
