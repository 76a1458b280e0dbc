"""
Row decoders shared by the repositories.

Joined statements alias nested columns with a prefix ("plating_vendor_name",
"event_stage_uuid"); the decoders take that prefix so one function serves
every place a shape is embedded. Rows are asyncpg.Record or plain mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from huautla.models import (
    Event,
    EventType,
    Ingredient,
    LifecycleRef,
    Note,
    Photo,
    Source,
    Stage,
    Strain,
    StrainAttribute,
    Substrate,
    Vendor,
)

Row = Mapping[str, Any]


def _col(prefix: str, name: str) -> str:
    return f"{prefix}_{name}" if prefix else name


def row_to_vendor(row: Row, prefix: str) -> Vendor:
    return Vendor(
        id=row[_col(prefix, "vendor_uuid")],
        name=row[_col(prefix, "vendor_name")],
        website=row[_col(prefix, "vendor_website")],
    )


def row_to_substrate(row: Row, prefix: str) -> Substrate:
    return Substrate(
        id=row[_col(prefix, "uuid")],
        name=row[_col(prefix, "name")],
        type=row[_col(prefix, "type")],
        vendor=row_to_vendor(row, prefix),
    )


def row_to_ingredient(row: Row) -> Ingredient:
    return Ingredient(id=row["ingredient_uuid"], name=row["ingredient_name"])


def row_to_strain(row: Row, prefix: str = "strain") -> Strain:
    return Strain(
        id=row[_col(prefix, "uuid")],
        name=row[_col(prefix, "name")],
        species=row[_col(prefix, "species")],
        ctime=row[_col(prefix, "ctime")],
        vendor=row_to_vendor(row, prefix),
        # only the strain statements select the origin generation
        generation_id=row.get(_col(prefix, "generation_uuid")),
    )


def row_to_attribute(row: Row) -> StrainAttribute:
    return StrainAttribute(
        id=row["attribute_uuid"],
        name=row["attribute_name"],
        value=row["attribute_value"],
    )


def row_to_event_type(row: Row, prefix: str = "") -> EventType:
    return EventType(
        id=row[_col(prefix, "eventtype_uuid")],
        name=row[_col(prefix, "eventtype_name")],
        severity=row[_col(prefix, "eventtype_severity")],
        stage=Stage(
            id=row[_col(prefix, "stage_uuid")],
            name=row[_col(prefix, "stage_name")],
        ),
    )


def row_to_event(row: Row, prefix: str = "") -> Event:
    """Decode an event's own columns. Collections are left empty."""
    return Event(
        id=row[_col(prefix, "uuid")],
        temperature=row[_col(prefix, "temperature")],
        humidity=row[_col(prefix, "humidity")],
        mtime=row[_col(prefix, "mtime")],
        ctime=row[_col(prefix, "ctime")],
        event_type=row_to_event_type(row, prefix),
    )


def row_to_note(row: Row, prefix: str = "note") -> Note:
    return Note(
        id=row[_col(prefix, "uuid")],
        note=row[_col(prefix, "note")],
        mtime=row[_col(prefix, "mtime")],
        ctime=row[_col(prefix, "ctime")],
    )


def row_to_photo(row: Row, prefix: str = "photo") -> Photo:
    return Photo(
        id=row[_col(prefix, "uuid")],
        filename=row[_col(prefix, "filename")],
        mtime=row[_col(prefix, "mtime")],
        ctime=row[_col(prefix, "ctime")],
    )


def row_to_source(row: Row) -> Source:
    """Decode the source_* columns. The lifecycle stays an unresolved ref."""
    lifecycle_id = row["source_lifecycle_uuid"]
    return Source(
        id=row["source_uuid"],
        type=row["source_type"],
        strain=row_to_strain(row, "source_strain"),
        progenitor_event_id=row["source_event_uuid"],
        lifecycle=LifecycleRef(id=lifecycle_id) if lifecycle_id is not None else None,
    )
