"""
Row-group merging: fold flat join rows into parents with child collections.

Every "parent plus children" query in the data layer returns one row per
child combination. merge_rows walks those rows once, in order, and rebuilds
the parents.

Usage:
    events = merge_rows(
        rows,
        key="uuid",
        decode=_row_to_event,
        relations=(
            Relation("notes", key="note_uuid", decode=_row_to_note),
            Relation("photos", key="photo_uuid", decode=_row_to_photo),
        ),
    )

PRECONDITION: rows must arrive grouped by parent key, and within a parent in
the order each collection should end up in. merge_rows does not sort. A
parent whose rows are split by another parent's rows comes out as two
parents. Pass strict_order=True (or set HUAUTLA_STRICT_ROW_ORDER=true) to
raise RowOrderError instead while debugging a query.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from huautla.config import settings
from huautla.errors import RowDecodeError, RowOrderError

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]

P = TypeVar("P")
C = TypeVar("C")


@dataclass(frozen=True)
class Relation(Generic[C]):
    """
    One independent one-to-many relation carried by a query.

    attr: parent attribute that receives the collection
    key: nullable column holding the child key; None means no child in this row
    decode: builds the child from a row
    prepend: put newly seen children first (query sorted oldest-first but the
        collection is wanted newest-first); otherwise append in query order
    """

    attr: str
    key: str
    decode: Callable[[Row], C]
    prepend: bool = False


@dataclass
class _Group(Generic[P]):
    key: Hashable
    parent: P
    children: dict[str, list[Any]] = field(default_factory=dict)
    last_seen: dict[str, Hashable] = field(default_factory=dict)
    seen: dict[str, set[Hashable]] = field(default_factory=dict)


def merge_rows(
    rows: Iterable[Row],
    *,
    key: str,
    decode: Callable[[Row], P],
    relations: Sequence[Relation[Any]] = (),
    strict_order: bool | None = None,
) -> list[P]:
    """
    Merge ordered join rows into parents, first-seen parent order.

    Args:
        rows: ordered result rows (asyncpg.Record or any mapping)
        key: column holding the parent key
        decode: builds a parent from its first row
        relations: child relations to collect per parent
        strict_order: raise on a parent key seen again after its group was
            flushed; defaults to settings.STRICT_ROW_ORDER

    Returns:
        Parents with every relation attribute set; [] for no rows

    Raises:
        RowDecodeError: a row could not be decoded; .partial holds the
            parents flushed before it
        RowOrderError: only with strict_order, on a fragmented parent group
    """
    if strict_order is None:
        strict_order = settings.STRICT_ROW_ORDER

    result: list[P] = []
    flushed: set[Hashable] = set()
    current: _Group[P] | None = None

    for index, row in enumerate(rows):
        try:
            parent_key = row[key]
            if current is None or parent_key != current.key:
                if current is not None:
                    result.append(_flush(current, relations))
                    flushed.add(current.key)
                if parent_key in flushed:
                    if strict_order:
                        raise RowOrderError(f"parent {parent_key} reappeared at row {index}; rows are not grouped")
                    logger.debug("merge_rows: parent %s split at row %d", parent_key, index)
                current = _Group(key=parent_key, parent=decode(row))

            for relation in relations:
                _collect(current, relation, row)
        except RowOrderError:
            raise
        except Exception as e:
            raise RowDecodeError(f"couldn't decode row {index}: {e}", row_index=index, partial=result) from e

    if current is not None:
        result.append(_flush(current, relations))

    return result


def _collect(group: _Group[Any], relation: Relation[Any], row: Row) -> None:
    child_key = row[relation.key]
    if child_key is None:
        return

    seen = group.seen.setdefault(relation.attr, set())
    last = group.last_seen.get(relation.attr)
    group.last_seen[relation.attr] = child_key

    # Cross products repeat a relation's keys, immediately (the other
    # relation varies faster) or cyclically (this one does).
    if child_key == last or child_key in seen:
        return
    seen.add(child_key)

    children = group.children.setdefault(relation.attr, [])
    child = relation.decode(row)
    if relation.prepend:
        children.insert(0, child)
    else:
        children.append(child)


def _flush(group: _Group[P], relations: Sequence[Relation[Any]]) -> P:
    for relation in relations:
        setattr(group.parent, relation.attr, group.children.get(relation.attr, []))
    return group.parent
