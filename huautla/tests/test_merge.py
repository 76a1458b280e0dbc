"""
Tests for merge_rows.

Covers grouping, the (note x photo) cross product, flush at exhaustion,
prepend ordering, decode failures and misordered input.
"""

from __future__ import annotations

from types import SimpleNamespace
from uuid import uuid4

import pytest

from huautla.errors import RowDecodeError, RowOrderError
from huautla.merge import Relation, merge_rows
from huautla.repos.event_repo import merge_events
from huautla.repos.photo_repo import merge_photos


def _parent(row):
    return SimpleNamespace(id=row["id"], name=row["name"])


def _child(row):
    return SimpleNamespace(id=row["child_id"])


CHILDREN = Relation("children", key="child_id", decode=_child)


def test_empty_input_gives_empty_list():
    assert merge_rows([], key="id", decode=_parent, relations=(CHILDREN,)) == []


def test_groups_consecutive_rows_by_parent_key():
    """Parents come out in first-seen order, children in row order."""
    rows = [
        {"id": 1, "name": "a", "child_id": "x"},
        {"id": 1, "name": "a", "child_id": "y"},
        {"id": 2, "name": "b", "child_id": "z"},
    ]
    parents = merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,))

    assert [p.id for p in parents] == [1, 2]
    assert [c.id for c in parents[0].children] == ["x", "y"]
    assert [c.id for c in parents[1].children] == ["z"]


def test_last_group_is_flushed_at_exhaustion():
    rows = [{"id": 7, "name": "only", "child_id": "x"}]
    parents = merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,))

    assert len(parents) == 1
    assert [c.id for c in parents[0].children] == ["x"]


def test_null_child_key_leaves_empty_collection():
    """A left join miss sets the attribute to [] rather than leaving it unset."""
    rows = [{"id": 1, "name": "a", "child_id": None}]
    parents = merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,))

    assert parents[0].children == []


def test_same_child_key_under_different_parents_is_kept():
    rows = [
        {"id": 1, "name": "a", "child_id": "x"},
        {"id": 2, "name": "b", "child_id": "x"},
    ]
    parents = merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,))

    assert [c.id for c in parents[0].children] == ["x"]
    assert [c.id for c in parents[1].children] == ["x"]


def test_event_fanout_dedupes_both_relations(rows):
    """Two notes crossed with three photos give six rows and one event."""
    event_id = uuid4()
    notes = [(uuid4(), 10), (uuid4(), 5)]
    photos = [(uuid4(), 30), (uuid4(), 20), (uuid4(), 10)]
    fanout = [rows.event(event_id, note=note, photo=photo) for note in notes for photo in photos]
    assert len(fanout) == 6

    events = merge_events(fanout)

    assert len(events) == 1
    assert [n.id for n in events[0].notes] == [n for n, _ in notes]
    assert [p.id for p in events[0].photos] == [p for p, _ in photos]


def test_event_without_notes_or_photos(rows):
    events = merge_events([rows.event(uuid4())])

    assert events[0].notes == []
    assert events[0].photos == []
    assert events[0].event_type.stage.name == "Fruiting"


def test_several_events_keep_row_order(rows):
    first, second = uuid4(), uuid4()
    note = (uuid4(), 1)
    fanout = [
        rows.event(first, mtime=20, note=note),
        rows.event(second, mtime=10),
    ]

    events = merge_events(fanout)

    assert [e.id for e in events] == [first, second]
    assert [n.id for n in events[0].notes] == [note[0]]
    assert events[1].notes == []


def test_prepend_reverses_query_order(rows):
    """Photo notes arrive oldest first and come out newest first."""
    photo_id = uuid4()
    old, new = (uuid4(), 1), (uuid4(), 2)

    photos = merge_photos([rows.photo(photo_id, note=old), rows.photo(photo_id, note=new)])

    assert [n.id for n in photos[0].notes] == [new[0], old[0]]


def test_decode_error_reports_row_and_partial():
    rows = [
        {"id": 1, "name": "a", "child_id": "x"},
        {"id": 2, "child_id": "y"},
    ]

    with pytest.raises(RowDecodeError) as exc_info:
        merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,))

    assert exc_info.value.row_index == 1
    assert [p.id for p in exc_info.value.partial] == [1]
    assert isinstance(exc_info.value.__cause__, KeyError)


def test_missing_parent_key_column_is_a_decode_error():
    with pytest.raises(RowDecodeError) as exc_info:
        merge_rows([{"name": "a"}], key="id", decode=_parent)

    assert exc_info.value.row_index == 0
    assert exc_info.value.partial == []


def test_misordered_rows_fragment_a_parent():
    rows = [
        {"id": 1, "name": "a", "child_id": "x"},
        {"id": 2, "name": "b", "child_id": "y"},
        {"id": 1, "name": "a", "child_id": "z"},
    ]
    parents = merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,), strict_order=False)

    assert [p.id for p in parents] == [1, 2, 1]
    assert [c.id for c in parents[2].children] == ["z"]


def test_strict_order_raises_on_fragmented_parent():
    rows = [
        {"id": 1, "name": "a", "child_id": "x"},
        {"id": 2, "name": "b", "child_id": "y"},
        {"id": 1, "name": "a", "child_id": "z"},
    ]

    with pytest.raises(RowOrderError):
        merge_rows(rows, key="id", decode=_parent, relations=(CHILDREN,), strict_order=True)


def test_strict_order_defaults_from_settings(monkeypatch):
    from huautla.merge import settings

    monkeypatch.setattr(settings, "STRICT_ROW_ORDER", True)
    rows = [
        {"id": 1, "name": "a"},
        {"id": 2, "name": "b"},
        {"id": 1, "name": "a"},
    ]

    with pytest.raises(RowOrderError):
        merge_rows(rows, key="id", decode=_parent)
