"""
Report graph building: expand a loaded aggregate into a generic tree.

The domain graph loops (a generation's source points at a lifecycle whose
events can originate sources of that same generation), so expansion tracks
the identities on the current path and stops at any it has already passed
through. A stopped ("pruned") branch is left out of the tree; it is not an
error.

Usage:
    builder = ReportBuilder(default_registry())
    node = builder.build(generation)
    payload = node.to_dict()
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from huautla.errors import ClassificationError, ProjectionError
from huautla.models import (
    Event,
    EventType,
    Generation,
    Ingredient,
    Lifecycle,
    Note,
    Photo,
    Source,
    Stage,
    Strain,
    StrainAttribute,
    Substrate,
    Vendor,
)

logger = logging.getLogger(__name__)


class Kind(str, enum.Enum):
    """Every entity kind a report can contain."""

    VENDOR = "vendor"
    SUBSTRATE = "substrate"
    INGREDIENT = "ingredient"
    STRAIN = "strain"
    STRAIN_ATTRIBUTE = "strainattribute"
    STAGE = "stage"
    EVENT_TYPE = "eventtype"
    NOTE = "note"
    PHOTO = "photo"
    EVENT = "event"
    SOURCE = "source"
    LIFECYCLE = "lifecycle"
    GENERATION = "generation"


@dataclass(frozen=True)
class Child:
    """A related value to expand under label; many=False stores a single node."""

    label: str
    value: Any
    many: bool = True


ChildrenFn = Callable[[Any], Sequence[Child]]
PruneHook = Callable[[str, tuple[str, ...]], None]


@dataclass(frozen=True)
class EntityEntry:
    kind: Kind
    children: ChildrenFn | None = None
    # Attributes expanded as child nodes instead of projected as fields.
    relations: frozenset[str] = frozenset()


class EntityRegistry:
    """
    Closed mapping from model class to kind, children and relation fields.

    Lookup is by exact class. Anything not registered is unclassifiable.
    """

    def __init__(self) -> None:
        self._entries: dict[type, EntityEntry] = {}

    def register(
        self,
        model: type[BaseModel],
        kind: Kind,
        children: ChildrenFn | None = None,
        relations: Sequence[str] = (),
    ) -> None:
        if model in self._entries:
            raise ValueError(f"{model.__name__} is already registered")
        if any(entry.kind is kind for entry in self._entries.values()):
            raise ValueError(f"kind {kind.value} is already registered")
        self._entries[model] = EntityEntry(kind=kind, children=children, relations=frozenset(relations))

    def entry_for(self, value: Any) -> EntityEntry | None:
        return self._entries.get(type(value))

    def identity_of(self, value: Any) -> str | None:
        """Return "kind#id" for a registered value, None otherwise."""
        entry = self.entry_for(value)
        if entry is None:
            return None
        return f"{entry.kind.value}#{value.id}"

    def check_complete(self) -> None:
        """Raise ValueError if any Kind has no registered model."""
        registered = {entry.kind for entry in self._entries.values()}
        missing = [kind.value for kind in Kind if kind not in registered]
        if missing:
            raise ValueError(f"no registry entry for: {', '.join(missing)}")


@dataclass
class GenericNode:
    """One report node: a value's own fields plus its expanded children."""

    kind: Kind
    identity: str
    fields: dict[str, Any]
    children: dict[str, list[GenericNode] | GenericNode] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Fields with children rendered in place, ready to serialize."""
        result = dict(self.fields)
        for label, child in self.children.items():
            if isinstance(child, list):
                result[label] = [node.to_dict() for node in child]
            else:
                result[label] = child.to_dict()
        return result


class ReportBuilder:
    """
    Cycle-safe expansion of registered values into GenericNode trees.

    on_prune, if given, is called with the pruned identity and the ancestor
    chain each time a branch is dropped. It does not change the output.
    """

    def __init__(self, registry: EntityRegistry, on_prune: PruneHook | None = None) -> None:
        self.registry = registry
        self.on_prune = on_prune

    def build(self, value: Any, ancestors: tuple[str, ...] = ()) -> GenericNode | None:
        """
        Expand value into a node.

        Args:
            value: a registered domain model
            ancestors: identities strictly above value on the current path

        Returns:
            The node, or None if value's identity is already on the path

        Raises:
            ClassificationError: value's type is not registered
            ProjectionError: value's fields could not be serialized
        """
        entry = self.registry.entry_for(value)
        if entry is None:
            raise ClassificationError(value)
        identity = f"{entry.kind.value}#{value.id}"

        if identity in ancestors:
            logger.debug("report: pruned %s below %s", identity, " > ".join(ancestors))
            if self.on_prune is not None:
                self.on_prune(identity, ancestors)
            return None

        node = GenericNode(kind=entry.kind, identity=identity, fields=self._project(value, entry, identity))

        if entry.children is None:
            return node

        path = (*ancestors, identity)
        for child in entry.children(value):
            child_node = self.build(child.value, path)
            if child_node is None:
                continue
            if child.many:
                node.children.setdefault(child.label, []).append(child_node)
            else:
                node.children[child.label] = child_node

        return node

    @staticmethod
    def _project(value: BaseModel, entry: EntityEntry, identity: str) -> dict[str, Any]:
        try:
            return value.model_dump(mode="json", by_alias=True, exclude=set(entry.relations))
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise ProjectionError(f"couldn't project {identity}: {e}") from e


def _many(label: str, values: Sequence[Any]) -> list[Child]:
    return [Child(label, value) for value in values]


def _one(label: str, value: Any) -> list[Child]:
    # Unset links have nothing to expand.
    return [] if value is None else [Child(label, value, many=False)]


def _generation_children(g: Generation) -> list[Child]:
    return (
        _one("plating_substrate", g.plating_substrate)
        + _one("liquid_substrate", g.liquid_substrate)
        + _one("progeny", g.progeny)
        + _many("notes", g.notes)
        + _many("sources", g.sources)
        + _many("events", g.events)
    )


def _source_children(s: Source) -> list[Child]:
    children = _one("strain", s.strain)
    # An unresolved LifecycleRef has nothing to expand.
    if isinstance(s.lifecycle, Lifecycle):
        children += _one("lifecycle", s.lifecycle)
    return children


def _lifecycle_children(lc: Lifecycle) -> list[Child]:
    return (
        _one("strain", lc.strain)
        + _one("grain_substrate", lc.grain_substrate)
        + _one("bulk_substrate", lc.bulk_substrate)
        + _many("notes", lc.notes)
        + _many("events", lc.events)
    )


def _event_children(e: Event) -> list[Child]:
    return _many("notes", e.notes) + _many("photos", e.photos) + _many("progeny", e.progeny)


def _photo_children(p: Photo) -> list[Child]:
    return _many("notes", p.notes)


def _strain_children(s: Strain) -> list[Child]:
    return (
        _many("attributes", s.attributes)
        + _many("photos", s.photos)
        + _one("generation", s.generation)
        + _many("generations", s.generations)
        + _many("lifecycles", s.lifecycles)
    )


def _substrate_children(s: Substrate) -> list[Child]:
    return _many("ingredients", s.ingredients) + _many("generations", s.generations) + _many("lifecycles", s.lifecycles)


def _eventtype_children(et: EventType) -> list[Child]:
    return _many("lifecycles", et.lifecycles) + _many("generations", et.generations)


def default_registry() -> EntityRegistry:
    """Registry covering every domain model, checked for completeness."""
    registry = EntityRegistry()
    registry.register(Vendor, Kind.VENDOR)
    registry.register(
        Substrate, Kind.SUBSTRATE, _substrate_children, relations=("ingredients", "generations", "lifecycles")
    )
    registry.register(Ingredient, Kind.INGREDIENT)
    registry.register(
        Strain,
        Kind.STRAIN,
        _strain_children,
        relations=("attributes", "photos", "generation", "generations", "lifecycles"),
    )
    registry.register(StrainAttribute, Kind.STRAIN_ATTRIBUTE)
    registry.register(Stage, Kind.STAGE)
    registry.register(EventType, Kind.EVENT_TYPE, _eventtype_children, relations=("lifecycles", "generations"))
    registry.register(Note, Kind.NOTE)
    registry.register(Photo, Kind.PHOTO, _photo_children, relations=("notes",))
    registry.register(Event, Kind.EVENT, _event_children, relations=("notes", "photos", "progeny"))
    registry.register(Source, Kind.SOURCE, _source_children, relations=("strain", "lifecycle"))
    registry.register(
        Lifecycle,
        Kind.LIFECYCLE,
        _lifecycle_children,
        relations=("strain", "grain_substrate", "bulk_substrate", "notes", "events"),
    )
    registry.register(
        Generation,
        Kind.GENERATION,
        _generation_children,
        relations=("plating_substrate", "liquid_substrate", "progeny", "notes", "sources", "events"),
    )
    registry.check_complete()
    return registry


__all__ = [
    "Child",
    "EntityRegistry",
    "GenericNode",
    "Kind",
    "ReportBuilder",
    "default_registry",
]
