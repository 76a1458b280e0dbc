"""Catalog models: vendors, substrates, ingredients, strains."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from huautla.models.event import Photo

if TYPE_CHECKING:
    from huautla.models.observable import Generation, Lifecycle

SubstrateType = Literal["Grain", "Bulk", "Plating", "Liquid"]


class Vendor(BaseModel):
    """Where a strain or substrate was bought."""

    id: UUID
    name: str
    website: str | None = None


class Ingredient(BaseModel):
    id: UUID
    name: str


class Substrate(BaseModel):
    """
    A grain, bulk, plating or liquid medium.

    generations and lifecycles are the observables grown on it, filled in
    only for a substrate report. Plating and liquid substrates feed
    generations; grain and bulk feed lifecycles.
    """

    id: UUID
    name: str
    type: SubstrateType
    vendor: Vendor
    ingredients: list[Ingredient] = Field(default_factory=list)
    generations: list[Generation] = Field(default_factory=list, exclude=True)
    lifecycles: list[Lifecycle] = Field(default_factory=list, exclude=True)


class StrainAttribute(BaseModel):
    id: UUID
    name: str
    value: str


class Strain(BaseModel):
    """
    A strain, optionally carrying its attributes and photos.

    generation_id names the generation the strain was isolated from, if
    any. The excluded fields link a strain report to what it grew in
    (generations, lifecycles) and where it came from (generation).
    """

    id: UUID
    name: str
    species: str | None = None
    ctime: datetime | None = None
    vendor: Vendor
    generation_id: UUID | None = None
    attributes: list[StrainAttribute] = Field(default_factory=list)
    photos: list[Photo] = Field(default_factory=list)
    generations: list[Generation] = Field(default_factory=list, exclude=True)
    lifecycles: list[Lifecycle] = Field(default_factory=list, exclude=True)
    generation: Generation | None = Field(default=None, exclude=True)
