"""
Pydantic models for huautla.

All data shapes defined here. No imports from db, repos, or services.
"""

from huautla.models.catalog import (
    Ingredient,
    Strain,
    StrainAttribute,
    Substrate,
    Vendor,
)
from huautla.models.event import EventType, Note, Photo, Stage
from huautla.models.observable import Event, Generation, Lifecycle, LifecycleRef, Source
from huautla.models.report import ReportAttrs

__all__ = [
    # Catalog models
    "Vendor",
    "Substrate",
    "Ingredient",
    "Strain",
    "StrainAttribute",
    # Event detail models
    "Stage",
    "EventType",
    "Note",
    "Photo",
    # Observable models
    "Event",
    "Lifecycle",
    "LifecycleRef",
    "Source",
    "Generation",
    # Report params
    "ReportAttrs",
]
