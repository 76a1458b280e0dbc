"""
Repository layer for huautla.

All SQL execution lives here and ONLY here. No database access outside this module.
"""

from huautla.repos.catalog_repo import EventTypeRepo, StrainRepo, SubstrateRepo
from huautla.repos.event_repo import EventRepo
from huautla.repos.generation_repo import GenerationRepo
from huautla.repos.lifecycle_repo import LifecycleRepo
from huautla.repos.note_repo import NoteRepo
from huautla.repos.photo_repo import PhotoRepo
from huautla.repos.source_repo import SourceRepo

__all__ = [
    "EventRepo",
    "NoteRepo",
    "PhotoRepo",
    "SourceRepo",
    "GenerationRepo",
    "LifecycleRepo",
    "StrainRepo",
    "SubstrateRepo",
    "EventTypeRepo",
]
