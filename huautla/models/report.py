"""Report filter parameters."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from huautla.errors import ReportParamError


class ReportAttrs(BaseModel):
    """
    Validated filter set for selecting aggregates.

    Fields are addressed by their wire names ("strain-id", "plating-id", ...).
    Unknown names are rejected. Absent names read back as None, which the
    select statements treat as "no filter".
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    generation_id: UUID | None = Field(default=None, alias="generation-id")
    lifecycle_id: UUID | None = Field(default=None, alias="lifecycle-id")
    strain_id: UUID | None = Field(default=None, alias="strain-id")
    vendor_id: UUID | None = Field(default=None, alias="vendor-id")
    substrate_id: UUID | None = Field(default=None, alias="substrate-id")
    plating_id: UUID | None = Field(default=None, alias="plating-id")
    liquid_id: UUID | None = Field(default=None, alias="liquid-id")
    grain_id: UUID | None = Field(default=None, alias="grain-id")
    bulk_id: UUID | None = Field(default=None, alias="bulk-id")
    eventtype_id: UUID | None = Field(default=None, alias="eventtype-id")

    @classmethod
    def parse(cls, values: Mapping[str, Any]) -> ReportAttrs:
        """
        Build from wire names, e.g. {"strain-id": "6f1c..."}.

        Raises:
            ReportParamError: unknown name or a value that is not a uuid
        """
        try:
            return cls.model_validate(dict(values))
        except ValidationError as e:
            problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            raise ReportParamError(f"invalid report parameters: {problems}") from e

    def get(self, name: str) -> UUID | None:
        """Value for a wire name; None when the filter is not set."""
        field = name.replace("-", "_")
        if field not in type(self).model_fields:
            raise ReportParamError(f"unknown parameter: {name}")
        return getattr(self, field)

    def contains(self, *names: str) -> bool:
        """True if at least one of names is set."""
        return any(self.get(name) is not None for name in names)

    def require(self, *names: str) -> None:
        if not self.contains(*names):
            raise ReportParamError(f"request doesn't contain at least 1 required field: {', '.join(names)}")
