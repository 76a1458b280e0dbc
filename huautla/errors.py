"""Exception types raised by the data layer and the report builder."""

from __future__ import annotations

from typing import Any


class HuautlaError(Exception):
    """Base class for every error raised by huautla."""


class ConfigError(HuautlaError):
    """Connection settings are missing or unusable."""


class NotFoundError(HuautlaError):
    """The requested aggregate does not exist."""


class ReportParamError(HuautlaError):
    """A report filter name is unknown, or no usable filter was supplied."""


class RowDecodeError(HuautlaError):
    """
    A result row could not be decoded.

    Carries the zero-based index of the offending row and whatever parents
    had already been flushed. Call sites discard `partial` by convention.
    """

    def __init__(self, message: str, row_index: int, partial: list[Any] | None = None) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.partial = partial if partial is not None else []


class RowOrderError(HuautlaError):
    """A parent key showed up again after its group was flushed."""


class ClassificationError(HuautlaError):
    """The report builder was handed a value of an unregistered kind."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"couldn't determine entity type: {value!r} ({type(value).__name__})")
        self.value = value


class ProjectionError(HuautlaError):
    """A value's own fields could not be projected into a report node."""
