"""
Error taxonomy shared by every stage of a run.

The geometry and clustering core never raise for valid input; these errors
come from the boundaries around it (configuration, ingestion, output).
"""

from __future__ import annotations

from typing import Optional


class GrezziError(Exception):
    """Base class for all errors raised by a clustering run."""


class InvalidTolerance(GrezziError, ValueError):
    """Tolerance range rejected before any group is processed."""

    def __init__(self, minimum: float, maximum: float, reason: Optional[str] = None):
        self.minimum = minimum
        self.maximum = maximum
        if reason is None:
            reason = f"tolerance min ({minimum}) must not exceed max ({maximum})"
        super().__init__(reason)


class IngestionError(GrezziError):
    """
    Malformed input record.

    Attributes:
        row: 1-based line number in the input file (header is line 1), or
            None when the failure is not tied to a record
        column: 1-based column index, or None
        value: Raw field value as read, or None when the field is missing
    """

    def __init__(
        self,
        message: str,
        row: Optional[int] = None,
        column: Optional[int] = None,
        value: Optional[str] = None,
    ):
        self.row = row
        self.column = column
        self.value = value
        location = []
        if row is not None:
            location.append(f"row {row}")
        if column is not None:
            location.append(f"column {column}")
        if location:
            message = f"{message} ({', '.join(location)}, value={value!r})"
        super().__init__(message)


class SinkError(GrezziError):
    """Failure writing results or rendering the plot."""
