"""
Tolerance geometry for dimensional comparison.

A unit's comparison region ("area") is the axis-aligned rectangle spanned by
its width and height shifted by the tolerance offsets:

    lower = (width + min, height + min)
    upper = (width + max, height + max)

Two areas are compatible when they overlap on both axes with strict
inequality. Touching rectangles are not compatible. Combining two compatible
areas yields their intersection, so an envelope can only shrink.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import InvalidTolerance


@dataclass(frozen=True)
class Unit:
    """A single measured piece."""

    width: float
    height: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.width, self.height)


@dataclass(frozen=True)
class ToleranceRange:
    """
    Offsets applied to both dimensions of every unit.

    Attributes:
        min: Offset of the region's lower bound
        max: Offset of the region's upper bound (must be >= min)
    """

    min: float
    max: float

    def validate(self) -> "ToleranceRange":
        """Return self, or raise InvalidTolerance if the range is unusable."""
        if not (math.isfinite(self.min) and math.isfinite(self.max)):
            raise InvalidTolerance(
                self.min, self.max,
                f"tolerance bounds must be finite (got min={self.min}, max={self.max})",
            )
        if self.min > self.max:
            raise InvalidTolerance(self.min, self.max)
        return self

    @property
    def is_degenerate(self) -> bool:
        return self.min == self.max


@dataclass(frozen=True)
class Area:
    """Axis-aligned comparison rectangle in (width, height) space."""

    min_width: float
    min_height: float
    max_width: float
    max_height: float

    @property
    def lower(self) -> Tuple[float, float]:
        return (self.min_width, self.min_height)

    @property
    def upper(self) -> Tuple[float, float]:
        return (self.max_width, self.max_height)

    @property
    def width_span(self) -> float:
        return self.max_width - self.min_width

    @property
    def height_span(self) -> float:
        return self.max_height - self.min_height

    @property
    def is_point(self) -> bool:
        return self.width_span == 0 and self.height_span == 0

    def to_dict(self) -> dict:
        return {
            "min_width": self.min_width,
            "min_height": self.min_height,
            "max_width": self.max_width,
            "max_height": self.max_height,
        }


def area_of(unit: Unit, tolerance: ToleranceRange) -> Area:
    """Comparison region of ``unit`` under ``tolerance``."""
    return Area(
        min_width=unit.width + tolerance.min,
        min_height=unit.height + tolerance.min,
        max_width=unit.width + tolerance.max,
        max_height=unit.height + tolerance.max,
    )


def _overlap(a_lo: float, a_hi: float, b_lo: float, b_hi: float) -> Optional[Tuple[float, float]]:
    """
    Overlap of two closed intervals on one axis, or None.

    Proper intervals must overlap by a positive amount. A zero-width interval
    only matches an identical point, or a proper interval that contains it
    strictly inside.
    """
    a_point = a_lo == a_hi
    b_point = b_lo == b_hi

    if a_point and b_point:
        return (a_lo, a_hi) if a_lo == b_lo else None
    if a_point:
        return (a_lo, a_hi) if b_lo < a_lo < b_hi else None
    if b_point:
        return (b_lo, b_hi) if a_lo < b_lo < a_hi else None

    if a_lo < b_hi and b_lo < a_hi:
        return (max(a_lo, b_lo), min(a_hi, b_hi))
    return None


def intersect(a: Area, b: Area) -> Optional[Area]:
    """
    Overlapping rectangle of ``a`` and ``b``, or None if they are not compatible.

    Both axes must overlap; the result is never larger than either input.
    """
    widths = _overlap(a.min_width, a.max_width, b.min_width, b.max_width)
    if widths is None:
        return None
    heights = _overlap(a.min_height, a.max_height, b.min_height, b.max_height)
    if heights is None:
        return None
    return Area(
        min_width=widths[0],
        min_height=heights[0],
        max_width=widths[1],
        max_height=heights[1],
    )
