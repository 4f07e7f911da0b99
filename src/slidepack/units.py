"""Length units and slide geometry.

All geometry in the package is expressed in EMU (English Metric Units).
A :class:`Dimension` is a tagged length that is resolved to EMU against
the slide extent of the axis it is used on, so ``Ratio(0.5)`` means half
the slide width on the x-axis and half the slide height on the y-axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from pptx.util import Cm, Emu, Inches, Length, Pt

EMU_PER_INCH = 914400
EMU_PER_CM = 360000
EMU_PER_PT = 12700

# 10" x 7.5" (4:3)
SLIDE_WIDTH = Emu(9144000)
SLIDE_HEIGHT = Emu(6858000)

_I64_MAX = 2**63 - 1
_I64_MIN = -(2**63)


class Unit(str, Enum):
    EMU = "emu"
    INCHES = "in"
    CM = "cm"
    PT = "pt"
    RATIO = "ratio"


@dataclass(frozen=True)
class Dimension:
    """A length in one of the supported units."""

    unit: Unit
    value: float

    @classmethod
    def emu(cls, value: int) -> "Dimension":
        return cls(Unit.EMU, value)

    @classmethod
    def inches(cls, value: float) -> "Dimension":
        return cls(Unit.INCHES, value)

    @classmethod
    def cm(cls, value: float) -> "Dimension":
        return cls(Unit.CM, value)

    @classmethod
    def pt(cls, value: float) -> "Dimension":
        return cls(Unit.PT, value)

    @classmethod
    def ratio(cls, value: float) -> "Dimension":
        return cls(Unit.RATIO, value)

    def resolve(self, extent: int) -> int:
        """Return this dimension in EMU, using *extent* for ratios."""
        if self.unit is Unit.EMU:
            length: Length = Emu(int(self.value))
        elif self.unit is Unit.INCHES:
            length = Inches(self.value)
        elif self.unit is Unit.CM:
            length = Cm(self.value)
        elif self.unit is Unit.PT:
            length = Pt(self.value)
        else:
            return _clamp(int(self.value * extent))
        return _clamp(int(length))


DimensionLike = Union[Dimension, int]


def percent(value: float) -> Dimension:
    """Ratio dimension from a percentage, ``percent(50) == Ratio(0.5)``."""
    return Dimension.ratio(value / 100.0)


def as_dimension(value: DimensionLike) -> Dimension:
    """Plain integers are taken to be EMU."""
    if isinstance(value, Dimension):
        return value
    return Dimension.emu(int(value))


def to_emu_x(value: DimensionLike) -> int:
    return as_dimension(value).resolve(SLIDE_WIDTH)


def to_emu_y(value: DimensionLike) -> int:
    return as_dimension(value).resolve(SLIDE_HEIGHT)


def pixels_to_emu(pixels: int, dpi: int = 96) -> int:
    return int(pixels * EMU_PER_INCH / dpi)


def _clamp(value: int) -> int:
    return max(_I64_MIN, min(_I64_MAX, value))
