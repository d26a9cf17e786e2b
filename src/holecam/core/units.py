"""Unit system enum and the unit-tagged Distance quantity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from numbers import Real


def fmt(value: float, decimals: int = 4) -> str:
    """Format a float for listings, stripping trailing zeros."""
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


class Units(Enum):
    INCH = "inch"
    MM = "mm"

    def to_mm(self, value: float) -> float:
        if self is Units.MM:
            return value
        return value * 25.4

    def from_mm(self, value: float) -> float:
        if self is Units.MM:
            return value
        return value / 25.4

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @property
    def is_metric(self) -> bool:
        return self is Units.MM


@dataclass(frozen=True)
class Distance:
    """A length carrying its unit system.

    Arithmetic and ordering between two distances require the same units;
    convert explicitly with :meth:`to` first.
    """

    value: float
    units: Units = Units.MM

    @classmethod
    def zero(cls, units: Units) -> Distance:
        return cls(0.0, units)

    def to(self, units: Units) -> Distance:
        if units is self.units:
            return self
        return Distance(units.from_mm(self.units.to_mm(self.value)), units)

    def _check(self, other: Distance) -> None:
        if not isinstance(other, Distance):
            raise TypeError(f"expected Distance, got {type(other).__name__}")
        if other.units is not self.units:
            raise ValueError(
                f"unit mismatch: {self.units.value} vs {other.units.value}"
            )

    def __add__(self, other: Distance) -> Distance:
        self._check(other)
        return Distance(self.value + other.value, self.units)

    def __sub__(self, other: Distance) -> Distance:
        self._check(other)
        return Distance(self.value - other.value, self.units)

    def __neg__(self) -> Distance:
        return Distance(-self.value, self.units)

    def __mul__(self, factor: Real) -> Distance:
        if isinstance(factor, Distance) or not isinstance(factor, Real):
            return NotImplemented
        return Distance(self.value * factor, self.units)

    __rmul__ = __mul__

    def __truediv__(self, other):
        if isinstance(other, Distance):
            self._check(other)
            return self.value / other.value
        if not isinstance(other, Real):
            return NotImplemented
        return Distance(self.value / other, self.units)

    def __lt__(self, other: Distance) -> bool:
        self._check(other)
        return self.value < other.value

    def __le__(self, other: Distance) -> bool:
        self._check(other)
        return self.value <= other.value

    def __gt__(self, other: Distance) -> bool:
        self._check(other)
        return self.value > other.value

    def __ge__(self, other: Distance) -> bool:
        self._check(other)
        return self.value >= other.value

    def __abs__(self) -> Distance:
        return Distance(abs(self.value), self.units)

    def __str__(self) -> str:
        return f"{fmt(self.value)}{self.units.label()}"
