"""Points and predicates over raw (loosely-typed) call arguments."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any, Optional

from .units import Distance, Units, fmt


@dataclass(frozen=True)
class Point:
    """A position in the machine frame.

    ``None`` marks an unspecified component: for absolute moves that axis
    is left where it is.
    """

    x: Optional[Distance] = None
    y: Optional[Distance] = None
    z: Optional[Distance] = None

    @classmethod
    def of(cls, units: Units, x=None, y=None, z=None) -> Point:
        """Build a point from plain numbers in *units* (``None`` passes through)."""
        def conv(v):
            return None if v is None else Distance(float(v), units)
        return cls(conv(x), conv(y), conv(z))

    def xy(self) -> Point:
        return Point(self.x, self.y)

    def components(self) -> tuple[Optional[Distance], ...]:
        return (self.x, self.y, self.z)

    def as_tuple(self) -> tuple[Optional[float], ...]:
        """Raw values, ``None`` for unspecified components."""
        return tuple(None if c is None else c.value for c in self.components())

    def __str__(self) -> str:
        parts = []
        for axis, c in zip("XYZ", self.components()):
            if c is not None:
                parts.append(f"{axis}{fmt(c.value)}")
        return "(" + " ".join(parts) + ")"


def is_vector(arg: Any) -> bool:
    if isinstance(arg, Point):
        return True
    return isinstance(arg, Sequence) and not isinstance(arg, (str, bytes))


def is_scalar(arg: Any) -> bool:
    if isinstance(arg, bool):
        return False
    return isinstance(arg, (Real, Distance))


def is_distance(arg: Any) -> bool:
    """True for a Distance or a unit-less real number (taken as a distance)."""
    return is_scalar(arg)


def is_unspecified(component: Any) -> bool:
    return component is None


def component_count(vec: Any) -> int:
    """Number of components of *vec*; a Point counts up to its last defined axis."""
    if isinstance(vec, Point):
        comps = vec.components()
        n = len(comps)
        while n and comps[n - 1] is None:
            n -= 1
        return n
    return len(vec)


def take_components(vec: Any, n: int) -> list[Any]:
    """First *n* components of *vec*, padded with ``None``."""
    comps = list(vec.components()) if isinstance(vec, Point) else list(vec)
    comps = comps[:n]
    return comps + [None] * (n - len(comps))


def to_distance(arg: Any, units: Units) -> Distance:
    """Normalize a scalar argument into *units*.

    Bare numbers are tagged with *units*; distances in another system are
    converted.
    """
    if isinstance(arg, Distance):
        return arg.to(units)
    return Distance(float(arg), units)
