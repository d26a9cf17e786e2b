"""In-process host environment for toolpath procedures.

A MachineContext owns the active unit system, tracks the tool position and
collects emitted motion commands and diagnostics.  Procedures only ever
append to it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .geometry import Point
from .toolpath.base import MotionCommand, MotionKind, Toolpath
from .toolpath.hole import ErrorKind
from .units import Distance, Units

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """A single error or warning reported during a procedure call."""

    severity: str  # "error" or "warning"
    message: str
    kind: Optional[ErrorKind] = None


class MachineContext:
    """Current position, active units, motion sink and diagnostic sink."""

    def __init__(
        self,
        units: Units = Units.MM,
        position: Optional[Point] = None,
        toolpath: Optional[Toolpath] = None,
    ):
        self.units = units
        if position is None:
            position = Point.of(units, 0.0, 0.0, 0.0)
        self._position = Point(*(
            Distance.zero(units) if c is None else c.to(units)
            for c in position.components()
        ))
        self.toolpath = toolpath if toolpath is not None else Toolpath()
        self.diagnostics: list[Diagnostic] = []

    # -- environment queries -------------------------------------------------

    def current_position(self) -> Point:
        return self._position

    def active_unit_is_metric(self) -> bool:
        return self.units.is_metric

    def zero(self) -> Distance:
        return Distance.zero(self.units)

    # -- motion sink ---------------------------------------------------------

    def _absolute(self, point: Point) -> Point:
        cur = self._position.components()
        new = point.components()
        return Point(*(
            c if n is None else n.to(self.units) for c, n in zip(cur, new)
        ))

    def goto_absolute(self, point: Point) -> None:
        self.toolpath.append(MotionCommand(MotionKind.GOTO, point))
        self._position = self._absolute(point)

    def move_absolute(self, point: Point) -> None:
        self.toolpath.append(MotionCommand(MotionKind.MOVE, point))
        self._position = self._absolute(point)

    def arc_cw_relative(self, offset: Point, radius: Distance) -> None:
        self.toolpath.append(MotionCommand(MotionKind.ARC_CW, offset, radius))
        self._position = Point(*(
            c if o is None else c + o.to(self.units)
            for c, o in zip(self._position.components(), offset.components())
        ))

    def circle_cw_around(self, center: Point) -> None:
        # A full circle ends where it started.
        self.toolpath.append(MotionCommand(MotionKind.CIRCLE_CW, center))

    # -- diagnostic sink -----------------------------------------------------

    def report_error(self, message: str, kind: Optional[ErrorKind] = None) -> None:
        logger.error(message)
        self.diagnostics.append(Diagnostic("error", message, kind))

    def report_warning(self, message: str) -> None:
        logger.warning(message)
        self.diagnostics.append(Diagnostic("warning", message))

    def report_comment(self, message: str) -> None:
        self.toolpath.append(MotionCommand(MotionKind.COMMENT, text=message))

    @property
    def errors(self) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == "error"]

    @property
    def warnings(self) -> list[str]:
        return [d.message for d in self.diagnostics if d.severity == "warning"]
