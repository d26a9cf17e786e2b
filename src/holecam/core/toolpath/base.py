"""Core toolpath data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..geometry import Point
from ..units import Distance


class MotionKind(Enum):
    """Type of motion command in the output stream."""
    GOTO = "goto"            # absolute positioning move
    MOVE = "move"            # absolute linear cutting move
    ARC_CW = "arc_cw"        # clockwise arc by relative offset and radius
    CIRCLE_CW = "circle_cw"  # clockwise full circle around a center
    COMMENT = "comment"      # annotation only, no motion


@dataclass(frozen=True)
class MotionCommand:
    """A single entry of the toolpath output stream.

    ``point`` is the absolute target (GOTO/MOVE), the relative offset
    (ARC_CW) or the circle center (CIRCLE_CW).
    """
    kind: MotionKind
    point: Optional[Point] = None
    radius: Optional[Distance] = None
    text: str = ""

    @property
    def is_motion(self) -> bool:
        return self.kind is not MotionKind.COMMENT

    def __str__(self) -> str:
        if self.kind is MotionKind.COMMENT:
            return f"({self.text})"
        if self.kind is MotionKind.ARC_CW:
            return f"{self.kind.value} {self.point} R{self.radius}"
        return f"{self.kind.value} {self.point}"


@dataclass
class Toolpath:
    """Ordered, append-only sequence of motion commands."""
    commands: list[MotionCommand] = field(default_factory=list)
    operation_name: str = ""

    def append(self, cmd: MotionCommand) -> None:
        self.commands.append(cmd)

    @property
    def motions(self) -> list[MotionCommand]:
        return [c for c in self.commands if c.is_motion]

    def of_kind(self, kind: MotionKind) -> list[MotionCommand]:
        return [c for c in self.commands if c.kind is kind]

    @property
    def is_empty(self) -> bool:
        return not self.motions

    def listing(self) -> list[str]:
        return [str(c) for c in self.commands]

    def __len__(self) -> int:
        return len(self.commands)
