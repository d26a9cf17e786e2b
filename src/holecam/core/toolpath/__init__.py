"""Toolpath generation package."""

from .base import MotionCommand, MotionKind, Toolpath
from .hole import HoleResult, generate_hole_path

__all__ = [
    "MotionCommand", "MotionKind", "Toolpath",
    "HoleResult", "generate_hole_path",
]
