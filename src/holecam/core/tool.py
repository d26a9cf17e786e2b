"""End mill definitions and tool library with JSON persistence."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from .units import Distance, Units


@dataclass
class Tool:
    """A flat end mill used for hole widening.

    The diameter is stored in the tool's own units.
    """
    number: int
    name: str
    diameter: float
    units: Units = Units.MM
    flute_count: int = 2
    flute_length: float = 0.0

    @property
    def radius(self) -> Distance:
        return Distance(self.diameter / 2.0, self.units)

    def default_step(self, fraction: float) -> Distance:
        """Radial cut step as a *fraction* of the diameter."""
        return Distance(self.diameter * fraction, self.units)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["units"] = self.units.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> Tool:
        d = dict(d)
        d["units"] = Units(d.get("units", Units.MM.value))
        return cls(**d)


class ToolLibrary:
    """Tool library, optionally backed by a JSON file.

    With ``path=None`` the library lives in memory only.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = path
        self._tools: dict[int, Tool] = {}
        if self._path is not None and self._path.exists():
            self.load()

    @classmethod
    def default_path(cls) -> Path:
        return Path.home() / ".holecam" / "tools.json"

    def add(self, tool: Tool) -> None:
        self._tools[tool.number] = tool

    def remove(self, number: int) -> None:
        self._tools.pop(number, None)

    def get(self, number: int) -> Optional[Tool]:
        return self._tools.get(number)

    def list_tools(self) -> list[Tool]:
        return sorted(self._tools.values(), key=lambda t: t.number)

    def save(self) -> None:
        if self._path is None:
            raise ValueError("in-memory tool library has no file to save to")
        self._path.parent.mkdir(parents=True, exist_ok=True)
        data = [t.to_dict() for t in self.list_tools()]
        self._path.write_text(json.dumps(data, indent=2))

    def load(self) -> None:
        data = json.loads(self._path.read_text())
        self._tools = {}
        for d in data:
            tool = Tool.from_dict(d)
            self._tools[tool.number] = tool
