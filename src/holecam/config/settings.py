"""Application preferences (persisted to disk)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from ..core.units import Units
from .defaults import DEFAULT_CUT_Z, DEFAULT_STEP_FRACTION


@dataclass
class AppSettings:
    """User preferences, serialized to ~/.holecam/settings.json."""

    default_units: str = Units.MM.value
    default_tool: int = 1
    default_step_fraction: float = DEFAULT_STEP_FRACTION
    default_cut_z: Optional[float] = None  # None -> per-unit default

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".holecam" / "settings.json"

    @property
    def units(self) -> Units:
        return Units(self.default_units)

    @property
    def cut_z(self) -> float:
        if self.default_cut_z is None:
            return DEFAULT_CUT_Z[self.units]
        return self.default_cut_z

    def save(self, path: Optional[Path] = None) -> None:
        p = path or self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(asdict(self), indent=2))

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "AppSettings":
        p = path or cls._path()
        if p.exists():
            data = json.loads(p.read_text())
            return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
        return cls()
