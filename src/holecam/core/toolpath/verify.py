"""Sanity checks on an emitted hole toolpath.

Samples the path and checks that the tool stays inside the hole, stays
between the cut depth and the entry height, and leaves no material behind.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from ..geometry import Point
from .base import Toolpath
from .hole import HoleRequest
from .utils import cutting_samples, uncut_region

# Absolute slack on coordinates, in toolpath units
COORD_TOL = 1e-6
# Uncut area below this fraction of the hole area is polygonization noise
AREA_TOL = 1e-3


@dataclass
class VerifyIssue:
    """A single problem found in the toolpath."""

    severity: str  # "error" or "warning"
    message: str
    point: Optional[tuple[float, float, float]] = None


@dataclass
class VerifyResult:
    """Result of verifying one hole toolpath."""

    issues: list[VerifyIssue] = field(default_factory=list)
    uncut_area: float = 0.0

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0


def verify_hole_path(
    toolpath: Toolpath,
    request: HoleRequest,
    start: Point,
    segments_per_rev: int = 256,
) -> VerifyResult:
    """Check *toolpath* as generated for *request* from *start*.

    Checks performed:
    - Toolpath is non-empty
    - Tool center never leaves ``target_radius - tool_radius`` of the center
    - Z stays between ``cut_z`` and the entry height
    - No material is left inside ``target_radius``
    """
    result = VerifyResult()

    if toolpath.is_empty:
        result.issues.append(VerifyIssue(
            "warning", "Toolpath is empty, nothing will be cut",
        ))
        return result

    pts = cutting_samples(toolpath, start, segments_per_rev)
    cx, cy = request.center.x.value, request.center.y.value

    radial = np.hypot(pts[:, 0] - cx, pts[:, 1] - cy)
    limit = request.radial_travel.value + COORD_TOL
    worst = int(np.argmax(radial))
    if radial[worst] > limit:
        result.issues.append(VerifyIssue(
            "error",
            f"tool center reaches {radial[worst]:.4f} from the hole center, "
            f"limit is {request.radial_travel.value:.4f}",
            tuple(pts[worst]),
        ))

    entry_z = start.z.value
    z_lo = min(request.cut_z.value, entry_z) - COORD_TOL
    z_hi = max(request.cut_z.value, entry_z) + COORD_TOL
    bad_z = np.flatnonzero((pts[:, 2] < z_lo) | (pts[:, 2] > z_hi))
    if bad_z.size:
        first = pts[bad_z[0]]
        result.issues.append(VerifyIssue(
            "error",
            f"Z={first[2]:.4f} outside [{z_lo + COORD_TOL:.4f}, "
            f"{z_hi - COORD_TOL:.4f}]",
            tuple(first),
        ))

    uncut = uncut_region(
        pts, (cx, cy), request.target_radius.value, request.tool_radius.value,
    )
    result.uncut_area = float(uncut.area)
    hole_area = np.pi * request.target_radius.value ** 2
    if result.uncut_area > AREA_TOL * hole_area:
        result.issues.append(VerifyIssue(
            "warning",
            f"{result.uncut_area:.4f} of material left uncut "
            f"({100.0 * result.uncut_area / hole_area:.1f}% of the hole)",
        ))

    return result
