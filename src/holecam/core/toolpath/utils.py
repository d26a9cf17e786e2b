"""Geometry helpers for inspecting emitted toolpaths.

Arcs and circles are expanded into polylines with numpy; material removal
is approximated by buffering the tool-center polyline with shapely.
"""

from __future__ import annotations

import math
from typing import Iterator

import numpy as np
from shapely.geometry import GeometryCollection, LineString, MultiPolygon, Polygon
from shapely.geometry import Point as ShapelyPoint
from shapely.ops import unary_union
from shapely.validation import make_valid

from ..geometry import Point
from .base import MotionCommand, MotionKind, Toolpath

TWO_PI = 2.0 * math.pi


def ensure_polygon(geom) -> Polygon | MultiPolygon:
    """Return a valid Polygon or MultiPolygon, or empty Polygon on failure."""
    if geom is None or geom.is_empty:
        return Polygon()
    if not geom.is_valid:
        geom = make_valid(geom)
    if isinstance(geom, (Polygon, MultiPolygon)):
        return geom
    if isinstance(geom, GeometryCollection):
        polys = [g for g in geom.geoms if isinstance(g, (Polygon, MultiPolygon))]
        if polys:
            return unary_union(polys)
    return Polygon()


def _resolve(current: np.ndarray, point: Point) -> np.ndarray:
    """Absolute target of *point*, unspecified axes taken from *current*."""
    out = current.copy()
    for i, c in enumerate(point.components()):
        if c is not None:
            out[i] = c.value
    return out


def arc_cw_points(
    start: np.ndarray,
    offset: np.ndarray,
    radius: float,
    segments_per_rev: int = 256,
) -> np.ndarray:
    """Sample a clockwise arc from *start* by relative *offset*.

    Follows the radius-format convention: a positive *radius* selects the
    arc of at most half a turn.  Z is interpolated linearly (helix).  The
    start point itself is not included.
    """
    dx, dy, dz = offset
    chord = math.hypot(dx, dy)
    if chord == 0.0:
        return (start + offset)[np.newaxis, :]

    half = chord / 2.0
    k = math.sqrt(max(radius * radius - half * half, 0.0))
    # Clockwise travel keeps the center on the right of the chord
    cx = start[0] + dx / 2.0 + k * dy / chord
    cy = start[1] + dy / 2.0 - k * dx / chord

    a0 = math.atan2(start[1] - cy, start[0] - cx)
    a1 = math.atan2(start[1] + dy - cy, start[0] + dx - cx)
    sweep = (a0 - a1) % TWO_PI
    r = math.hypot(start[0] - cx, start[1] - cy)

    n = max(2, int(math.ceil(segments_per_rev * sweep / TWO_PI)))
    t = np.linspace(0.0, 1.0, n + 1)[1:]
    ang = a0 - sweep * t
    return np.column_stack([
        cx + r * np.cos(ang),
        cy + r * np.sin(ang),
        start[2] + dz * t,
    ])


def circle_cw_points(
    start: np.ndarray,
    center: np.ndarray,
    segments_per_rev: int = 256,
) -> np.ndarray:
    """Sample a clockwise full circle around *center* starting at *start*."""
    r = math.hypot(start[0] - center[0], start[1] - center[1])
    if r == 0.0:
        return start[np.newaxis, :]
    a0 = math.atan2(start[1] - center[1], start[0] - center[0])
    ang = a0 - TWO_PI * np.linspace(0.0, 1.0, segments_per_rev + 1)[1:]
    return np.column_stack([
        center[0] + r * np.cos(ang),
        center[1] + r * np.sin(ang),
        np.full(segments_per_rev, start[2]),
    ])


def iter_command_samples(
    toolpath: Toolpath,
    start: Point,
    segments_per_rev: int = 256,
) -> Iterator[tuple[MotionCommand, np.ndarray]]:
    """Yield each motion command with the tool-center points it passes through."""
    pos = np.array([c.value for c in start.components()], dtype=float)
    for cmd in toolpath.motions:
        if cmd.kind in (MotionKind.GOTO, MotionKind.MOVE):
            pts = _resolve(pos, cmd.point)[np.newaxis, :]
        elif cmd.kind is MotionKind.ARC_CW:
            offset = np.array(
                [0.0 if c is None else c.value for c in cmd.point.components()]
            )
            pts = arc_cw_points(pos, offset, cmd.radius.value, segments_per_rev)
        else:
            center = _resolve(pos, cmd.point)
            pts = circle_cw_points(pos, center, segments_per_rev)
        pos = pts[-1]
        yield cmd, pts


def sample_toolpath(
    toolpath: Toolpath,
    start: Point,
    segments_per_rev: int = 256,
) -> np.ndarray:
    """Expand *toolpath* into an ``(N, 3)`` array of tool-center points.

    *start* must have all three components defined; it is the first row.
    """
    rows = [np.array([[c.value for c in start.components()]], dtype=float)]
    rows.extend(pts for _, pts in iter_command_samples(toolpath, start, segments_per_rev))
    return np.vstack(rows)


def cutting_samples(
    toolpath: Toolpath,
    start: Point,
    segments_per_rev: int = 256,
) -> np.ndarray:
    """Like :func:`sample_toolpath` but starting at the last positioning move."""
    rows: list[np.ndarray] = []
    for cmd, pts in iter_command_samples(toolpath, start, segments_per_rev):
        if cmd.kind is MotionKind.GOTO:
            rows = []
        rows.append(pts)
    if not rows:
        return np.empty((0, 3))
    return np.vstack(rows)


def swept_region(points: np.ndarray, tool_radius: float) -> Polygon | MultiPolygon:
    """XY area covered by a tool of *tool_radius* following *points*."""
    if len(points) == 0:
        return Polygon()
    if len(points) == 1:
        return ShapelyPoint(points[0, 0], points[0, 1]).buffer(tool_radius, quad_segs=32)
    return ensure_polygon(
        LineString(points[:, :2]).buffer(tool_radius, quad_segs=32)
    )


def uncut_region(
    points: np.ndarray,
    center: tuple[float, float],
    hole_radius: float,
    tool_radius: float,
) -> Polygon | MultiPolygon:
    """Part of the hole disk the tool never reaches."""
    disk = ShapelyPoint(center[0], center[1]).buffer(hole_radius, quad_segs=64)
    return ensure_polygon(disk.difference(swept_region(points, tool_radius)))
