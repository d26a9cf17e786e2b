"""Spiral hole widening with a helical exit.

Algorithm
---------
1. Go to the hole center and plunge straight to ``cut_z``.  The plunge
   itself opens a hole of ``tool_radius``.
2. While the cut radius is below ``target_radius``, widen by ``cut_step``
   (or by the remaining residual on the last pass):

   * a clockwise half-circle along the Y axis carries the tool from the
     previous circle to the opposite side of the next, larger one, so no
     straight segment joins the two passes;
   * a clockwise full circle around the center removes the material at the
     new radius.

   The half-circles alternate sides of the center line, starting on -Y.
3. A single helical half-circle returns the tool to the center while
   climbing back to the Z it had before the plunge.

All arithmetic is done with :class:`~holecam.core.units.Distance` values in
the context's active units.  Raw arguments are normalized exactly once, in
:func:`validate_hole_request`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from ..geometry import (
    Point,
    component_count,
    is_distance,
    is_scalar,
    is_unspecified,
    is_vector,
    take_components,
    to_distance,
)
from ..units import Distance

if TYPE_CHECKING:
    from ..machine import MachineContext

logger = logging.getLogger(__name__)

# Relative to cut_step; absorbs float drift from repeated additions.
_REL_TOL = 1e-9


class ErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    TYPE_MISMATCH = "type_mismatch"
    OUT_OF_RANGE = "out_of_range"


class HoleParameterError(ValueError):
    """A hole request that cannot be milled."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class HoleRequest:
    """Validated hole parameters, all in the same unit system."""

    center: Point          # XY only
    target_radius: Distance
    tool_radius: Distance
    cut_step: Distance
    cut_z: Distance

    @property
    def radial_travel(self) -> Distance:
        """Distance of the last circle's tool center from the hole center."""
        return self.target_radius - self.tool_radius


@dataclass(frozen=True)
class SpiralState:
    current_radius: Distance
    step_index: int = 1
    direction: int = -1
    arc_span: Optional[Distance] = None


@dataclass(frozen=True)
class SpiralPass:
    """One widening pass: the connecting arc plus the circle it leads into."""

    step_index: int
    direction: int
    arc_span: Distance
    radius_before: Distance
    radius_after: Distance
    full_step: bool


@dataclass
class HoleResult:
    """Outcome of one :func:`generate_hole_path` call."""

    request: Optional[HoleRequest] = None
    error: Optional[HoleParameterError] = None
    warnings: list[str] = field(default_factory=list)
    passes: list[SpiralPass] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def iterations(self) -> int:
        return len(self.passes)

    @property
    def final_radius(self) -> Optional[Distance]:
        return self.passes[-1].radius_after if self.passes else None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_center(context: MachineContext, center: Any) -> Point:
    if not is_vector(center):
        raise HoleParameterError(
            ErrorKind.TYPE_MISMATCH,
            f"center must be a vector, got {type(center).__name__}",
        )
    n = component_count(center)
    if n == 0:
        raise HoleParameterError(
            ErrorKind.INVALID_ARGUMENT, "center must have at least one component",
        )
    if n > 3:
        raise HoleParameterError(
            ErrorKind.INVALID_ARGUMENT,
            f"center has {n} components, at most 3 (X, Y, Z) are allowed",
        )

    comps = take_components(center, 3)
    for axis, c in zip("XYZ", comps):
        if not is_unspecified(c) and not is_scalar(c):
            raise HoleParameterError(
                ErrorKind.TYPE_MISMATCH,
                f"center {axis} must be a scalar distance, got {type(c).__name__}",
            )

    if not is_unspecified(comps[2]):
        context.report_warning(
            f"center Z ({comps[2]}) ignored, the cut depth is set by cut_z"
        )

    here = context.current_position()
    x, y = comps[0], comps[1]
    if is_unspecified(x) and is_unspecified(y):
        context.report_warning(
            f"center has no X or Y, using the current position {here.xy()}"
        )
        return here.xy()

    return Point(
        here.x if is_unspecified(x) else _validate_distance(context, "center X", x),
        here.y if is_unspecified(y) else _validate_distance(context, "center Y", y),
    )


def _validate_distance(context: MachineContext, name: str, value: Any) -> Distance:
    if not is_distance(value):
        raise HoleParameterError(
            ErrorKind.TYPE_MISMATCH,
            f"{name} must be a scalar distance, got {type(value).__name__}",
        )
    d = to_distance(value, context.units)
    if not math.isfinite(d.value):
        raise HoleParameterError(
            ErrorKind.OUT_OF_RANGE, f"{name} must be finite, got {d}",
        )
    return d


def validate_hole_request(
    context: MachineContext,
    center: Any,
    target_radius: Any,
    tool_radius: Any,
    cut_step: Any,
    cut_z: Any,
) -> HoleRequest:
    """Normalize raw call arguments into a :class:`HoleRequest`.

    Warnings are reported to *context* as they are found.

    Raises
    ------
    HoleParameterError:
        On the first argument that makes the hole impossible to mill.
    """
    center_xy = _validate_center(context, center)

    target = _validate_distance(context, "target_radius", target_radius)
    tool = _validate_distance(context, "tool_radius", tool_radius)
    step = _validate_distance(context, "cut_step", cut_step)
    z = _validate_distance(context, "cut_z", cut_z)

    for name, value in (
        ("target_radius", target), ("tool_radius", tool), ("cut_step", step),
    ):
        if not value > context.zero():
            raise HoleParameterError(
                ErrorKind.OUT_OF_RANGE,
                f"{name} must be greater than zero, got {value}",
            )

    if not target > tool:
        raise HoleParameterError(
            ErrorKind.OUT_OF_RANGE,
            f"target_radius ({target}) must be larger than "
            f"tool_radius ({tool}), the tool does not fit in the hole",
        )

    diameter = 2 * tool
    if math.isclose(step.value, diameter.value, rel_tol=_REL_TOL):
        context.report_warning(
            f"cut_step ({step}) equals the tool diameter, "
            f"passes only touch and thin ridges may remain"
        )
    elif step > diameter:
        context.report_warning(
            f"cut_step ({step}) is larger than the tool diameter ({diameter}), "
            f"material will be left between passes"
        )

    return HoleRequest(center_xy, target, tool, step, z)


# ---------------------------------------------------------------------------
# Spiral planning
# ---------------------------------------------------------------------------


def spiral_step(
    state: SpiralState, request: HoleRequest
) -> tuple[SpiralPass, SpiralState]:
    """Advance *state* by one widening pass."""
    n = state.step_index
    step = request.cut_step
    target = request.target_radius
    remaining = target - state.current_radius
    tol = step * _REL_TOL

    if remaining >= step - tol:
        full = True
        arc_span = (2 * n - 1) * step
        radius = state.current_radius + step
        if abs(target - radius) <= tol:
            radius = target
    else:
        full = False
        arc_span = (2 * n - 2) * step + remaining
        radius = target

    p = SpiralPass(
        step_index=n,
        direction=state.direction,
        arc_span=arc_span,
        radius_before=state.current_radius,
        radius_after=radius,
        full_step=full,
    )
    return p, SpiralState(
        current_radius=radius,
        step_index=n + 1,
        direction=-state.direction,
        arc_span=arc_span,
    )


def plan_spiral(request: HoleRequest) -> tuple[list[SpiralPass], SpiralState]:
    """All widening passes for *request*, and the state after the last one."""
    state = SpiralState(current_radius=request.tool_radius)
    passes: list[SpiralPass] = []
    while state.current_radius < request.target_radius:
        p, state = spiral_step(state, request)
        passes.append(p)
    return passes, state


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


def _emit_pass(context: MachineContext, request: HoleRequest, p: SpiralPass) -> None:
    zero = context.zero()
    context.arc_cw_relative(
        Point(zero, p.direction * p.arc_span, zero), p.arc_span / 2,
    )
    context.circle_cw_around(request.center)


def _emit_retract(
    context: MachineContext,
    request: HoleRequest,
    direction: int,
    original_z: Distance,
) -> None:
    travel = request.radial_travel
    context.arc_cw_relative(
        Point(context.zero(), direction * travel, original_z - request.cut_z),
        travel / 2,
    )


def generate_hole_path(
    context: MachineContext,
    center: Any,
    target_radius: Any,
    tool_radius: Any,
    cut_step: Any,
    cut_z: Any,
) -> HoleResult:
    """Mill a circular hole out to *target_radius* and return to the entry.

    Motion commands are appended to *context*.  Invalid parameters are
    reported through the context and returned in ``HoleResult.error``; no
    motion is emitted in that case.
    """
    seen = len(context.warnings)
    try:
        request = validate_hole_request(
            context, center, target_radius, tool_radius, cut_step, cut_z,
        )
    except HoleParameterError as exc:
        context.report_error(exc.message, exc.kind)
        return HoleResult(error=exc, warnings=context.warnings[seen:])

    passes, final = plan_spiral(request)

    context.report_comment(
        f"hole center={request.center} radius={request.target_radius} "
        f"tool_radius={request.tool_radius} step={request.cut_step} "
        f"cut_z={request.cut_z}"
    )
    context.goto_absolute(request.center)
    original_z = context.current_position().z
    context.move_absolute(Point(z=request.cut_z))

    for p in passes:
        logger.debug(
            "pass %d: span=%s radius %s -> %s (%s)",
            p.step_index, p.arc_span, p.radius_before, p.radius_after,
            "full" if p.full_step else "residual",
        )
        _emit_pass(context, request, p)

    _emit_retract(context, request, final.direction, original_z)

    return HoleResult(
        request=request,
        warnings=context.warnings[seen:],
        passes=passes,
    )
