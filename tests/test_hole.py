"""Tests for spiral hole widening: validation, passes and retraction."""

import pytest

from holecam.core.geometry import Point
from holecam.core.machine import MachineContext
from holecam.core.toolpath.base import MotionKind
from holecam.core.toolpath.hole import (
    ErrorKind,
    HoleParameterError,
    HoleRequest,
    SpiralState,
    generate_hole_path,
    plan_spiral,
    spiral_step,
    validate_hole_request,
)
from holecam.core.units import Distance, Units


def mm(v: float) -> Distance:
    return Distance(float(v), Units.MM)


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def ctx() -> MachineContext:
    return MachineContext(units=Units.MM, position=Point.of(Units.MM, 0, 0, 0))


def _request(target, tool, step, cut_z=-1.0) -> HoleRequest:
    return HoleRequest(
        center=Point.of(Units.MM, 0, 0),
        target_radius=mm(target),
        tool_radius=mm(tool),
        cut_step=mm(step),
        cut_z=mm(cut_z),
    )


# ---------------------------------------------------------------------------
# End-to-end examples
# ---------------------------------------------------------------------------


class TestEvenSteps:
    """center=(0,0), target 5, tool 1, step 1, cut_z -1, starting at the origin."""

    @pytest.fixture
    def result(self, ctx):
        return generate_hole_path(ctx, (0, 0), 5, 1, 1, -1)

    def test_succeeds_without_warnings(self, result):
        assert result.ok
        assert result.warnings == []

    def test_command_sequence(self, ctx, result):
        kinds = [c.kind for c in ctx.toolpath.commands]
        assert kinds == (
            [MotionKind.COMMENT, MotionKind.GOTO, MotionKind.MOVE]
            + [MotionKind.ARC_CW, MotionKind.CIRCLE_CW] * 4
            + [MotionKind.ARC_CW]
        )

    def test_single_plunge_to_cut_z(self, ctx, result):
        moves = ctx.toolpath.of_kind(MotionKind.MOVE)
        assert len(moves) == 1
        assert moves[0].point == Point(z=mm(-1))

    def test_goto_center_xy_only(self, ctx, result):
        goto = ctx.toolpath.of_kind(MotionKind.GOTO)[0]
        assert goto.point == Point.of(Units.MM, 0, 0)
        assert goto.point.z is None

    def test_radius_sequence(self, result):
        assert [p.radius_before.value for p in result.passes] == [1, 2, 3, 4]
        assert [p.radius_after.value for p in result.passes] == [2, 3, 4, 5]
        assert result.final_radius == mm(5)

    def test_arc_spans(self, ctx, result):
        assert [p.arc_span.value for p in result.passes] == [1, 3, 5, 7]
        arcs = ctx.toolpath.of_kind(MotionKind.ARC_CW)[:-1]
        assert [a.point.y.value for a in arcs] == [-1, 3, -5, 7]
        assert [a.radius.value for a in arcs] == [0.5, 1.5, 2.5, 3.5]
        assert all(a.point.x == mm(0) and a.point.z == mm(0) for a in arcs)

    def test_circles_around_center(self, ctx, result):
        circles = ctx.toolpath.of_kind(MotionKind.CIRCLE_CW)
        assert len(circles) == 4
        assert all(c.point == Point.of(Units.MM, 0, 0) for c in circles)

    def test_retraction_arc(self, ctx, result):
        retract = ctx.toolpath.commands[-1]
        assert retract.kind is MotionKind.ARC_CW
        assert retract.point == Point.of(Units.MM, 0, -4, 1)
        assert retract.radius == mm(2)

    def test_ends_at_entry_point(self, ctx, result):
        assert ctx.current_position() == Point.of(Units.MM, 0, 0, 0)

    def test_comment_lists_parameters(self, ctx, result):
        text = ctx.toolpath.commands[0].text
        assert "radius=5mm" in text
        assert "tool_radius=1mm" in text
        assert "cut_z=-1mm" in text


class TestResidualStep:
    """target 5.5, tool 1, step 2: two full steps then a 0.5 residual."""

    @pytest.fixture
    def result(self, ctx):
        return generate_hole_path(ctx, (0, 0), 5.5, 1, 2, -1)

    def test_passes(self, result):
        assert result.iterations == 3
        assert [p.full_step for p in result.passes] == [True, True, False]
        assert [p.radius_after.value for p in result.passes] == [3, 5, 5.5]

    def test_residual_arc_span(self, result):
        assert [p.arc_span.value for p in result.passes] == [
            pytest.approx(2), pytest.approx(6), pytest.approx(8.5),
        ]

    def test_final_radius_exact(self, result):
        assert result.final_radius == mm(5.5)

    def test_retraction(self, ctx, result):
        retract = ctx.toolpath.commands[-1]
        assert retract.point == Point.of(Units.MM, 0, 4.5, 1)
        assert retract.radius == mm(2.25)
        assert ctx.current_position() == Point.of(Units.MM, 0, 0, 0)

    def test_step_equal_to_diameter_warns(self, result):
        assert len(result.warnings) == 1
        assert "equals the tool diameter" in result.warnings[0]


# ---------------------------------------------------------------------------
# Spiral planning properties
# ---------------------------------------------------------------------------


class TestSpiralPlan:
    @pytest.mark.parametrize(
        "target, tool, step, expected",
        [
            (5.0, 1.0, 1.0, 4),
            (5.5, 1.0, 2.0, 3),
            (3.0, 1.0, 0.75, 3),
            (10.0, 0.5, 0.25, 38),
            (1.0, 0.1, 0.1, 9),
            (2.0, 1.0, 5.0, 1),
        ],
    )
    def test_iteration_count_and_exact_final_radius(self, target, tool, step, expected):
        req = _request(target, tool, step)
        passes, final = plan_spiral(req)
        assert len(passes) == expected
        assert final.current_radius == req.target_radius
        assert passes[-1].radius_after == req.target_radius

    def test_radius_strictly_increases(self):
        passes, _ = plan_spiral(_request(7.3, 0.4, 0.9))
        radii = [passes[0].radius_before] + [p.radius_after for p in passes]
        assert all(a < b for a, b in zip(radii, radii[1:]))

    def test_direction_alternates_from_minus_one(self):
        passes, final = plan_spiral(_request(7.0, 1.0, 1.0))
        assert [p.direction for p in passes] == [-1, 1, -1, 1, -1, 1]
        assert final.direction == -1

    def test_arc_span_formula(self):
        req = _request(7.3, 0.4, 0.9)
        passes, _ = plan_spiral(req)
        for p in passes:
            n = p.step_index
            if p.full_step:
                expected = (2 * n - 1) * 0.9
            else:
                expected = (2 * n - 2) * 0.9 + (7.3 - p.radius_before.value)
            assert p.arc_span.value == pytest.approx(expected)
        assert not passes[-1].full_step

    def test_exact_multiple_ends_on_full_step(self):
        passes, _ = plan_spiral(_request(4.0, 1.0, 0.5))
        assert all(p.full_step for p in passes)

    def test_single_step_state(self):
        req = _request(5.0, 1.0, 1.0)
        p, state = spiral_step(SpiralState(current_radius=mm(1)), req)
        assert p.step_index == 1
        assert p.direction == -1
        assert p.arc_span == mm(1)
        assert state == SpiralState(
            current_radius=mm(2), step_index=2, direction=1, arc_span=mm(1),
        )


# ---------------------------------------------------------------------------
# Parameter validation
# ---------------------------------------------------------------------------


class TestValueErrors:
    @pytest.mark.parametrize(
        "target, tool, step, name",
        [
            (0, 1, 1, "target_radius"),
            (-5, 1, 1, "target_radius"),
            (5, 0, 1, "tool_radius"),
            (5, -1, 1, "tool_radius"),
            (5, 1, 0, "cut_step"),
            (5, 1, -0.5, "cut_step"),
        ],
    )
    def test_non_positive_rejected(self, ctx, target, tool, step, name):
        result = generate_hole_path(ctx, (0, 0), target, tool, step, -1)
        assert not result.ok
        assert result.error.kind is ErrorKind.OUT_OF_RANGE
        assert name in result.error.message
        assert len(ctx.toolpath) == 0

    @pytest.mark.parametrize("target, tool", [(1, 1), (2, 3)])
    def test_tool_must_fit(self, ctx, target, tool):
        result = generate_hole_path(ctx, (0, 0), target, tool, 0.5, -1)
        assert result.error.kind is ErrorKind.OUT_OF_RANGE
        assert f"{target}mm" in result.error.message
        assert f"{tool}mm" in result.error.message
        assert ctx.toolpath.is_empty

    def test_error_reported_to_context(self, ctx):
        generate_hole_path(ctx, (0, 0), 1, 2, 0.5, -1)
        assert len(ctx.errors) == 1

    def test_validator_raises(self, ctx):
        with pytest.raises(HoleParameterError) as exc:
            validate_hole_request(ctx, (0, 0), 5, 1, 0, -1)
        assert exc.value.kind is ErrorKind.OUT_OF_RANGE
        assert isinstance(exc.value, ValueError)

    @pytest.mark.parametrize("bad", [float("nan"), float("inf"), float("-inf")])
    @pytest.mark.parametrize("position", range(4))
    def test_non_finite_rejected(self, ctx, bad, position):
        args = [5, 1, 1, -1]
        args[position] = bad
        result = generate_hole_path(ctx, (0, 0), *args)
        assert result.error.kind is ErrorKind.OUT_OF_RANGE
        assert result.passes == []
        assert len(ctx.toolpath) == 0

    def test_non_finite_distance_object_rejected(self, ctx):
        result = generate_hole_path(ctx, (0, 0), Distance(float("nan"), Units.INCH), 1, 1, -1)
        assert result.error.kind is ErrorKind.OUT_OF_RANGE

    @pytest.mark.parametrize("center", [(float("nan"), 0), (0, float("inf"))])
    def test_non_finite_center_rejected(self, ctx, center):
        result = generate_hole_path(ctx, center, 5, 1, 1, -1)
        assert result.error.kind is ErrorKind.OUT_OF_RANGE
        assert "center" in result.error.message
        assert ctx.toolpath.is_empty

    def test_error_kind_reaches_diagnostics(self, ctx):
        generate_hole_path(ctx, (0, 0), 5, 1, 0, -1)
        assert ctx.diagnostics[0].severity == "error"
        assert ctx.diagnostics[0].kind is ErrorKind.OUT_OF_RANGE


class TestTypeErrors:
    @pytest.mark.parametrize("bad", ["5", [5], (1, 2), True, None, object()])
    @pytest.mark.parametrize("position", range(4))
    def test_non_scalar_rejected(self, ctx, bad, position):
        args = [5, 1, 1, -1]
        args[position] = bad
        result = generate_hole_path(ctx, (0, 0), *args)
        assert result.error.kind is ErrorKind.TYPE_MISMATCH
        assert ctx.toolpath.is_empty

    def test_center_not_a_vector(self, ctx):
        result = generate_hole_path(ctx, 3.0, 5, 1, 1, -1)
        assert result.error.kind is ErrorKind.TYPE_MISMATCH

    def test_center_component_not_scalar(self, ctx):
        result = generate_hole_path(ctx, (0, "a"), 5, 1, 1, -1)
        assert result.error.kind is ErrorKind.TYPE_MISMATCH


class TestCenter:
    def test_empty_center(self, ctx):
        result = generate_hole_path(ctx, (), 5, 1, 1, -1)
        assert result.error.kind is ErrorKind.INVALID_ARGUMENT
        assert ctx.toolpath.is_empty

    def test_four_components(self, ctx):
        result = generate_hole_path(ctx, (0, 0, 0, 0), 5, 1, 1, -1)
        assert result.error.kind is ErrorKind.INVALID_ARGUMENT
        assert ctx.toolpath.is_empty

    def test_z_dropped_with_warning(self, ctx):
        result = generate_hole_path(ctx, (1, 2, 3), 5, 1, 1, -1)
        assert result.ok
        assert len(result.warnings) == 1
        assert "Z" in result.warnings[0]
        assert result.request.center == Point.of(Units.MM, 1, 2)
        goto = ctx.toolpath.of_kind(MotionKind.GOTO)[0]
        assert goto.point.z is None

    def test_undefined_z_no_warning(self, ctx):
        result = generate_hole_path(ctx, (1, 2, None), 5, 1, 1, -1)
        assert result.ok
        assert result.warnings == []

    def test_no_xy_uses_current_position(self):
        ctx = MachineContext(position=Point.of(Units.MM, 3, 4, 2))
        result = generate_hole_path(ctx, (None, None), 5, 1, 1, -1)
        assert result.ok
        assert len(result.warnings) == 1
        assert result.request.center == Point.of(Units.MM, 3, 4)

    def test_point_with_only_z(self):
        ctx = MachineContext(position=Point.of(Units.MM, 3, 4, 2))
        result = generate_hole_path(ctx, Point.of(Units.MM, z=7), 5, 1, 1, -1)
        assert result.ok
        # Z dropped, then XY defaulted
        assert len(result.warnings) == 2
        assert result.request.center == Point.of(Units.MM, 3, 4)

    def test_single_missing_axis_filled_silently(self):
        ctx = MachineContext(position=Point.of(Units.MM, 3, 4, 0))
        result = generate_hole_path(ctx, (None, 2), 5, 1, 1, -1)
        assert result.warnings == []
        assert result.request.center == Point.of(Units.MM, 3, 2)

    def test_single_component(self):
        ctx = MachineContext(position=Point.of(Units.MM, 3, 4, 0))
        result = generate_hole_path(ctx, [7], 5, 1, 1, -1)
        assert result.request.center == Point.of(Units.MM, 7, 4)

    def test_returns_to_entry_height(self):
        ctx = MachineContext(position=Point.of(Units.MM, 0, 0, 5))
        generate_hole_path(ctx, (10, 10), 5, 1, 1, -2)
        retract = ctx.toolpath.commands[-1]
        assert retract.point.z == mm(7)
        assert ctx.current_position() == Point.of(Units.MM, 10, 10, 5)


class TestCutStepAdvisory:
    def test_step_larger_than_diameter_warns_but_cuts(self, ctx):
        result = generate_hole_path(ctx, (0, 0), 10, 1, 3, -1)
        assert result.ok
        assert len(result.warnings) == 1
        assert "larger than the tool diameter" in result.warnings[0]
        assert not ctx.toolpath.is_empty

    def test_step_equal_to_diameter_warns_but_cuts(self, ctx):
        result = generate_hole_path(ctx, (0, 0), 10, 1, 2, -1)
        assert result.ok
        assert "equals the tool diameter" in result.warnings[0]
        assert not ctx.toolpath.is_empty

    def test_wordings_differ(self):
        a = MachineContext()
        b = MachineContext()
        generate_hole_path(a, (0, 0), 10, 1, 2, -1)
        generate_hole_path(b, (0, 0), 10, 1, 3, -1)
        assert a.warnings[0] != b.warnings[0]


class TestUnits:
    def test_numbers_take_active_units(self):
        ctx = MachineContext(units=Units.INCH)
        result = generate_hole_path(ctx, (0, 0), 0.5, 0.125, 0.1, -0.05)
        assert result.request.target_radius == Distance(0.5, Units.INCH)
        assert result.request.cut_step.units is Units.INCH

    def test_distances_converted_to_active_units(self):
        ctx = MachineContext(units=Units.INCH)
        result = generate_hole_path(
            ctx, (Distance(25.4, Units.MM), 0), 0.5, Distance(2.54, Units.MM),
            0.1, -0.05,
        )
        req = result.request
        assert req.tool_radius.units is Units.INCH
        assert req.tool_radius.value == pytest.approx(0.1)
        assert req.center.x.value == pytest.approx(1.0)


class TestRepeatedCalls:
    def test_calls_are_independent(self, ctx):
        first = generate_hole_path(ctx, (0, 0), 10, 1, 3, -1)
        second = generate_hole_path(ctx, (20, 0), 5, 1, 1, -1)
        assert len(first.warnings) == 1
        assert second.warnings == []
        assert second.iterations == 4
        gotos = ctx.toolpath.of_kind(MotionKind.GOTO)
        assert [g.point.x.value for g in gotos] == [0, 20]

    def test_failed_call_does_not_disturb_earlier_output(self, ctx):
        generate_hole_path(ctx, (0, 0), 5, 1, 1, -1)
        before = list(ctx.toolpath.commands)
        result = generate_hole_path(ctx, (0, 0), 5, 1, 0, -1)
        assert not result.ok
        assert ctx.toolpath.commands == before
