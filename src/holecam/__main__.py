"""CLI entry point: ``python -m holecam --radius 5 --tool-radius 1 --step 1``"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config.defaults import build_default_tool_library
from .config.settings import AppSettings
from .core.geometry import Point
from .core.machine import MachineContext
from .core.tool import ToolLibrary
from .core.toolpath.hole import generate_hole_path
from .core.toolpath.verify import verify_hole_path
from .core.units import Units


def _load_tool_library() -> ToolLibrary:
    """User tool library, or the built-in defaults when it is empty."""
    lib = ToolLibrary(ToolLibrary.default_path())
    if lib.list_tools():
        return lib
    return build_default_tool_library()


def _build_parser(settings: AppSettings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="holecam",
        description="Generate a spiral hole-widening toolpath with helical exit.",
    )
    p.add_argument("--radius", type=float, required=True,
                   help="Target hole radius")
    p.add_argument(
        "--center", type=float, nargs=2, metavar=("X", "Y"), default=None,
        help="Hole center (default: the --start X Y)",
    )
    p.add_argument(
        "--start", type=float, nargs=3, metavar=("X", "Y", "Z"),
        default=(0.0, 0.0, 0.0),
        help="Tool position before the hole (default: 0 0 0)",
    )
    p.add_argument(
        "--units", choices=["inch", "mm"], default=settings.default_units,
        help=f"Working units (default: {settings.default_units})",
    )

    # Tool parameters
    p.add_argument("--tool-number", type=int, default=settings.default_tool,
                   help=f"Tool number from ~/.holecam/tools.json or the defaults "
                        f"(default: {settings.default_tool})")
    p.add_argument("--tool-radius", type=float, default=None,
                   help="Tool radius (overrides the tool library)")

    # Cut parameters
    p.add_argument("--step", type=float, default=None,
                   help=f"Radial cut step (default: "
                        f"{settings.default_step_fraction} x tool diameter)")
    p.add_argument("--cut-z", type=float, default=None,
                   help="Cut depth (default: from settings)")

    p.add_argument("--verify", action="store_true",
                   help="Check the path for gouges and uncut material")
    p.add_argument("-o", "--output", type=Path, default=None,
                   help="Write the command listing to a file instead of stdout")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Log every widening pass")

    return p


def main(argv: list[str] | None = None) -> int:
    settings = AppSettings.load()
    args = _build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    units = Units(args.units)
    start = Point.of(units, *args.start)
    ctx = MachineContext(units=units, position=start)

    # Tool setup
    if args.tool_radius is not None:
        tool_radius = args.tool_radius
        step = args.step if args.step is not None else (
            2 * tool_radius * settings.default_step_fraction
        )
    else:
        tool = _load_tool_library().get(args.tool_number)
        if tool is None:
            print(f"Error: tool T{args.tool_number} not found in tool library",
                  file=sys.stderr)
            return 1
        print(f"Tool: T{tool.number} {tool.name} (dia={tool.diameter}{tool.units.label()})")
        tool_radius = tool.radius
        step = args.step if args.step is not None else (
            tool.default_step(settings.default_step_fraction)
        )

    cut_z = args.cut_z if args.cut_z is not None else settings.cut_z
    center = args.center if args.center is not None else tuple(args.start[:2])

    result = generate_hole_path(ctx, center, args.radius, tool_radius, step, cut_z)

    for w in result.warnings:
        print(f"  Warning: {w}")
    if not result.ok:
        print(f"Error: {result.error.message}", file=sys.stderr)
        return 1

    print(f"  {result.iterations} passes, "
          f"{len(ctx.toolpath.motions)} motion commands")

    if args.verify:
        check = verify_hole_path(ctx.toolpath, result.request, start)
        for issue in check.issues:
            label = "ERROR" if issue.severity == "error" else "Warning"
            print(f"  {label}: {issue.message}")
        if check.has_errors:
            return 1

    lines = ctx.toolpath.listing()
    if args.output is not None:
        args.output.write_text("\n".join(lines) + "\n")
        print(f"Wrote {args.output}")
    else:
        for line in lines:
            print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
