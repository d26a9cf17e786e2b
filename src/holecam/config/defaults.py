"""Default tools and hole parameters.

These are conservative starting points; adjust to the actual tooling and
material.
"""

from ..core.tool import Tool, ToolLibrary
from ..core.units import Units

# Radial step as a fraction of tool diameter
DEFAULT_STEP_FRACTION = 0.4

# Cut depth below the entry height, per unit system
DEFAULT_CUT_Z = {
    Units.MM: -1.0,
    Units.INCH: -0.04,
}


def build_default_tool_library() -> ToolLibrary:
    """Return an in-memory ToolLibrary with common flat end mills."""
    lib = ToolLibrary()

    tools = [
        Tool(1, "6 mm Flat Endmill 3-flute", 6.0, Units.MM,
             flute_count=3, flute_length=16.0),
        Tool(2, "3 mm Flat Endmill 2-flute", 3.0, Units.MM,
             flute_count=2, flute_length=10.0),
        Tool(3, "2 mm Flat Endmill 2-flute", 2.0, Units.MM,
             flute_count=2, flute_length=6.0),
        Tool(4, "1/4\" Flat Endmill 2-flute", 0.25, Units.INCH,
             flute_count=2, flute_length=0.75),
        Tool(5, "1/8\" Flat Endmill 2-flute", 0.125, Units.INCH,
             flute_count=2, flute_length=0.5),
    ]

    for t in tools:
        lib.add(t)

    return lib
