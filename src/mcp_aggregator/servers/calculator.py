"""
Calculator MCP server — a small child server to aggregate.

Provides: calculate (math expressions) and convert_units.

Run as:
    python -m mcp_aggregator.servers.calculator
"""

from __future__ import annotations

import math
from typing import Any

from mcp.server.fastmcp import FastMCP

mcp = FastMCP("calculator")

# Safe math namespace
SAFE_MATH = {
    "abs": abs, "round": round, "min": min, "max": max, "sum": sum,
    "pow": pow, "int": int, "float": float,
    "sqrt": math.sqrt, "log": math.log, "log10": math.log10, "log2": math.log2,
    "sin": math.sin, "cos": math.cos, "tan": math.tan,
    "pi": math.pi, "e": math.e,
    "ceil": math.ceil, "floor": math.floor,
}

UNIT_CONVERSIONS = {
    ("km", "miles"): 0.621371,
    ("miles", "km"): 1.60934,
    ("kg", "lb"): 2.20462,
    ("lb", "kg"): 0.453592,
    ("m", "ft"): 3.28084,
    ("ft", "m"): 0.3048,
    ("celsius", "fahrenheit"): lambda v: v * 9 / 5 + 32,
    ("fahrenheit", "celsius"): lambda v: (v - 32) * 5 / 9,
}


@mcp.tool()
def calculate(expression: str) -> dict[str, Any]:
    """Evaluate a mathematical expression safely. Supports standard math functions."""
    try:
        result = eval(expression, {"__builtins__": {}}, SAFE_MATH)
        return {"expression": expression, "result": float(result)}
    except Exception as e:
        return {"expression": expression, "error": str(e)}


@mcp.tool()
def convert_units(value: float, from_unit: str, to_unit: str) -> dict[str, Any]:
    """Convert between common units (length, weight, temperature)."""
    key = (from_unit.lower(), to_unit.lower())
    conversion = UNIT_CONVERSIONS.get(key)

    if conversion is None:
        supported = [f"{f}->{t}" for f, t in UNIT_CONVERSIONS]
        return {"error": f"Unsupported conversion: {from_unit} -> {to_unit}. Supported: {supported}"}

    result = conversion(value) if callable(conversion) else value * conversion
    return {"value": value, "from": key[0], "to": key[1], "result": round(result, 6)}


def main():
    mcp.run()


if __name__ == "__main__":
    main()
