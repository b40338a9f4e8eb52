from __future__ import annotations
import math


def pretty(val, digits: int = 6) -> str:
    """Render a number for trace/report display.

    Strings pass through untouched, non-finite values render as an em dash,
    very small or very large magnitudes switch to scientific notation.
    """
    if isinstance(val, str):
        return val
    v = float(val)
    if not math.isfinite(v):
        return "—"
    a = abs(v)
    if a != 0 and (a < 1e-3 or a >= 1e4):
        return f"{v:.3e}"
    return f"{v:.{int(digits)}f}"
