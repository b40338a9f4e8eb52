from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math
import numpy as np

from .fmt import pretty
from .trace import Trace, step

LN2 = math.log(2.0)


@dataclass(frozen=True)
class CollapsePoint:
    xr: float  # r / r½
    ur: float  # u / Uc


def ideal_gaussian(xr):
    """Self-similar profile u/Uc = exp(-ln2·(r/r½)²); equals 0.5 at r/r½ = 1."""
    return np.exp(-LN2 * np.asarray(xr, dtype=float) ** 2)


def gaussian_reference(xr_max: float = 2.0, n: int = 101) -> Tuple[np.ndarray, np.ndarray]:
    """Reference curve for overlay plots, spanning at least 0 ≤ r/r½ ≤ 2."""
    hi = max(float(xr_max), 2.0) if math.isfinite(xr_max) else 2.0
    xr = np.linspace(0.0, hi, int(n))
    return xr, ideal_gaussian(xr)


def collapse_profile(
    r: Sequence[float],
    u: Sequence[float],
    Uc: float,
    r_half: Optional[float],
    trace: Trace,
) -> Tuple[List[CollapsePoint], Optional[float]]:
    """Normalise a profile by (r½, Uc) and score it against the ideal Gaussian.

    Returns the collapsed points and the RMSE; with no usable r½ the points
    are empty and the RMSE is ``None``.
    """
    if r_half is None or not (math.isfinite(r_half) and r_half > 0):
        return [], None
    pts: List[CollapsePoint] = []
    for ri, ui in zip(r, u):
        xr = ri / r_half
        ur = ui / Uc
        trace.add("collapse", step(
            f"Collapse (r={pretty(ri, 4)})",
            "(E9) xr=r/r½, ur=u/Uc",
            f"xr={pretty(ri, 4)}/{pretty(r_half, 4)}, ur={pretty(ui, 4)}/{pretty(Uc, 4)}",
            f"({pretty(xr, 4)}, {pretty(ur, 4)})",
            "",
        ))
        pts.append(CollapsePoint(xr=xr, ur=ur))
    if not pts:
        return pts, None
    sq_sum = 0.0
    for p in pts:
        ideal = math.exp(-LN2 * p.xr * p.xr)
        err = p.ur - ideal
        trace.add("collapse", step(
            f"RMSE point (xr={pretty(p.xr, 4)})",
            "(E10) err = ur - exp(-ln(2)·xr²)",
            f"err = {pretty(p.ur, 4)} - {pretty(ideal, 4)}",
            err * err,
            "",
        ))
        sq_sum += err * err
    rmse = math.sqrt(sq_sum / len(pts))
    trace.add("collapse", step("RMSE final", "RMSE=√(Σ(err²)/N)", f"RMSE=√({pretty(sq_sum, 4)}/{len(pts)})", rmse, ""))
    return pts, rmse
