from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import math

from .fmt import pretty
from .trace import CalculationStep, Trace, step

NOT_FOUND_WARNING = "Could not determine r1/2 (no crossing of Uc/2)."


@dataclass(frozen=True)
class HalfRadius:
    r_half: float
    method: str
    step: CalculationStep


def _crossing(y1: float, y2: float, target: float) -> Optional[float]:
    """Interpolation parameter t∈[0,1] if the pair brackets ``target`` from above."""
    if not (y1 >= target and y2 <= target):
        return None
    if y2 == y1:
        return 0.0
    return (target - y1) / (y2 - y1)


def rhalf_log_linear(r: Sequence[float], u: Sequence[float], Uc: float) -> Optional[HalfRadius]:
    """Interpolate ln(u) against r², where a Gaussian profile is a straight line.

    Samples with u <= 0 have no logarithm and are skipped, so a crossing that
    lies between a positive and a zero-velocity sample is not found here.
    """
    target_u = Uc / 2.0
    pts = [(ri * ri, math.log(ui)) for ri, ui in zip(r, u) if ui > 0]
    target = math.log(target_u)
    for (r2a, lna), (r2b, lnb) in zip(pts, pts[1:]):
        t = _crossing(lna, lnb, target)
        if t is None:
            continue
        r2_half = r2a + t * (r2b - r2a)
        r_half = math.sqrt(r2_half)
        s = step(
            "Half-velocity radius (interp.)",
            "(E4) u(r½)=½Uc on ln(u) vs r² plot",
            f"½Uc={pretty(target_u)} → r½²≈{pretty(r2_half)} → r½≈{pretty(r_half)}",
            r_half,
            "m",
        )
        return HalfRadius(r_half=r_half, method="log_linear", step=s)
    return None


def rhalf_linear(r: Sequence[float], u: Sequence[float], Uc: float) -> Optional[HalfRadius]:
    target_u = Uc / 2.0
    for i in range(len(u) - 1):
        t = _crossing(u[i], u[i + 1], target_u)
        if t is None:
            continue
        r_half = r[i] + t * (r[i + 1] - r[i])
        s = step(
            "Half-velocity radius (linear fallback)",
            "(E4) u(r½)=½Uc",
            f"½Uc={pretty(target_u)} → r½≈{pretty(r_half)}",
            r_half,
            "m",
        )
        return HalfRadius(r_half=r_half, method="linear", step=s)
    return None


STRATEGIES: List[Tuple[str, Callable[[Sequence[float], Sequence[float], float], Optional[HalfRadius]]]] = [
    ("log_linear", rhalf_log_linear),
    ("linear", rhalf_linear),
]


def solve_half_radius(r: Sequence[float], u: Sequence[float], Uc: float, trace: Trace) -> Optional[HalfRadius]:
    """
    Radius where u falls to ½Uc, or ``None`` when no sample pair brackets it.

    Parameters
    ----------
    r, u : sequence of float
        Radius-sorted samples [m], [m/s].
    Uc : float
        Centerline velocity; a non-finite or non-positive Uc is unresolvable.
    trace : Trace
        Receives the winning step, or a "not found" step plus a warning.
    """
    hit: Optional[HalfRadius] = None
    if math.isfinite(Uc) and Uc > 0:
        for _name, fn in STRATEGIES:
            hit = fn(r, u, Uc)
            if hit is not None:
                break
    if hit is None or not math.isfinite(hit.r_half):
        trace.add("rhalf", step("Half-velocity radius", "(E4) not found", "No crossing of ½Uc", float("nan"), "m"))
        trace.warn(NOT_FOUND_WARNING)
        return None
    trace.add("rhalf", hit.step)
    return hit
