"""Centerline velocity Uc from the innermost radial samples.

Uc is rarely measured directly, so it is inferred by an ordered chain of
strategies (first success wins):

``direct``
    the traverse contains r = 0 exactly; Uc is that sample.
``quadratic``
    fit u = a·r² + Uc through the two innermost samples.  When their r²
    coincide to within ``R2_EPS`` the fit degenerates and u(r) is linearly
    extrapolated to r = 0 instead.
``assumed``
    fewer than two usable samples; Uc is taken as the innermost velocity and
    a warning is raised.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .fmt import pretty
from .trace import CalculationStep, Trace, step

R2_EPS = 1e-12


@dataclass(frozen=True)
class CenterlineEstimate:
    Uc: float
    method: str
    steps: Tuple[CalculationStep, ...] = ()
    warnings: Tuple[str, ...] = field(default_factory=tuple)


def uc_direct(r: Sequence[float], u: Sequence[float]) -> Optional[CenterlineEstimate]:
    if not r or r[0] != 0:
        return None
    Uc = u[0]
    s = step("Centerline velocity", "(E3) Uc = u(r=0)", f"Uc = u(0) = {pretty(Uc)} m·s⁻¹", Uc, "m·s⁻¹")
    return CenterlineEstimate(Uc=Uc, method="direct", steps=(s,))


def uc_quadratic(r: Sequence[float], u: Sequence[float]) -> Optional[CenterlineEstimate]:
    if len(r) < 2:
        return None
    r1, u1, r2, u2 = r[0], u[0], r[1], u[1]
    r1_sq = r1 * r1
    r2_sq = r2 * r2
    if abs(r1_sq - r2_sq) < R2_EPS:
        if r2 == r1:
            return None
        Uc = u1 + (u2 - u1) * (0.0 - r1) / (r2 - r1)
        s = step(
            "Centerline (linear fallback)",
            "(E3i) Uc = u1 + (u2-u1)*(0-r1)/(r2-r1)",
            f"u1={pretty(u1)}, u2={pretty(u2)}, r1={pretty(r1)} m, r2={pretty(r2)} m",
            Uc,
            "m·s⁻¹",
        )
        return CenterlineEstimate(Uc=Uc, method="linear", steps=(s,))
    a = (u1 - u2) / (r1_sq - r2_sq)
    Uc = u1 - a * r1_sq
    s = step(
        "Centerline (quadratic extrap.)",
        "(E3q) u=a·r²+Uc fit to first 2 pts",
        f"a={pretty(a)}, u1={pretty(u1)}, r1={pretty(r1)} → Uc={pretty(Uc)}",
        Uc,
        "m·s⁻¹",
    )
    return CenterlineEstimate(Uc=Uc, method="quadratic", steps=(s,))


def uc_assumed(r: Sequence[float], u: Sequence[float]) -> CenterlineEstimate:
    Uc = u[0] if u else float("nan")
    r0 = r[0] if r else float("nan")
    s = step("Centerline velocity (assumed)", "(E3) Uc = u(r_min)", f"Uc ≈ u({pretty(r0)}) = {pretty(Uc)}", Uc, "m·s⁻¹")
    return CenterlineEstimate(
        Uc=Uc,
        method="assumed",
        steps=(s,),
        warnings=("Cannot extrapolate Uc, not enough data points with r>0.",),
    )


STRATEGIES: List[Tuple[str, Callable[[Sequence[float], Sequence[float]], Optional[CenterlineEstimate]]]] = [
    ("direct", uc_direct),
    ("quadratic", uc_quadratic),
    ("assumed", uc_assumed),
]


def estimate_centerline(r: Sequence[float], u: Sequence[float], trace: Trace) -> CenterlineEstimate:
    """Run the strategy chain on radius-sorted samples and log the winner into ``trace``."""
    for _name, fn in STRATEGIES:
        est = fn(r, u)
        if est is None:
            continue
        for w in est.warnings:
            trace.warn(w)
        for s in est.steps:
            trace.add("Uc", s)
        return est
    raise AssertionError("uc_assumed always resolves")  # pragma: no cover
