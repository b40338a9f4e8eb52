from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math
import numpy as np

from .fmt import pretty
from .trace import Trace, TrapezoidSegment, step

TAIL_SKIPPED_WARNING = "Tail correction for integrals skipped (Uc or r1/2 not available)."


@dataclass(frozen=True)
class FluxIntegral:
    trapz: float
    tail: Optional[float]
    segments: Tuple[TrapezoidSegment, ...]

    @property
    def total(self) -> float:
        return self.trapz + (self.tail if self.tail is not None else 0.0)


def trapezoid_segments(r: np.ndarray, u: np.ndarray, integrand: np.ndarray) -> List[TrapezoidSegment]:
    """Per-segment trapezoids ½(f_i+f_{i+1})·Δr of a radial integrand, kept for audit."""
    dr = np.diff(r)
    areas = 0.5 * (integrand[:-1] + integrand[1:]) * dr
    return [
        TrapezoidSegment(
            i=i,
            r_i=float(r[i]), u_i=float(u[i]), value_i=float(integrand[i]),
            r_ip1=float(r[i + 1]), u_ip1=float(u[i + 1]), value_ip1=float(integrand[i + 1]),
            dr=float(dr[i]), area=float(areas[i]),
        )
        for i in range(len(dr))
    ]


def gaussian_decay_constant(r_half: float) -> float:
    """B in u = Uc·exp(-B·r²) such that u(r½) = ½Uc; inf when r½² underflows to 0."""
    r2 = r_half * r_half
    return math.log(2.0) / r2 if r2 > 0 else math.inf


def mass_tail(rho: float, Uc: float, B: float, r_n: float) -> float:
    """∫_{rₙ}^∞ 2πρ·Uc·exp(-Br²)·r dr for the Gaussian similarity profile."""
    return (math.pi * rho * Uc / B) * math.exp(-B * r_n * r_n)


def momentum_tail(rho: float, Uc: float, B: float, r_n: float) -> float:
    """∫_{rₙ}^∞ 2πρ·Uc²·exp(-2Br²)·r dr for the Gaussian similarity profile."""
    return (math.pi * rho * Uc * Uc / (2.0 * B)) * math.exp(-2.0 * B * r_n * r_n)


def integrate_fluxes(
    r: Sequence[float],
    u: Sequence[float],
    rho: float,
    Uc: float,
    r_half: Optional[float],
    trace: Trace,
) -> Tuple[FluxIntegral, FluxIntegral]:
    """
    Mass flow ṁ = 2π∫ρur dr and momentum flux I = 2π∫ρu²r dr.

    The measured span is integrated with the trapezoidal rule; the unmeasured
    tail beyond the outermost radius is closed analytically assuming the
    Gaussian similarity profile.  The tail is skipped (with a warning) when
    Uc or r½ is unavailable, leaving the trapezoid totals as final.

    Returns
    -------
    (mass, momentum) : tuple of FluxIntegral
    """
    r_arr = np.asarray(r, dtype=float)
    u_arr = np.asarray(u, dtype=float)
    f = rho * u_arr * r_arr
    g = rho * u_arr * u_arr * r_arr
    seg_f = trapezoid_segments(r_arr, u_arr, f)
    seg_g = trapezoid_segments(r_arr, u_arr, g)
    for s in seg_f:
        trace.add_segment("mdot", s)
    for s in seg_g:
        trace.add_segment("I", s)
    mdot_trapz = 2.0 * math.pi * math.fsum(s.area for s in seg_f)
    I_trapz = 2.0 * math.pi * math.fsum(s.area for s in seg_g)
    trace.add("mdot", step("Mass flow (trapezoid)", "(E5)+(E6)", "2π·Σ ½(f_i+f_{i+1})Δr", mdot_trapz, "kg·s⁻¹"))
    trace.add("I", step("Momentum (trapezoid)", "(E7)+(E8)", "2π·Σ ½(g_i+g_{i+1})Δr", I_trapz, "N"))

    B = gaussian_decay_constant(r_half) if r_half is not None and r_half > 0 else math.nan
    can_close = math.isfinite(Uc) and math.isfinite(B) and B > 0 and r_arr.size > 0
    if not can_close:
        trace.warn(TAIL_SKIPPED_WARNING)
        return (
            FluxIntegral(trapz=mdot_trapz, tail=None, segments=tuple(seg_f)),
            FluxIntegral(trapz=I_trapz, tail=None, segments=tuple(seg_g)),
        )

    r_n = float(r_arr[-1])
    tail_m = mass_tail(rho, Uc, B, r_n)
    tail_I = momentum_tail(rho, Uc, B, r_n)
    mdot = mdot_trapz + tail_m
    I = I_trapz + tail_I
    trace.add("mdot", step(
        "Mass flow (tail correction)",
        "(E6t) ṁ_tail = (πρUc/B)·exp(-B·rₙ²)",
        f"B={pretty(B, 4)}, rₙ={pretty(r_n, 4)} → ṁ_tail={pretty(tail_m)}",
        tail_m,
        "kg·s⁻¹",
    ))
    trace.add("mdot", step(
        "Mass flow (total)",
        "(E6 F) ṁ = ṁ_trapz + ṁ_tail",
        f"{pretty(mdot_trapz)} + {pretty(tail_m)} = {pretty(mdot)}",
        mdot,
        "kg·s⁻¹",
    ))
    trace.add("I", step(
        "Momentum (tail correction)",
        "(E8t) ℑ_tail = (πρUc²/(2B))·exp(-2B·rₙ²)",
        f"B={pretty(B, 4)}, rₙ={pretty(r_n, 4)} → ℑ_tail={pretty(tail_I)}",
        tail_I,
        "N",
    ))
    trace.add("I", step(
        "Momentum (total)",
        "(E8 F) ℑ = ℑ_trapz + ℑ_tail",
        f"{pretty(I_trapz)} + {pretty(tail_I)} = {pretty(I)}",
        I,
        "N",
    ))
    return (
        FluxIntegral(trapz=mdot_trapz, tail=tail_m, segments=tuple(seg_f)),
        FluxIntegral(trapz=I_trapz, tail=tail_I, segments=tuple(seg_g)),
    )
