from __future__ import annotations
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .fmt import pretty
from .physics import mm_to_m, to_pa, pitot_velocity
from .stations import ParsedRow
from .trace import CalculationStep, Trace, step


@dataclass(frozen=True)
class ComputedRow:
    r: float       # m
    dp_pa: float   # Pa
    u: float       # m/s
    steps: Tuple[CalculationStep, ...] = ()


def derive_row(row: ParsedRow, rho: float, unit_is_kpa: bool, keep_steps: bool = True) -> ComputedRow:
    """Convert one (r [mm], Δp) reading into a velocity sample with its derivation."""
    dp_pa = to_pa(row.dp, unit_is_kpa)
    u = pitot_velocity(dp_pa, rho)
    steps: Tuple[CalculationStep, ...] = ()
    if keep_steps:
        if unit_is_kpa:
            s1 = step("Δp convert", "(E1) Δp_Pa = 1000·Δp_kPa", f"Δp_kPa = {row.dp}", dp_pa, "Pa")
        else:
            s1 = step("Δp input", "(E1) Δp_Pa = Δp_Pa", f"Δp_Pa = {dp_pa}", dp_pa, "Pa")
        s2 = step(
            "Velocity from Pitot",
            "(E2) u = √(2Δp/ρ)",
            f"u = √(2·{pretty(dp_pa)} Pa / {rho} kg·m⁻³)",
            u,
            "m·s⁻¹",
        )
        steps = (s1, s2)
    return ComputedRow(r=mm_to_m(row.r_mm), dp_pa=dp_pa, u=u, steps=steps)


def sort_and_validate(rows: Sequence[ComputedRow], trace: Trace) -> List[ComputedRow]:
    """Sort by radius and record duplicate-radius / non-monotonic-decay warnings.

    Warnings never change the rows; the sorted sequence is returned as-is.
    """
    out = sorted(rows, key=lambda o: o.r)
    for i in range(1, len(out)):
        prev, cur = out[i - 1], out[i]
        if cur.r == prev.r:
            trace.warn(f"Duplicate r at {cur.r} m.")
        if cur.u > prev.u:
            trace.warn(
                f"Non-monotonic velocity profile detected near r={pretty(cur.r, 4)} m "
                f"(u increases from {pretty(prev.u, 4)} to {pretty(cur.u, 4)})."
            )
    return out
