from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence
import logging
import math

from .physics import cm_to_m

DEFAULT_RHO = 1.204   # kg/m^3
DEFAULT_D_CM = 2.54   # nozzle exit diameter [cm]
P_UNITS = ("kpa", "pa")

logger = logging.getLogger(__name__)


def parse_float(v: Any) -> float:
    """Lenient number parse for form/CSV text; anything unparseable becomes NaN."""
    if v is None:
        return float("nan")
    if isinstance(v, (int, float)):
        return float(v)
    try:
        return float(str(v).strip())
    except ValueError:
        return float("nan")


@dataclass
class RawRow:
    r: Any   # radius [mm], text as entered
    dp: Any  # differential pressure in the configured unit, text as entered


@dataclass(frozen=True)
class ParsedRow:
    r_mm: float
    dp: float


@dataclass
class Station:
    """One axial traverse as entered: x/D, bench metadata and its raw rows.

    ``variac`` (supply voltage) and ``port1`` (reference Δp) are carried into
    the results for reporting only.
    """
    id: str
    xd: Any
    variac: Any = ""
    port1: Any = ""
    rows: List[RawRow] = field(default_factory=list)


def parse_rows(rows: Sequence[RawRow]) -> List[ParsedRow]:
    """Keep rows whose radius and Δp both parse to finite numbers, in input order.

    Radii are measured from the jet axis, so readings at r < 0 (the far half
    of a traverse across the jet) are dropped along with unparseable rows.
    """
    out: List[ParsedRow] = []
    for row in rows:
        r_mm = parse_float(row.r)
        dp = parse_float(row.dp)
        if math.isfinite(r_mm) and math.isfinite(dp) and r_mm >= 0:
            out.append(ParsedRow(r_mm=r_mm, dp=dp))
    return out


@dataclass
class GlobalSettings:
    """Run-wide inputs; values may be free text as typed into the form.

    Use the ``resolved_*`` helpers to get the numbers actually used, with
    documented fallbacks instead of errors.
    """
    rho: Any = DEFAULT_RHO           # kg/m^3
    d_cm: Any = DEFAULT_D_CM         # nozzle exit diameter [cm]
    p_units: str = "kpa"             # "kpa" | "pa"
    contraction: Any = ""            # contraction ratio; reporting only
    show_steps: bool = True          # retain the full step trace

    def resolved_rho(self) -> float:
        return _positive_or_default(self.rho, DEFAULT_RHO, "rho")

    def resolved_d_cm(self) -> float:
        return _positive_or_default(self.d_cm, DEFAULT_D_CM, "d_cm")

    def resolved_d_m(self) -> float:
        return cm_to_m(self.resolved_d_cm())

    def resolved_unit_is_kpa(self) -> bool:
        mode = str(self.p_units or "").strip().lower()
        if mode not in P_UNITS:
            logger.warning("Unknown pressure unit %r; treating Δp as Pa", self.p_units)
        return mode == "kpa"

    def resolved_contraction(self) -> Optional[float]:
        c = parse_float(self.contraction)
        return c if math.isfinite(c) else None


def _positive_or_default(raw: Any, default: float, name: str) -> float:
    v = parse_float(raw)
    if math.isfinite(v) and v > 0:
        return v
    if raw not in (None, ""):
        logger.warning("Invalid %s=%r; falling back to %s", name, raw, default)
    return default
