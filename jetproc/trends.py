from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Optional
import math
import pandas as pd

from .analysis import ComputedResults
from .collapse import ideal_gaussian

# Momentum flux of a free jet should be conserved downstream; a drift larger
# than this between first and last station is flagged.
MOMENTUM_TOLERANCE_PCT = 15.0

SUMMARY_COLUMNS = [
    "station", "x_D", "variac_V", "port1", "Uc_m_s", "r_half_m", "mdot_kg_s",
    "mdot_trapz_kg_s", "I_N", "I_trapz_N", "rmse", "n_points", "uc_method",
    "rhalf_method", "n_warnings", "contraction",
]


@dataclass(frozen=True)
class TrendKPIs:
    xd_first: float
    xd_last: float
    dUc_pct: float
    dmdot_pct: float
    dI_pct: float

    @property
    def momentum_conserved(self) -> bool:
        return math.isfinite(self.dI_pct) and abs(self.dI_pct) < MOMENTUM_TOLERANCE_PCT

    def to_dict(self) -> dict:
        d = asdict(self)
        d["momentum_conserved"] = self.momentum_conserved
        return d


def pct_change(last: float, first: float) -> float:
    return 100.0 * (last - first) / first if first != 0 else float("nan")


def trend_kpis(results: ComputedResults) -> Optional[TrendKPIs]:
    """Percent change of Uc, ṁ and I from the nearest to the farthest station.

    Entrainment shows up as ṁ growth, centerline decay as negative dUc.
    Needs at least two stations.
    """
    if len(results.results) < 2:
        return None
    ordered = sorted(results.results, key=lambda s: s.xd)
    first, last = ordered[0], ordered[-1]
    return TrendKPIs(
        xd_first=first.xd,
        xd_last=last.xd,
        dUc_pct=pct_change(last.Uc, first.Uc),
        dmdot_pct=pct_change(last.mdot, first.mdot),
        dI_pct=pct_change(last.I, first.I),
    )


def summary_table(results: ComputedResults) -> pd.DataFrame:
    """One row per station, in result order."""
    contraction = results.globals.resolved_contraction()
    rows = [{
        "station": st.id,
        "x_D": st.xd,
        "variac_V": st.variac,
        "port1": st.port1,
        "Uc_m_s": st.Uc,
        "r_half_m": st.r_half,
        "mdot_kg_s": st.mdot,
        "mdot_trapz_kg_s": st.mdot_trapz,
        "I_N": st.I,
        "I_trapz_N": st.I_trapz,
        "rmse": st.rmse,
        "n_points": len(st.rows),
        "uc_method": st.uc_method,
        "rhalf_method": st.rhalf_method,
        "n_warnings": len(st.trace.warnings),
        "contraction": contraction,
    } for st in results.results]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def rows_table(results: ComputedResults) -> pd.DataFrame:
    """Long-form per-point velocities across all stations."""
    recs = [
        {"station": st.id, "x_D": st.xd, "r_m": row.r, "dp_pa": row.dp_pa, "u_m_s": row.u}
        for st in results.results for row in st.rows
    ]
    return pd.DataFrame(recs, columns=["station", "x_D", "r_m", "dp_pa", "u_m_s"])


def collapse_table(results: ComputedResults) -> pd.DataFrame:
    """Long-form collapsed points with the ideal Gaussian and residual per point."""
    recs = []
    for st in results.results:
        for p in st.collapse:
            ideal = float(ideal_gaussian(p.xr))
            recs.append({"station": st.id, "x_D": st.xd, "xr": p.xr, "ur": p.ur,
                         "ur_gaussian": ideal, "err": p.ur - ideal})
    return pd.DataFrame(recs, columns=["station", "x_D", "xr", "ur", "ur_gaussian", "err"])
