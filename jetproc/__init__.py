
"""
jetproc - turbulent round-jet pitot traverse reduction with a step-by-step audit trace.
"""

__version__ = "0.1.0"

from .fmt import pretty
from .physics import pitot_velocity, gaussian_profile, dp_from_velocity
from .trace import CalculationStep, TrapezoidSegment, Trace, format_trace
from .stations import RawRow, ParsedRow, Station, GlobalSettings, DEFAULT_RHO, DEFAULT_D_CM
from .rows import ComputedRow, derive_row, sort_and_validate
from .centerline import CenterlineEstimate, estimate_centerline
from .half_radius import HalfRadius, solve_half_radius
from .flux import FluxIntegral, integrate_fluxes
from .collapse import CollapsePoint, collapse_profile, gaussian_reference
from .analysis import ComputedStation, ComputedResults, analyze, analyze_station
from .trends import TrendKPIs, trend_kpis, summary_table
from .io import load_stations_csv, load_settings_json, write_results

__all__ = [
    "__version__",
    "pretty",
    "pitot_velocity", "gaussian_profile", "dp_from_velocity",
    "CalculationStep", "TrapezoidSegment", "Trace", "format_trace",
    "RawRow", "ParsedRow", "Station", "GlobalSettings", "DEFAULT_RHO", "DEFAULT_D_CM",
    "ComputedRow", "derive_row", "sort_and_validate",
    "CenterlineEstimate", "estimate_centerline",
    "HalfRadius", "solve_half_radius",
    "FluxIntegral", "integrate_fluxes",
    "CollapsePoint", "collapse_profile", "gaussian_reference",
    "ComputedStation", "ComputedResults", "analyze", "analyze_station",
    "TrendKPIs", "trend_kpis", "summary_table",
    "load_stations_csv", "load_settings_json", "write_results",
]
