"""Station and batch orchestration: raw traverses in, audited jet quantities out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import logging
import math

from .centerline import estimate_centerline
from .collapse import CollapsePoint, collapse_profile
from .flux import integrate_fluxes
from .half_radius import solve_half_radius
from .rows import ComputedRow, derive_row, sort_and_validate
from .stations import GlobalSettings, Station, parse_float, parse_rows
from .trace import Trace, step

NAN = float("nan")
MIN_ROWS = 2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComputedStation:
    id: str
    xd: float
    variac: float
    port1: float
    D: float                      # nozzle exit diameter [m]
    rho: float                    # kg/m^3
    unit_is_kpa: bool
    rows: Tuple[ComputedRow, ...]
    Uc: float                     # m/s
    r_half: float                 # m; NaN when unresolved
    mdot: float                   # kg/s
    I: float                      # N
    mdot_trapz: float
    I_trapz: float
    collapse: Tuple[CollapsePoint, ...]
    rmse: float                   # NaN when unresolved
    trace: Trace = field(compare=False)
    uc_method: str = ""
    rhalf_method: str = ""


@dataclass(frozen=True)
class ComputedResults:
    globals: GlobalSettings
    results: Tuple[ComputedStation, ...]


def _global_steps(trace: Trace, rho: float, D: float, unit_is_kpa: bool) -> None:
    trace.add("globals", step("Density", "(G1) ρ", f"ρ = {rho} kg·m⁻³", rho, "kg·m⁻³"))
    trace.add("globals", step("Diameter", "(G2) D", f"D = {D} m", D, "m"))
    unit = "kPa" if unit_is_kpa else "Pa"
    trace.add("globals", step("Pressure Units", "(G3) units", f"Δp in {unit}", unit, ""))


def analyze_station(
    station: Station,
    settings: GlobalSettings,
    *,
    rho: Optional[float] = None,
    D: Optional[float] = None,
    unit_is_kpa: Optional[bool] = None,
) -> Optional[ComputedStation]:
    """
    Run the full per-station pipeline; ``None`` means the station is dropped.

    A station is dropped (silently, not an error) when its x/D is not a finite
    number or fewer than two rows have finite radius and Δp.  Data-quality
    caveats are recorded in ``trace.warnings`` and never abort the run.

    ``rho``, ``D`` and ``unit_is_kpa`` default to the resolved settings and
    are only passed by :func:`analyze` to avoid re-resolving per station.
    """
    rho = settings.resolved_rho() if rho is None else rho
    D = settings.resolved_d_m() if D is None else D
    unit_is_kpa = settings.resolved_unit_is_kpa() if unit_is_kpa is None else unit_is_kpa

    xd = parse_float(station.xd)
    if not math.isfinite(xd):
        logger.debug("Station %s dropped: x/D %r is not a number", station.id, station.xd)
        return None

    trace = Trace(enabled=bool(settings.show_steps))
    _global_steps(trace, rho, D, unit_is_kpa)

    parsed = parse_rows(station.rows)
    if len(parsed) < MIN_ROWS:
        logger.debug("Station %s dropped: %d valid rows (< %d)", station.id, len(parsed), MIN_ROWS)
        return None
    derived = [derive_row(p, rho, unit_is_kpa, keep_steps=trace.enabled) for p in parsed]
    rows = sort_and_validate(derived, trace)
    for row in rows:
        trace.add_point(list(row.steps))

    r = [o.r for o in rows]
    u = [o.u for o in rows]

    uc = estimate_centerline(r, u, trace)
    hr = solve_half_radius(r, u, uc.Uc, trace)
    r_half = hr.r_half if hr is not None else None
    mass, momentum = integrate_fluxes(r, u, rho, uc.Uc, r_half, trace)
    points, rmse = collapse_profile(r, u, uc.Uc, r_half, trace)

    for w in trace.warnings:
        logger.debug("Station %s: %s", station.id, w)

    return ComputedStation(
        id=str(station.id),
        xd=xd,
        variac=parse_float(station.variac),
        port1=parse_float(station.port1),
        D=D,
        rho=rho,
        unit_is_kpa=unit_is_kpa,
        rows=tuple(rows),
        Uc=uc.Uc,
        r_half=r_half if r_half is not None else NAN,
        mdot=mass.total,
        I=momentum.total,
        mdot_trapz=mass.trapz,
        I_trapz=momentum.trapz,
        collapse=tuple(points),
        rmse=rmse if rmse is not None else NAN,
        trace=trace,
        uc_method=uc.method,
        rhalf_method=hr.method if hr is not None else "unresolved",
    )


def analyze(stations: Sequence[Station], settings: GlobalSettings) -> ComputedResults:
    """Analyse every station; the result keeps input order minus dropped stations.

    An empty ``results`` tuple is the signal that no station had enough data.
    ``settings`` is returned unchanged as ``globals``.
    """
    rho = settings.resolved_rho()
    D = settings.resolved_d_m()
    unit_is_kpa = settings.resolved_unit_is_kpa()
    logger.info("Analyze start: %d station(s), rho=%s kg/m3, D=%s m, units=%s",
                len(stations), rho, D, "kPa" if unit_is_kpa else "Pa")
    out: List[ComputedStation] = []
    for st in stations:
        res = analyze_station(st, settings, rho=rho, D=D, unit_is_kpa=unit_is_kpa)
        if res is not None:
            out.append(res)
    logger.info("Analyze done: %d of %d station(s) usable", len(out), len(stations))
    return ComputedResults(globals=settings, results=tuple(out))
