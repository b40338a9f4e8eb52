from __future__ import annotations
import argparse, json, logging
from pathlib import Path
import math

from .analysis import analyze
from .io import load_settings_json, load_stations_csv, write_results
from .stations import GlobalSettings
from .trace import format_trace
from .trends import trend_kpis

EMPTY_RESULTS_MSG = "No station has at least two valid (r, Δp) rows; check the input data."


def build_parser():
    p = argparse.ArgumentParser(prog="jetproc", description="Round-jet pitot traverse reduction with audit trace")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = p.add_subparsers(dest="cmd", required=True)

    def _common(sp):
        sp.add_argument("--csv", required=True, type=Path, help="Long-format table: station, x_D, r_mm, dp")
        sp.add_argument("--settings", type=Path, default=None, help="JSON file with GlobalSettings fields")
        sp.add_argument("--rho", type=float, default=None, help="Fluid density [kg/m^3] (default 1.204)")
        sp.add_argument("--d-cm", type=float, default=None, help="Nozzle exit diameter [cm] (default 2.54)")
        sp.add_argument("--units", choices=["kpa", "pa"], default=None,
                        help="Δp unit; default inferred from the Δp header (dp_kpa/dp_pa), else settings, else kPa")
        sp.add_argument("--contraction", default=None, help="Contraction ratio (reported only)")

    a0 = sub.add_parser("analyze", help="Reduce all stations and write summary tables")
    _common(a0)
    a0.add_argument("--outdir", type=Path, default=None, help="Write CSV/JSON artifacts here")
    a0.add_argument("--plots", action="store_true", help="Render profile/collapse/trend PNGs into --outdir")
    a0.add_argument("--no-steps", action="store_true", help="Do not retain calculation steps in the trace")

    a1 = sub.add_parser("trace", help="Print the step-by-step derivation for one station")
    _common(a1)
    a1.add_argument("--station", required=True, help="Station id as in the CSV")
    return p


def _settings_from_args(a):
    """Stations plus settings; CLI flags win over the Δp header unit, which wins over --settings."""
    stations, unit_hint = load_stations_csv(a.csv)
    cfg = load_settings_json(a.settings) if a.settings else GlobalSettings()
    if a.rho is not None:
        cfg.rho = a.rho
    if a.d_cm is not None:
        cfg.d_cm = a.d_cm
    if a.units is not None:
        cfg.p_units = a.units
    elif unit_hint is not None:
        cfg.p_units = unit_hint
    if a.contraction is not None:
        cfg.contraction = a.contraction
    if getattr(a, "no_steps", False):
        cfg.show_steps = False
    return stations, cfg


def _num(v: float):
    return v if math.isfinite(v) else None


def main(argv=None):
    ap = build_parser()
    a = ap.parse_args(argv)
    logging.basicConfig(level=getattr(logging, a.log_level), format="%(levelname)s %(name)s: %(message)s")
    stations, cfg = _settings_from_args(a)

    if a.cmd == "analyze":
        res = analyze(stations, cfg)
        if not res.results:
            raise SystemExit(EMPTY_RESULTS_MSG)
        summary = {
            "ok": True,
            "n_input": len(stations),
            "n_used": len(res.results),
            "rho_kg_m3": res.results[0].rho,
            "D_m": res.results[0].D,
            "p_units": "kpa" if res.results[0].unit_is_kpa else "pa",
            "contraction": cfg.resolved_contraction(),
            "stations": [
                {
                    "station": st.id,
                    "x_D": st.xd,
                    "Uc_m_s": _num(st.Uc),
                    "r_half_m": _num(st.r_half),
                    "mdot_kg_s": _num(st.mdot),
                    "I_N": _num(st.I),
                    "rmse": _num(st.rmse),
                    "warnings": list(st.trace.warnings),
                }
                for st in res.results
            ],
        }
        kpis = trend_kpis(res)
        if kpis is not None:
            summary["trends"] = {k: (_num(v) if isinstance(v, float) else v) for k, v in kpis.to_dict().items()}
        if a.outdir:
            summary["files"] = write_results(a.outdir, res)
            if a.plots:
                from .visuals import plot_profiles, plot_collapse, plot_trends
                summary["plots"] = [
                    str(plot_profiles(a.outdir, res)),
                    str(plot_collapse(a.outdir, res)),
                    str(plot_trends(a.outdir, res)),
                ]
        print(json.dumps(summary, indent=2, ensure_ascii=False))
    elif a.cmd == "trace":
        res = analyze(stations, cfg)
        match = [st for st in res.results if st.id == str(a.station)]
        if not match:
            raise SystemExit(f"Station {a.station!r} not found or has fewer than two valid rows")
        st = match[0]
        print(format_trace(st.trace, title=f"Station {st.id} (x/D={st.xd:g})"))


if __name__ == "__main__":
    main()
