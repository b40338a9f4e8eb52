from __future__ import annotations
import json, re
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

from .analysis import ComputedResults
from .stations import GlobalSettings, RawRow, Station
from .trends import collapse_table, rows_table, summary_table, trend_kpis

# accepted column aliases (case-insensitive)
_STATION_ALIASES = ["station", "station_id", "id", "run"]
_XD_ALIASES = ["x_D", "xd", "x/D", "x_over_D"]
_R_ALIASES = ["r_mm", "r", "radius_mm", "radius"]
_DP_ALIASES = ["dp", "dp_kpa", "dp_pa", "delta_p", "Δp"]
_VARIAC_ALIASES = ["variac", "variac_V", "voltage"]
_PORT1_ALIASES = ["port1", "port1_dp", "p_ref"]

_SETTINGS_KEYS = {
    "rho": "rho",
    "d_cm": "d_cm",
    "dcm": "d_cm",
    "p_units": "p_units",
    "punits": "p_units",
    "contraction": "contraction",
    "show_steps": "show_steps",
    "showsteps": "show_steps",
}


def _pick(df: pd.DataFrame, names: list[str]) -> str | None:
    low = {c.lower(): c for c in df.columns}
    for n in names:
        if n.lower() in low:
            return low[n.lower()]
    return None


def _infer_unit_from_name(colname: str) -> Optional[str]:
    nm = (colname or "").lower()
    if "kpa" in nm:
        return "kpa"
    if nm.endswith("_pa") or " pa" in nm:
        return "pa"
    return None


def load_stations_csv(path: Path | str) -> Tuple[List[Station], Optional[str]]:
    """Read a long-format traverse table into stations.

    One line per (station, r, Δp) reading; station metadata (x/D, variac,
    port1) is taken from the first line of each station.  Cells stay as text
    so the analysis applies its own lenient parsing.  Returns the stations in
    first-appearance order and the pressure unit implied by the Δp header
    (``"kpa"``, ``"pa"`` or ``None``).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Station table not found: {path}")
    df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    xd_col = _pick(df, _XD_ALIASES)
    r_col = _pick(df, _R_ALIASES)
    dp_col = _pick(df, _DP_ALIASES)
    if not xd_col or not r_col or not dp_col:
        raise ValueError(f"{path.name}: CSV must contain x/D, radius and Δp columns")
    st_col = _pick(df, _STATION_ALIASES) or xd_col
    var_col = _pick(df, _VARIAC_ALIASES)
    p1_col = _pick(df, _PORT1_ALIASES)

    stations: List[Station] = []
    for sid, g in df.groupby(st_col, sort=False):
        head = g.iloc[0]
        stations.append(Station(
            id=str(sid),
            xd=head[xd_col],
            variac=head[var_col] if var_col else "",
            port1=head[p1_col] if p1_col else "",
            rows=[RawRow(r=r, dp=dp) for r, dp in zip(g[r_col], g[dp_col])],
        ))
    return stations, _infer_unit_from_name(dp_col)


def load_settings_json(path: Path | str) -> GlobalSettings:
    """Settings from JSON; camelCase form keys (``Dcm``, ``pUnits``) are accepted."""
    data = json.loads(Path(path).read_text())
    kwargs = {}
    for k, v in data.items():
        key = _SETTINGS_KEYS.get(str(k).lower())
        if key:
            kwargs[key] = v
    return GlobalSettings(**kwargs)


def _safe_stem(sid: str) -> str:
    return re.sub(r"[^0-9A-Za-z_.-]+", "_", str(sid)) or "station"


def write_results(outdir: Path | str, results: ComputedResults) -> list[str]:
    """Write summary/rows/collapse tables, per-station traces and trend KPIs."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    files = []
    for name, frame in (
        ("stations_summary.csv", summary_table(results)),
        ("rows.csv", rows_table(results)),
        ("collapse.csv", collapse_table(results)),
    ):
        frame.to_csv(outdir / name, index=False)
        files.append(str(outdir / name))
    used: set[str] = set()
    for st in results.results:
        stem = base = _safe_stem(st.id)
        n = 1
        while stem in used:
            n += 1
            stem = f"{base}_{n}"
        used.add(stem)
        p = outdir / f"trace_{stem}.json"
        p.write_text(json.dumps({"station": st.id, "x_D": st.xd, **st.trace.to_dict()}, indent=2, ensure_ascii=False))
        files.append(str(p))
    kpis = trend_kpis(results)
    if kpis is not None:
        (outdir / "trends.json").write_text(json.dumps(kpis.to_dict(), indent=2))
        files.append(str(outdir / "trends.json"))
    return files
