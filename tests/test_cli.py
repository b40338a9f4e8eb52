import json
from pathlib import Path

import pandas as pd
import pytest

from jetproc.cli import EMPTY_RESULTS_MSG, main


def _csv(path: Path, rows, dp_header="dp_kpa"):
    pd.DataFrame(rows, columns=["station", "x_D", "r_mm", dp_header]).to_csv(path, index=False)
    return path


EXAMPLE = [("S1", "5", r, dp) for r, dp in
           [("0", "0.278"), ("5", "0.244"), ("10", "0.124"), ("15", "0.035"), ("20", "0.020"), ("30", "0.002")]]
FAR = [("S2", "10", r, dp) for r, dp in
       [("0", "0.070"), ("10", "0.052"), ("20", "0.024"), ("30", "0.008"), ("40", "0.002")]]


def test_analyze_prints_json_summary(tmp_path, capsys):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE)
    main(["analyze", "--csv", str(csv)])
    out = json.loads(capsys.readouterr().out)
    assert out["ok"] is True
    assert out["n_input"] == 1 and out["n_used"] == 1
    assert out["p_units"] == "kpa"
    assert out["stations"][0]["Uc_m_s"] == pytest.approx(21.49, abs=0.01)
    assert "trends" not in out


def test_unit_flag_overrides_header(tmp_path, capsys):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE)
    main(["analyze", "--csv", str(csv), "--units", "pa", "--rho", "1.2"])
    out = json.loads(capsys.readouterr().out)
    assert out["p_units"] == "pa"
    assert out["rho_kg_m3"] == 1.2
    assert out["stations"][0]["Uc_m_s"] == pytest.approx((2 * 0.278 / 1.2) ** 0.5, rel=1e-9)


def test_analyze_writes_artifacts_and_plots(tmp_path, capsys):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE + FAR)
    outdir = tmp_path / "out"
    main(["analyze", "--csv", str(csv), "--outdir", str(outdir), "--plots"])
    out = json.loads(capsys.readouterr().out)
    assert out["n_used"] == 2
    assert "momentum_conserved" in out["trends"]
    for name in ("stations_summary.csv", "rows.csv", "collapse.csv", "trends.json",
                 "profiles.png", "collapse.png", "trends.png"):
        assert (outdir / name).exists(), name
    assert len(out["plots"]) == 3


def test_no_usable_station_exits(tmp_path):
    csv = _csv(tmp_path / "jet.csv", [("S1", "5", "0", "0.2"), ("S1", "5", "x", "0.1")])
    with pytest.raises(SystemExit) as exc:
        main(["analyze", "--csv", str(csv)])
    assert str(exc.value) == EMPTY_RESULTS_MSG


def test_trace_command_prints_derivation(tmp_path, capsys):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE)
    main(["trace", "--csv", str(csv), "--station", "S1"])
    text = capsys.readouterr().out
    assert text.startswith("Station S1 (x/D=5)")
    assert "Centerline velocity" in text
    assert "Half-velocity radius" in text


def test_trace_unknown_station_exits(tmp_path):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE)
    with pytest.raises(SystemExit):
        main(["trace", "--csv", str(csv), "--station", "nope"])


def test_contraction_ratio_is_reported(tmp_path, capsys):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE)
    main(["analyze", "--csv", str(csv), "--contraction", "6.25", "--outdir", str(tmp_path / "out")])
    out = json.loads(capsys.readouterr().out)
    assert out["contraction"] == 6.25
    summary = pd.read_csv(tmp_path / "out" / "stations_summary.csv")
    assert summary.loc[0, "contraction"] == 6.25


def test_unknown_unit_from_settings_warns_once(tmp_path, capsys, caplog):
    csv = _csv(tmp_path / "jet.csv", EXAMPLE + FAR, dp_header="dp")
    settings = tmp_path / "settings.json"
    settings.write_text(json.dumps({"pUnits": "psi"}))
    with caplog.at_level("WARNING"):
        main(["analyze", "--csv", str(csv), "--settings", str(settings)])
    out = json.loads(capsys.readouterr().out)
    assert out["p_units"] == "pa"
    assert sum("Unknown pressure unit" in r.getMessage() for r in caplog.records) == 1
