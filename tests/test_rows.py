import math

import numpy as np
import pytest

from jetproc.fmt import pretty
from jetproc.rows import ComputedRow, derive_row, sort_and_validate
from jetproc.stations import ParsedRow, RawRow, parse_rows, parse_float
from jetproc.trace import Trace


def test_pretty_switches_notation_on_magnitude():
    assert pretty(21.489) == "21.489000"
    assert pretty(0.01, 4) == "0.0100"
    assert pretty(12346.0) == "1.235e+04"
    assert pretty(0.0001) == "1.000e-04"
    assert pretty(0.0) == "0.000000"
    assert pretty(float("nan")) == "—"
    assert pretty("(0.1, 0.2)") == "(0.1, 0.2)"


def test_velocity_from_pitot_relation():
    rho = 1.204
    row = derive_row(ParsedRow(r_mm=5.0, dp=0.244), rho, unit_is_kpa=True)
    assert row.r == pytest.approx(0.005)
    assert row.dp_pa == pytest.approx(244.0)
    assert row.u == pytest.approx(math.sqrt(2 * 244.0 / rho))
    labels = [s.label for s in row.steps]
    assert labels == ["Δp convert", "Velocity from Pitot"]


def test_negative_dp_clamps_to_zero_velocity():
    row = derive_row(ParsedRow(r_mm=40.0, dp=-3.0), 1.204, unit_is_kpa=False)
    assert row.u == 0.0
    assert not math.isnan(row.u)
    assert row.dp_pa == -3.0


def test_unit_switch_scales_velocity_by_sqrt_1000():
    p = ParsedRow(r_mm=0.0, dp=0.25)
    u_kpa = derive_row(p, 1.204, unit_is_kpa=True).u
    u_pa = derive_row(p, 1.204, unit_is_kpa=False).u
    assert u_kpa / u_pa == pytest.approx(math.sqrt(1000.0), rel=1e-12)


def test_pa_mode_logs_input_step():
    row = derive_row(ParsedRow(r_mm=0.0, dp=100.0), 1.2, unit_is_kpa=False)
    assert row.steps[0].label == "Δp input"
    assert row.steps[0].result == 100.0


def test_derive_row_without_steps():
    row = derive_row(ParsedRow(r_mm=0.0, dp=100.0), 1.2, unit_is_kpa=False, keep_steps=False)
    assert row.steps == ()


def test_parse_rows_drops_unparseable_silently():
    rows = [RawRow("0", "0.278"), RawRow("", "0.2"), RawRow("5", "abc"), RawRow("10", "0.124"), RawRow("nan", "1")]
    parsed = parse_rows(rows)
    assert parsed == [ParsedRow(0.0, 0.278), ParsedRow(10.0, 0.124)]


def test_parse_rows_drops_negative_radius():
    rows = [RawRow("-10", "0.124"), RawRow("0", "0.278"), RawRow("-0.0", "0.27"), RawRow("10", "0.124")]
    parsed = parse_rows(rows)
    assert [p.r_mm for p in parsed] == [0.0, 0.0, 10.0]


def test_parse_float_lenient():
    assert parse_float(" 2.5 ") == 2.5
    assert parse_float(3) == 3.0
    assert np.isnan(parse_float(None))
    assert np.isnan(parse_float("12abc"))


def _rows(rs, us):
    return [ComputedRow(r=r, dp_pa=0.0, u=u) for r, u in zip(rs, us)]


def test_sort_orders_by_radius_without_warnings():
    T = Trace()
    out = sort_and_validate(_rows([0.02, 0.0, 0.01], [5.0, 20.0, 12.0]), T)
    assert [o.r for o in out] == [0.0, 0.01, 0.02]
    assert T.warnings == []


def test_duplicate_radius_warning_only():
    T = Trace()
    sort_and_validate(_rows([0.0, 0.005, 0.005, 0.01], [20.0, 15.0, 15.0, 10.0]), T)
    assert T.warnings == ["Duplicate r at 0.005 m."]


def test_non_monotonic_warning_fires_once():
    T = Trace()
    sort_and_validate(_rows([0.0, 0.005, 0.01], [20.0, 10.0, 12.0]), T)
    assert len(T.warnings) == 1
    assert T.warnings[0].startswith("Non-monotonic velocity profile detected near r=0.0100 m")


def test_equal_neighbouring_velocities_do_not_warn():
    T = Trace()
    sort_and_validate(_rows([0.0, 0.005, 0.01], [20.0, 20.0, 10.0]), T)
    assert T.warnings == []
