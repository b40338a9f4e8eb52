import math

import numpy as np
import pytest

from jetproc.collapse import collapse_profile, gaussian_reference, ideal_gaussian
from jetproc.flux import (
    TAIL_SKIPPED_WARNING,
    gaussian_decay_constant,
    integrate_fluxes,
    mass_tail,
    momentum_tail,
)
from jetproc.physics import gaussian_profile
from jetproc.trace import Trace

RHO = 1.204


def test_uniform_flow_trapezoid_is_exact():
    R, U = 0.02, 8.0
    r = list(np.linspace(0.0, R, 5))
    u = [U] * len(r)
    T = Trace()
    mass, mom = integrate_fluxes(r, u, RHO, U, None, T)
    # integrands are linear in r, so the trapezoid rule is exact
    assert mass.trapz == pytest.approx(math.pi * RHO * U * R * R, rel=1e-12)
    assert mom.trapz == pytest.approx(math.pi * RHO * U * U * R * R, rel=1e-12)
    assert mass.tail is None and mass.total == mass.trapz
    assert T.warnings == [TAIL_SKIPPED_WARNING]


def test_segments_are_retained_for_audit():
    r = [0.0, 0.01, 0.03]
    u = [10.0, 6.0, 1.0]
    T = Trace()
    mass, mom = integrate_fluxes(r, u, RHO, 10.0, 0.012, T)
    assert len(T.mdot_segments) == 2 and len(T.I_segments) == 2
    seg = T.mdot_segments[1]
    assert seg.i == 1 and seg.dr == pytest.approx(0.02)
    assert seg.value_i == pytest.approx(RHO * 6.0 * 0.01)
    assert seg.area == pytest.approx(0.5 * (RHO * 6.0 * 0.01 + RHO * 1.0 * 0.03) * 0.02)
    assert mass.trapz == pytest.approx(2 * math.pi * sum(s.area for s in T.mdot_segments))
    assert [s.label for s in T.mdot] == ["Mass flow (trapezoid)", "Mass flow (tail correction)", "Mass flow (total)"]
    assert T.I[-1].result == pytest.approx(mom.total)


def test_tail_closes_truncated_gaussian_integral_exactly():
    Uc, r_half, r_n = 20.0, 0.012, 0.03
    B = gaussian_decay_constant(r_half)
    full_m = math.pi * RHO * Uc / B
    full_I = math.pi * RHO * Uc * Uc / (2 * B)
    inner_m = full_m * (1 - math.exp(-B * r_n * r_n))
    inner_I = full_I * (1 - math.exp(-2 * B * r_n * r_n))
    assert inner_m + mass_tail(RHO, Uc, B, r_n) == pytest.approx(full_m, rel=1e-13)
    assert inner_I + momentum_tail(RHO, Uc, B, r_n) == pytest.approx(full_I, rel=1e-13)


def test_tail_corrected_flux_matches_infinite_domain():
    Uc, r_half = 20.0, 0.012
    r = np.linspace(0.0, 0.03, 2001)
    u = gaussian_profile(r, Uc, r_half)
    mass, mom = integrate_fluxes(list(r), list(u), RHO, Uc, r_half, Trace())
    B = gaussian_decay_constant(r_half)
    full_m = math.pi * RHO * Uc / B
    full_I = math.pi * RHO * Uc * Uc / (2 * B)
    assert mass.total == pytest.approx(full_m, rel=1e-5)
    assert mom.total == pytest.approx(full_I, rel=1e-5)
    # truncation alone misses about 2^-6.25 of the mass flow
    assert abs(mass.trapz - full_m) / full_m > 1e-2


def test_collapse_of_exact_gaussian_has_zero_rmse():
    Uc, r_half = 15.0, 0.02
    r = np.array([0.0, 0.01, 0.02, 0.03, 0.05])
    u = gaussian_profile(r, Uc, r_half)
    T = Trace()
    pts, rmse = collapse_profile(list(r), list(u), Uc, r_half, T)
    assert len(pts) == 5
    assert pts[2].xr == pytest.approx(1.0) and pts[2].ur == pytest.approx(0.5)
    assert rmse == pytest.approx(0.0, abs=1e-12)
    assert T.collapse[-1].label == "RMSE final"


def test_collapse_skipped_without_half_radius():
    T = Trace()
    pts, rmse = collapse_profile([0.0, 0.01], [10.0, 9.0], 10.0, None, T)
    assert pts == [] and rmse is None
    assert T.collapse == []


def test_gaussian_reference_spans_at_least_two_half_widths():
    xr, ur = gaussian_reference(1.3)
    assert xr[-1] == pytest.approx(2.0) and len(xr) == 101
    assert ur[0] == 1.0
    assert float(ideal_gaussian(1.0)) == pytest.approx(0.5)
    xr, _ = gaussian_reference(3.5, n=11)
    assert xr[-1] == pytest.approx(3.5)


def test_decay_constant_guards_underflowing_half_radius():
    assert gaussian_decay_constant(0.012) == pytest.approx(math.log(2) / 0.012 ** 2)
    assert gaussian_decay_constant(1e-170) == math.inf
    T = Trace()
    mass, mom = integrate_fluxes([0.0, 1e-163], [20.0, 0.0], RHO, 20.0, 5e-164, T)
    assert mass.tail is None and mom.tail is None
    assert T.warnings == [TAIL_SKIPPED_WARNING]
