from __future__ import annotations
import math
import numpy as np

PA_PER_KPA = 1000.0


def mm_to_m(v):
    return v / 1000.0


def cm_to_m(v):
    return v / 100.0


def kpa_to_pa(v):
    return v * PA_PER_KPA


def to_pa(dp: float, unit_is_kpa: bool) -> float:
    """Differential pressure in Pascals from a reading in the configured unit."""
    return kpa_to_pa(dp) if unit_is_kpa else dp


def pitot_velocity(dp_pa: float, rho: float) -> float:
    """
    Incompressible pitot relation u = sqrt(2·Δp/ρ).

    Negative Δp (probe noise near the jet edge) clamps to u = 0 rather than
    producing a domain error.
    """
    return math.sqrt(max(0.0, 2.0 * dp_pa / rho))


def gaussian_profile(r: np.ndarray, Uc: float, r_half: float) -> np.ndarray:
    """
    Self-similar jet profile u(r) = Uc·exp(-ln2·(r/r½)²).

    ``u(r_half) == Uc/2`` by construction.
    """
    r = np.asarray(r, dtype=float)
    return float(Uc) * np.exp(-math.log(2.0) * (r / float(r_half)) ** 2)


def dp_from_velocity(u: np.ndarray, rho: float) -> np.ndarray:
    """Inverse pitot relation Δp = ½ρu² [Pa]."""
    u = np.asarray(u, dtype=float)
    return 0.5 * float(rho) * u * u
