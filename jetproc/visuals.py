from __future__ import annotations
from pathlib import Path
import numpy as np
import matplotlib
matplotlib.use("Agg")  # headless
import matplotlib.pyplot as plt

from .analysis import ComputedResults
from .collapse import gaussian_reference


def _by_xd(results: ComputedResults):
    return sorted(results.results, key=lambda s: s.xd)


def plot_profiles(outdir: Path, results: ComputedResults, stem: str = "profiles") -> Path:
    """Velocity profiles u(r) for every station on one axis."""
    if not results.results:
        raise ValueError("No computed stations to plot")
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(8, 5))
    for st in _by_xd(results):
        r = np.array([o.r for o in st.rows])
        u = np.array([o.u for o in st.rows])
        ax.plot(r, u, marker="o", ms=3, label=f"x/D={st.xd:g}")
    ax.set_xlabel("r (m)")
    ax.set_ylabel("u (m/s)")
    ax.set_title("Velocity profiles u(r) at each x/D")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    out = outdir / f"{stem}.png"
    fig.savefig(out, dpi=150, format="png")
    plt.close(fig)
    return out


def plot_collapse(outdir: Path, results: ComputedResults, stem: str = "collapse") -> Path:
    """u/Uc vs r/r½ for stations with a resolved r½, with the Gaussian overlay."""
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    fig, ax = plt.subplots(figsize=(8, 5))
    xr_max = 2.0
    for st in _by_xd(results):
        if not st.collapse:
            continue
        xr = np.array([p.xr for p in st.collapse])
        ur = np.array([p.ur for p in st.collapse])
        xr_max = max(xr_max, float(np.nanmax(xr)))
        ax.plot(xr, ur, marker="o", ms=3, label=f"x/D={st.xd:g}")
    gx, gy = gaussian_reference(xr_max)
    ax.plot(gx, gy, color="0.4", linestyle="--", label="Gaussian")
    ax.set_xlim(0, xr_max)
    ax.set_ylim(0, 1.1)
    ax.set_xlabel("r / r½")
    ax.set_ylabel("u / Uc")
    ax.set_title("Self-similar collapse (Gaussian overlay)")
    ax.grid(True, alpha=0.3)
    ax.legend()
    fig.tight_layout()
    out = outdir / f"{stem}.png"
    fig.savefig(out, dpi=150, format="png")
    plt.close(fig)
    return out


def plot_trends(outdir: Path, results: ComputedResults, stem: str = "trends") -> Path:
    """Uc, ṁ and I against x/D, one panel each."""
    if not results.results:
        raise ValueError("No computed stations to plot")
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    ordered = _by_xd(results)
    xd = np.array([s.xd for s in ordered])
    panels = [
        ("Uc (m/s)", [s.Uc for s in ordered]),
        ("ṁ (kg/s)", [s.mdot for s in ordered]),
        ("I (N)", [s.I for s in ordered]),
    ]
    fig, axes = plt.subplots(1, 3, figsize=(12, 3.8))
    for ax, (label, vals) in zip(axes, panels):
        ax.plot(xd, np.asarray(vals, float), marker="o")
        ax.set_xlabel("x/D")
        ax.set_ylabel(label)
        ax.grid(True, alpha=0.3)
    fig.suptitle("Centerline decay, entrainment and momentum vs x/D")
    fig.tight_layout()
    out = outdir / f"{stem}.png"
    fig.savefig(out, dpi=150, format="png")
    plt.close(fig)
    return out
