from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import List, Union

from .fmt import pretty

PHASES = ("globals", "Uc", "rhalf", "mdot", "I", "collapse")


@dataclass(frozen=True)
class CalculationStep:
    """One audited arithmetic step: what was computed, how, and with which numbers."""
    label: str
    eqn: str
    subs: str
    result: Union[float, str]
    units: str


@dataclass(frozen=True)
class TrapezoidSegment:
    """One trapezoid of the flux quadrature; ``value_*`` is f=ρur or g=ρu²r."""
    i: int
    r_i: float
    u_i: float
    value_i: float
    r_ip1: float
    u_ip1: float
    value_ip1: float
    dr: float
    area: float


def step(label: str, eqn: str, subs: str, result, units: str) -> CalculationStep:
    return CalculationStep(label=label, eqn=eqn, subs=subs, result=result, units=units)


@dataclass
class Trace:
    """Append-only audit record for one station's analysis run.

    ``enabled=False`` drops calculation steps and trapezoid segments but
    warnings are always kept.
    """
    enabled: bool = True
    globals: List[CalculationStep] = field(default_factory=list)
    points: List[List[CalculationStep]] = field(default_factory=list)
    Uc: List[CalculationStep] = field(default_factory=list)
    rhalf: List[CalculationStep] = field(default_factory=list)
    mdot: List[CalculationStep] = field(default_factory=list)
    I: List[CalculationStep] = field(default_factory=list)
    collapse: List[CalculationStep] = field(default_factory=list)
    mdot_segments: List[TrapezoidSegment] = field(default_factory=list)
    I_segments: List[TrapezoidSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add(self, phase: str, s: CalculationStep) -> None:
        if phase not in PHASES:
            raise KeyError(f"Unknown trace phase {phase!r}")
        if self.enabled:
            getattr(self, phase).append(s)

    def add_point(self, steps: List[CalculationStep]) -> None:
        if self.enabled:
            self.points.append(list(steps))

    def add_segment(self, kind: str, seg: TrapezoidSegment) -> None:
        if not self.enabled:
            return
        if kind == "mdot":
            self.mdot_segments.append(seg)
        elif kind == "I":
            self.I_segments.append(seg)
        else:
            raise KeyError(f"Unknown segment kind {kind!r}")

    def warn(self, msg: str) -> None:
        self.warnings.append(msg)

    def to_dict(self) -> dict:
        return asdict(self)


def format_step(s: CalculationStep) -> str:
    return f"{s.label}: {s.eqn}\n    {s.subs}\n    ⇒ {pretty(s.result)} {s.units}".rstrip()


def format_trace(trace: Trace, title: str = "") -> str:
    """Plain-text rendering of a trace, in phase order, for terminals and logs."""
    out: List[str] = []
    if title:
        out.append(title)
        out.append("=" * len(title))
    out.append("-- Global parameters")
    out.extend(format_step(s) for s in trace.globals)
    if trace.points:
        out.append("-- Point velocities")
        for k, psteps in enumerate(trace.points):
            out.append(f"[row {k}]")
            out.extend(format_step(s) for s in psteps)
    sections = [
        ("Centerline velocity Uc", trace.Uc),
        ("Half-velocity radius r½", trace.rhalf),
        ("Mass flow ṁ", trace.mdot),
        ("Momentum flux I", trace.I),
        ("Self-similar collapse", trace.collapse),
    ]
    for name, steps in sections:
        out.append(f"-- {name}")
        out.extend(format_step(s) for s in steps)
    if trace.warnings:
        out.append("-- Warnings")
        out.extend(f"! {w}" for w in trace.warnings)
    return "\n".join(out)
