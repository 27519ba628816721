"""Harmonic model — the intermediate data shared by analysis and synthesis.

Analysis produces a sequence of HarmSynRecord (one per interpolation step,
ragged harmonic counts). Synthesis consumes a HarmSynDef, where every
harmonic is a gap-free function curve over the record times.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

# Highest harmonic number supported by the text format and harmonic mods
MAX_HARMONICS = 100


# ── Data Types ───────────────────────────────────────────


@dataclass
class HarmSynRecord:
    """F0 and harmonic amplitudes at one point in time.

    time:       Time position [s].
    f0:         Fundamental frequency [Hz].
    amplitudes: Harmonic amplitudes [dB], index 0 = fundamental.
    """

    time: float
    f0: float
    amplitudes: NDArray[np.float64]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict (non-finite amplitudes become None)."""
        return {
            "time": self.time,
            "f0": self.f0,
            "amplitudes": [float(a) if math.isfinite(a) else None for a in self.amplitudes],
        }


@dataclass
class FunctionCurve:
    """Sampled function: strictly increasing x values and matching y values."""

    x_vals: NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))
    y_vals: NDArray[np.float64] = field(default_factory=lambda: np.zeros(0))

    def __len__(self) -> int:
        return len(self.x_vals)


@dataclass
class HarmSynDef:
    """Harmonic synthesizer definition.

    f0_curve:         Fundamental frequency over time [Hz].
    amplitude_curves: Amplitude over time for harmonics 1..n [dB].
    """

    f0_curve: FunctionCurve
    amplitude_curves: list[FunctionCurve] = field(default_factory=list)

    @property
    def harmonics(self) -> int:
        return len(self.amplitude_curves)


# ── Records → Definition ─────────────────────────────────


def convert_records_to_def(records: Sequence[HarmSynRecord]) -> HarmSynDef:
    """Build the per-harmonic curves of a harmonic model from records.

    Harmonics missing from a record (shorter amplitude array or a
    non-finite value) are filled with ``floor(min finite amplitude)`` so that
    curves have no holes. An empty record list yields an empty definition.
    """
    x_vals = np.array([r.time for r in records], dtype=np.float64)
    f0_curve = FunctionCurve(x_vals, np.array([r.f0 for r in records], dtype=np.float64))
    if not records:
        return HarmSynDef(f0_curve=f0_curve)

    harmonics = max(len(r.amplitudes) for r in records)
    table = np.full((len(records), harmonics), _undefined_amplitude(records))
    for i, r in enumerate(records):
        a = np.asarray(r.amplitudes, dtype=np.float64)
        finite = np.isfinite(a)
        table[i, : len(a)][finite] = a[finite]

    amplitude_curves = [FunctionCurve(x_vals, table[:, h].copy()) for h in range(harmonics)]
    return HarmSynDef(f0_curve=f0_curve, amplitude_curves=amplitude_curves)


def _undefined_amplitude(records: Sequence[HarmSynRecord]) -> float:
    """Fill value for missing amplitudes; -inf when nothing was measured."""
    finite = [
        float(np.min(a[np.isfinite(a)]))
        for a in (np.asarray(r.amplitudes, dtype=np.float64) for r in records)
        if np.any(np.isfinite(a))
    ]
    if not finite:
        return -math.inf
    return float(math.floor(min(finite)))
