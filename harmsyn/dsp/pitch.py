"""Harmonic-sum pitch detection.

Scores every candidate F0 on a logarithmic grid by the (compressed,
weighted) sum of the spectral amplitudes at its first few harmonics and
returns the best candidate, refined by parabolic interpolation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from harmsyn.dsp.spectrum import get_harmonic_amplitudes
from harmsyn.dsp.windows import get_window_function


@dataclass
class HarmonicSumParms:
    """Harmonic-sum pitch detector parameters."""

    rel_window_width: float = 16.0  # window width in F0 wavelengths
    window_function: str = "hann"
    harmonics: int = 5
    harmonics_decline_rate: float = 0.2  # weight = 1 / (1 + rate * (h - 1))
    amplitude_compression_exponent: float = 0.5
    f_cutoff: float = 5000.0  # [Hz] harmonics above are ignored
    steps_per_octave: int = 120


def estimate_pitch_harmonic_sum(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    position: float,
    f_min: float,
    f_max: float,
    parms: HarmonicSumParms | None = None,
) -> float:
    """Estimate the pitch at ``position`` [s] within ``[f_min, f_max]`` [Hz].

    Returns:
        Frequency in Hz, or NaN when no estimate is possible (e.g. the
        analysis window does not fit into the signal or the signal is silent).
    """
    p = parms or HarmonicSumParms()
    if not (0 < f_min < f_max):
        return math.nan
    window_fn = get_window_function(p.window_function)
    n_steps = max(2, int(math.ceil(math.log2(f_max / f_min) * p.steps_per_octave)) + 1)
    candidates = np.geomspace(f_min, f_max, n_steps)
    weights = 1.0 / (1.0 + p.harmonics_decline_rate * np.arange(p.harmonics))

    center = position * sample_rate
    scores = np.full(len(candidates), np.nan)
    for i, f in enumerate(candidates):
        harmonics = min(p.harmonics, int(p.f_cutoff / f))
        if harmonics < 1:
            continue
        amps = get_harmonic_amplitudes(
            signal, center, f / sample_rate, harmonics, p.rel_window_width, window_fn
        )
        if amps is None:
            continue
        compressed = np.power(amps, p.amplitude_compression_exponent)
        scores[i] = float(np.sum(compressed * weights[:harmonics]))

    if np.all(np.isnan(scores)):
        return math.nan
    best = int(np.nanargmax(scores))
    if not scores[best] > 0:
        return math.nan
    return _refine(candidates, scores, best)


def _refine(candidates: NDArray[np.float64], scores: NDArray[np.float64], i: int) -> float:
    """Parabolic interpolation of the peak on the log-frequency axis."""
    if i == 0 or i == len(scores) - 1:
        return float(candidates[i])
    y0, y1, y2 = scores[i - 1], scores[i], scores[i + 1]
    if not (np.isfinite(y0) and np.isfinite(y2)):
        return float(candidates[i])
    denom = y0 - 2 * y1 + y2
    if denom >= 0:
        return float(candidates[i])
    offset = 0.5 * (y0 - y2) / denom
    step = math.log(candidates[i + 1] / candidates[i])
    return float(candidates[i] * math.exp(offset * step))
