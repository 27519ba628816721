"""Windowed single-frequency measurements.

All frequencies are normalized (cycles per sample) and all positions are
sample indices, possibly fractional. A measurement window is centered on the
position; when it does not fit completely into the signal the measurement is
unavailable and ``None`` is returned instead of an error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from harmsyn.dsp.windows import WindowFunction


@dataclass
class InstFreqResult:
    """Instantaneous frequency measurement of one sinusoidal component."""

    inst_frequency: float  # normalized
    amplitude: float  # linear


def _window_block(
    signal: NDArray[np.floating[Any]],
    position: float,
    window_width: float,
    window_fn: WindowFunction,
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]] | None:
    """Return (sample indices, samples, window weights) of a centered window."""
    if not window_width > 0 or not math.isfinite(position):
        return None
    x0 = position - window_width / 2
    start = math.ceil(x0)
    end = math.floor(x0 + window_width)
    if start < 0 or end >= len(signal) or end < start:
        return None
    idx = np.arange(start, end + 1, dtype=np.float64)
    weights = window_fn((idx - x0) / window_width)
    block = np.asarray(signal[start : end + 1], dtype=np.float64)
    return idx, block, weights


def _component(
    idx: NDArray[np.float64],
    block: NDArray[np.float64],
    weights: NDArray[np.float64],
    frequencies: NDArray[np.float64],
) -> NDArray[np.complex128]:
    """Windowed DFT of the block at arbitrary frequencies.

    The phase refers to sample index 0 of the signal, so values computed
    at different positions can be compared directly. Magnitude is scaled so
    that a sinusoid with amplitude A yields |X| = A.
    """
    weighted = block * weights
    scale = 2.0 / np.sum(weights)
    phases = np.exp(-2j * np.pi * np.outer(frequencies, idx))
    return (phases @ weighted) * scale


def inst_freq_single(
    signal: NDArray[np.floating[Any]],
    position: float,
    frequency: float,
    shift_factor: float,
    window_width: float,
    window_fn: WindowFunction,
) -> InstFreqResult | None:
    """Measure the instantaneous frequency near ``frequency`` at ``position``.

    Two windows, ``shift_factor`` wavelengths apart, are evaluated at the
    target frequency. The phase advance between them gives the frequency
    deviation of the actual component.
    """
    if not frequency > 0:
        return None
    shift = shift_factor / frequency
    r1 = _window_block(signal, position - shift / 2, window_width, window_fn)
    r2 = _window_block(signal, position + shift / 2, window_width, window_fn)
    if r1 is None or r2 is None:
        return None
    freqs = np.array([frequency])
    x1 = _component(*r1, freqs)[0]
    x2 = _component(*r2, freqs)[0]
    amplitude = (abs(x1) + abs(x2)) / 2
    if amplitude == 0:
        return InstFreqResult(inst_frequency=frequency, amplitude=0.0)
    delta_phase = float(np.angle(x2 * np.conj(x1)))
    inst_frequency = frequency + delta_phase / (2 * np.pi * shift)
    return InstFreqResult(inst_frequency=inst_frequency, amplitude=float(amplitude))


def inst_freq_single_rel_window(
    signal: NDArray[np.floating[Any]],
    position: float,
    frequency: float,
    shift_factor: float,
    rel_window_width: float,
    window_fn: WindowFunction,
) -> InstFreqResult | None:
    """Like :func:`inst_freq_single`, window width given in wavelengths."""
    if not frequency > 0:
        return None
    return inst_freq_single(
        signal, position, frequency, shift_factor, rel_window_width / frequency, window_fn
    )


def get_harmonic_amplitudes(
    signal: NDArray[np.floating[Any]],
    position: float,
    f0: float,
    harmonics: int,
    rel_window_width: float,
    window_fn: WindowFunction,
) -> NDArray[np.float64] | None:
    """Measure the amplitudes of harmonics 1..``harmonics`` of ``f0``.

    The window spans ``rel_window_width`` F0 wavelengths, i.e. an integer
    number of periods of every harmonic when the width is an integer.
    """
    if not f0 > 0 or harmonics < 1:
        return None
    r = _window_block(signal, position, rel_window_width / f0, window_fn)
    if r is None:
        return None
    freqs = f0 * np.arange(1, harmonics + 1, dtype=np.float64)
    return np.abs(_component(*r, freqs))
