"""Oscillator bank — additive synthesis from prepared harmonic functions.

Two phase models:

- Locked (freq_shift == 0): one phase accumulator for the fundamental;
  harmonic h uses h times that phase, so harmonics never drift apart.
- Shifted (freq_shift != 0): one accumulator per harmonic, advanced by
  ``f0 * h + freq_shift``. The partials are no longer integer multiples.

An accumulator whose frequency is not positive is set to MUTED; a muted
accumulator contributes nothing and restarts at phase 0 once its frequency
is positive again.
"""

from __future__ import annotations

import math

import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.dsp.levels import db_to_amplitude
from harmsyn.synthesis.prepare import HarmSynBase

logger = structlog.get_logger()

PI2 = 2 * math.pi

# Amplitudes below this level are inaudible [dB]
MIN_AMPLITUDE_DB = -99.0

MUTED = math.nan


def _accumulate_phase(frequencies: NDArray[np.float64], sample_rate: float) -> NDArray[np.float64]:
    """Phase at every sample; element i is the phase before advancing at i."""
    phases = [0.0] * len(frequencies)
    w = 0.0
    for i, f in enumerate(frequencies.tolist()):
        phases[i] = w
        if not f > 0:
            w = MUTED
            continue
        if w != w:  # muted
            w = 0.0
        w += PI2 * f / sample_rate
        while w >= PI2:
            w -= PI2
    return np.array(phases, dtype=np.float64)


def _amplitude_curve(base: HarmSynBase, harmonic: int, t: NDArray[np.float64]) -> NDArray[np.float64] | None:
    """Linear amplitude of a harmonic at the sample times, None if muted."""
    fn = base.amplitude_functions[harmonic - 1]
    if fn is None:
        return None
    db = np.asarray(fn(t), dtype=np.float64)
    audible = np.isfinite(db) & (db >= MIN_AMPLITUDE_DB)
    if not np.any(audible):
        return None
    return np.where(audible, db_to_amplitude(np.where(audible, db, 0.0)), 0.0)


def _partial(amplitude: NDArray[np.float64], phase: NDArray[np.float64]) -> NDArray[np.float64]:
    muted = np.isnan(phase)
    out = amplitude * np.sin(np.where(muted, 0.0, phase))
    out[muted] = 0.0
    return out


def synthesize_from_base(base: HarmSynBase, sample_rate: float) -> NDArray[np.float64]:
    """Render the output signal.

    Args:
        base: Prepared synthesis state.
        sample_rate: Output sample rate [Hz].

    Returns:
        ``round(duration * sample_rate)`` float64 samples.
    """
    n = round(base.duration * sample_rate)
    output = np.zeros(n, dtype=np.float64)
    if n == 0:
        return output
    t = np.arange(n, dtype=np.float64) / sample_rate
    f0 = np.asarray(base.f0_function(t), dtype=np.float64)
    locked = base.freq_shift == 0

    w0 = _accumulate_phase(f0, sample_rate) if locked else None
    active = 0
    for harmonic in range(1, base.harmonics + 1):
        amplitude = _amplitude_curve(base, harmonic, t)
        if amplitude is None:
            continue
        active += 1
        if w0 is not None:
            phase = w0 * harmonic
        else:
            phase = _accumulate_phase(f0 * harmonic + base.freq_shift, sample_rate)
        output += _partial(amplitude, phase)

    logger.debug(
        "oscillator.rendered",
        samples=n,
        harmonics=active,
        mode="locked" if locked else "shifted",
    )
    return output
