"""Harmonic frequency tracker.

Follows the F0 variations of a signal by measuring the instantaneous
frequencies of its lower harmonics at fixed steps. Tracking runs from the
start step in both directions; each step moves F0 by the amplitude-weighted
mean deviation of the harmonics, limited to a maximum relative derivative.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.dsp.spectrum import inst_freq_single_rel_window
from harmsyn.dsp.windows import WindowFunction
from harmsyn.errors import HarmSynError

logger = structlog.get_logger()


@dataclass
class HarmonicTrackingInfo:
    """Tracking result at one step. Frequencies are normalized (cycles/sample).

    f0:                F0 after the correction of this step.
    inst_f0:           Weighted mean instantaneous F0 of the qualifying
                       harmonics, NaN if none qualified.
    amplitudes:        Measured linear amplitudes, index 0 = fundamental.
                       NaN where not measured. Includes harmonics below the
                       tracking threshold.
    overall_amplitude: Sum of the qualifying amplitudes, NaN if none.
    """

    f0: float
    inst_f0: float
    amplitudes: NDArray[np.float64]
    overall_amplitude: float


def track_harmonics(
    signal: NDArray[np.floating[Any]],
    tracking_interval: float,
    tracking_positions: int,
    start_index: int,
    f0_start: float,
    max_frequency_derivative: float,
    min_tracking_amplitude: float,
    harmonics: int,
    f_cutoff: float,
    shift_factor: float,
    rel_window_width: float,
    window_fn: WindowFunction,
) -> list[HarmonicTrackingInfo]:
    """Track F0 over ``tracking_positions`` steps.

    Args:
        signal: Signal samples.
        tracking_interval: Step size [samples], may be fractional.
        tracking_positions: Number of steps; step p is at sample p * interval.
        start_index: Step at which both passes start.
        f0_start: Start F0 [normalized].
        max_frequency_derivative: Maximum relative F0 change per sample.
        min_tracking_amplitude: Harmonics below this linear amplitude do
            not take part in the correction.
        harmonics: Number of harmonics to measure.
        f_cutoff: Harmonics at or above this frequency are skipped [normalized].
        shift_factor: Distance of the two phase measurements in wavelengths.
        rel_window_width: Window width in F0 wavelengths.
        window_fn: Measurement window.

    Returns:
        One HarmonicTrackingInfo per step.

    Raises:
        HarmSynError: Start step outside the tracked range.
    """
    if tracking_positions <= 0:
        return []
    if not 0 <= start_index < tracking_positions:
        raise HarmSynError(
            f"Tracking start step {start_index} is outside of 0..{tracking_positions - 1}."
        )
    buf: list[HarmonicTrackingInfo | None] = [None] * tracking_positions
    # Pass 1 runs forward, pass 2 backward. Both compute the start step and
    # the backward result is the one that stays in the buffer.
    for direction in (1, -1):
        f0 = f0_start
        p = start_index
        while 0 <= p < tracking_positions:
            info = _track_step(
                signal,
                p * tracking_interval,
                f0,
                max_frequency_derivative * tracking_interval * f0,
                min_tracking_amplitude,
                harmonics,
                f_cutoff,
                shift_factor,
                rel_window_width,
                window_fn,
            )
            buf[p] = info
            f0 = info.f0
            p += direction

    logger.debug(
        "tracker.done",
        positions=tracking_positions,
        start_index=start_index,
        untracked=sum(1 for i in buf if i is not None and math.isnan(i.overall_amplitude)),
    )
    return buf  # type: ignore[return-value]


def _track_step(
    signal: NDArray[np.floating[Any]],
    position: float,
    f0: float,
    max_diff: float,
    min_tracking_amplitude: float,
    harmonics: int,
    f_cutoff: float,
    shift_factor: float,
    rel_window_width: float,
    window_fn: WindowFunction,
) -> HarmonicTrackingInfo:
    amplitudes = np.full(harmonics, np.nan)
    amplitude_sum = 0.0
    weighted_inst_f0_sum = 0.0
    weighted_corr_sum = 0.0
    for harmonic in range(1, harmonics + 1):
        harmonic_frequency = f0 * harmonic
        if harmonic_frequency >= f_cutoff:
            continue
        r = inst_freq_single_rel_window(
            signal,
            position,
            harmonic_frequency,
            shift_factor,
            rel_window_width * harmonic,
            window_fn,
        )
        if r is None:
            continue
        amplitudes[harmonic - 1] = r.amplitude
        if r.amplitude < min_tracking_amplitude:
            continue
        diff = (r.inst_frequency - harmonic_frequency) / harmonic
        corr = max(-max_diff, min(max_diff, diff))
        amplitude_sum += r.amplitude
        weighted_inst_f0_sum += r.inst_frequency / harmonic * r.amplitude
        weighted_corr_sum += corr * r.amplitude

    if amplitude_sum:
        f0 += weighted_corr_sum / amplitude_sum
    return HarmonicTrackingInfo(
        f0=f0,
        inst_f0=weighted_inst_f0_sum / amplitude_sum if amplitude_sum else math.nan,
        amplitudes=amplitudes,
        overall_amplitude=amplitude_sum if amplitude_sum else math.nan,
    )
