"""Tracking start locator — where and at which F0 harmonic tracking begins."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import librosa
import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.dsp.envelope import generate_signal_envelope
from harmsyn.dsp.levels import db_to_amplitude
from harmsyn.dsp.pitch import HarmonicSumParms, estimate_pitch_harmonic_sum

logger = structlog.get_logger()

FALLBACK_START_FREQUENCY = 250.0  # [Hz]

# Envelope smoothing used to find the first loud position
DC_WINDOW_S = 0.250
ENVELOPE_WINDOW_S = 0.075


@dataclass
class TrackingStart:
    """Start point of the harmonic tracking."""

    time: float  # [s]
    frequency: float  # [Hz]


def find_tracking_start_position(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    start_pos: float | None,
    start_level_db: float,
    start_frequency: float | None,
    start_frequency_min: float,
    tracking_rel_window_width: float,
    pitch_parms: HarmonicSumParms | None = None,
) -> float:
    """Determine the start position for frequency tracking.

    The position keeps a margin from both signal edges, so that the pitch
    detector and the tracking windows fit.

    Args:
        signal: Signal samples.
        sample_rate: Sample rate [Hz].
        start_pos: Explicit start position [s]. Clipped into the valid range.
        start_level_db: Minimum envelope level for the automatic start [dB].
        start_frequency: Explicit start F0 [Hz], or None for pitch detection.
        start_frequency_min: Lowest F0 the pitch detector may return [Hz].
        tracking_rel_window_width: Tracking window width in F0 wavelengths.

    Returns:
        Start position [s].
    """
    signal_length = len(signal) / sample_rate

    if start_frequency is None:
        p = pitch_parms or HarmonicSumParms()
        pitch_margin = (p.rel_window_width + 0.1) / start_frequency_min / 2
    else:
        pitch_margin = 0.0
    min_tracking_freq = start_frequency if start_frequency is not None else start_frequency_min
    tracking_margin = (tracking_rel_window_width + 0.1) / min_tracking_freq / 2
    margin = max(pitch_margin, tracking_margin)

    if 2.1 * margin > signal_length:
        logger.warning(
            "start.signal_too_short",
            signal_length_s=round(signal_length, 4),
            margin_s=round(margin, 4),
        )
        return signal_length / 2

    def clip(t: float) -> float:
        return max(margin, min(signal_length - margin, t))

    if start_pos is not None:
        return clip(start_pos)

    envelope = generate_signal_envelope(
        signal,
        round(DC_WINDOW_S * sample_rate),
        round(ENVELOPE_WINDOW_S * sample_rate),
    )
    min_amplitude = db_to_amplitude(start_level_db)
    loud = np.flatnonzero(envelope >= min_amplitude)
    if len(loud) == 0:
        p_max = int(np.argmax(envelope))
        logger.debug("start.level_not_reached", level_db=start_level_db, peak_pos_s=p_max / sample_rate)
        return clip(p_max / sample_rate)
    return clip(int(loud[0]) / sample_rate + margin)


def find_tracking_start_frequency(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    position: float,
    start_frequency_min: float,
    start_frequency_max: float,
    pitch_parms: HarmonicSumParms | None = None,
) -> float:
    """Estimate F0 at ``position`` [s]. Returns Hz or NaN."""
    return estimate_pitch_harmonic_sum(
        signal, sample_rate, position, start_frequency_min, start_frequency_max, pitch_parms
    )


def determine_start_frequency(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    start_pos: float,
    start_frequency: float | None,
    start_frequency_min: float,
    start_frequency_max: float,
) -> float:
    """Explicit start F0, else pitch detection, else the fallback frequency."""
    if start_frequency:
        return start_frequency
    f = find_tracking_start_frequency(
        signal, sample_rate, start_pos, start_frequency_min, start_frequency_max
    )
    if math.isfinite(f) and f > 0:
        logger.info(
            "start.frequency_detected",
            frequency_hz=round(f, 1),
            note=librosa.hz_to_note(f),
        )
        return f
    logger.warning("start.frequency_not_detected", fallback_hz=FALLBACK_START_FREQUENCY)
    return FALLBACK_START_FREQUENCY


def locate_tracking_start(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    start_pos: float | None,
    start_level_db: float,
    start_frequency: float | None,
    start_frequency_min: float,
    start_frequency_max: float,
    tracking_rel_window_width: float,
    tracking_interval: float | None = None,
) -> TrackingStart:
    """Start position and start F0 in one call.

    With ``tracking_interval`` [s] the position is moved forward onto the
    tracking grid before the start F0 is measured there.
    """
    t = find_tracking_start_position(
        signal,
        sample_rate,
        start_pos,
        start_level_db,
        start_frequency,
        start_frequency_min,
        tracking_rel_window_width,
    )
    if tracking_interval:
        t = math.ceil(t / tracking_interval - 1e-3) * tracking_interval
    f = determine_start_frequency(
        signal, sample_rate, t, start_frequency, start_frequency_min, start_frequency_max
    )
    return TrackingStart(time=t, frequency=f)
