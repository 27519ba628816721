"""Harmonic analysis driver.

Pass 1 tracks the course of F0 with a small step (typically 1 ms) using
only the lowest harmonics. Pass 2 follows the F0 trace with a coarser step
(typically 5 ms) and measures the amplitudes of all harmonics below the
cutoff frequency.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.analysis.records import check_step_multiple, gen_harm_syn_records
from harmsyn.analysis.start import locate_tracking_start
from harmsyn.analysis.tracker import HarmonicTrackingInfo, track_harmonics
from harmsyn.dsp.levels import db_to_amplitude
from harmsyn.dsp.windows import get_window_function
from harmsyn.intdata.model import HarmSynRecord

logger = structlog.get_logger()


@dataclass
class AnalParms:
    """Analysis parameters."""

    # Pass 1
    start_frequency: float | None = None  # [Hz] start F0, pitch detection if None
    start_frequency_min: float = 75.0  # [Hz] lower bound for the detected start F0
    start_frequency_max: float = 900.0  # [Hz] upper bound for the detected start F0
    tracking_start_pos: float | None = None  # [s] automatic if None
    tracking_start_level: float = -22.0  # [dB] level for the automatic start
    tracking_interval: float = 0.001  # [s] tracking step
    max_frequency_derivative: float = 4.0  # [/s] max relative F0 change per second
    min_tracking_amplitude: float = -55.0  # [dB] weaker harmonics are not tracked
    harmonics: int = 10  # harmonics used for tracking
    f_cutoff: float = 5500.0  # [Hz] upper frequency limit for the harmonics
    shift_factor: float = 0.25  # phase measurement distance in wavelengths
    tracking_rel_window_width: float = 12.0  # in F0 wavelengths
    tracking_window_function: str = "flatTop"

    # Pass 2
    interpolation_interval: int = 5  # record step, multiple of the tracking step
    amp_rel_window_width: float = 12.0  # in F0 wavelengths
    amp_window_function: str = "flatTop"


def analyze_harmonic_signal_pass1(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    parms: AnalParms | None = None,
) -> list[HarmonicTrackingInfo]:
    """Track F0 over the whole signal."""
    p = parms or AnalParms()
    window_fn = get_window_function(p.tracking_window_function)
    start = locate_tracking_start(
        signal,
        sample_rate,
        p.tracking_start_pos,
        p.tracking_start_level,
        p.start_frequency,
        p.start_frequency_min,
        p.start_frequency_max,
        p.tracking_rel_window_width,
        tracking_interval=p.tracking_interval,
    )
    interval_samples = p.tracking_interval * sample_rate
    positions = math.floor(len(signal) / interval_samples)
    start_index = min(round(start.time / p.tracking_interval), max(positions - 1, 0))
    logger.info(
        "analyzer.pass1",
        start_s=round(start.time, 4),
        start_hz=round(start.frequency, 2),
        positions=positions,
    )
    return track_harmonics(
        signal,
        interval_samples,
        positions,
        start_index,
        start.frequency / sample_rate,
        p.max_frequency_derivative / sample_rate,
        db_to_amplitude(p.min_tracking_amplitude),
        p.harmonics,
        p.f_cutoff / sample_rate,
        p.shift_factor,
        p.tracking_rel_window_width,
        window_fn,
    )


def analyze_harmonic_signal_pass2(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    tracking_infos: list[HarmonicTrackingInfo],
    parms: AnalParms | None = None,
) -> list[HarmSynRecord]:
    """Measure harmonic amplitudes along the F0 trace of pass 1."""
    p = parms or AnalParms()
    window_fn = get_window_function(p.amp_window_function)
    records = gen_harm_syn_records(
        signal,
        sample_rate,
        tracking_infos,
        p.tracking_interval * sample_rate,
        p.interpolation_interval,
        p.f_cutoff / sample_rate,
        p.amp_rel_window_width,
        window_fn,
    )
    logger.info("analyzer.pass2", records=len(records))
    return records


def analyze_harmonic_signal(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    parms: AnalParms | None = None,
) -> list[HarmSynRecord]:
    """Decompose a signal into F0 and harmonic amplitude records."""
    p = parms or AnalParms()
    tracking_infos = analyze_harmonic_signal_pass1(signal, sample_rate, p)
    return analyze_harmonic_signal_pass2(signal, sample_rate, tracking_infos, p)


def get_f0_trace(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    parms: AnalParms | None,
    f0_extraction_interval: int,
) -> NDArray[np.float64]:
    """F0 values [Hz] at every ``f0_extraction_interval``-th tracking step.

    Value ``i`` belongs to time ``i * f0_extraction_interval * tracking_interval``.
    """
    interval = check_step_multiple(f0_extraction_interval, "f0_extraction_interval")
    tracking_infos = analyze_harmonic_signal_pass1(signal, sample_rate, parms)
    n = len(tracking_infos) // interval
    return np.array(
        [tracking_infos[i * interval].f0 * sample_rate for i in range(n)],
        dtype=np.float64,
    )
