"""Record generator — harmonic amplitudes along the tracked F0 trace."""

from __future__ import annotations

import math
from numbers import Integral
from typing import Any, Sequence

import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.analysis.tracker import HarmonicTrackingInfo
from harmsyn.dsp.levels import amplitude_to_db
from harmsyn.dsp.spectrum import get_harmonic_amplitudes
from harmsyn.dsp.windows import WindowFunction
from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import HarmSynRecord

logger = structlog.get_logger()


def check_step_multiple(value: Any, name: str) -> int:
    """Validate a positive integer step multiple (ints or integral floats)."""
    if isinstance(value, bool):
        raise HarmSynError(f"{name} is not an integer.")
    if isinstance(value, Integral):
        n = int(value)
    elif isinstance(value, float) and value.is_integer():
        n = int(value)
    else:
        raise HarmSynError(f"{name} is not an integer.")
    if n < 1:
        raise HarmSynError(f"{name} must be at least 1.")
    return n


def gen_harm_syn_records(
    signal: NDArray[np.floating[Any]],
    sample_rate: float,
    tracking_infos: Sequence[HarmonicTrackingInfo],
    tracking_interval: float,
    interpolation_interval: int,
    f_cutoff: float,
    rel_window_width: float,
    window_fn: WindowFunction,
) -> list[HarmSynRecord]:
    """Measure the harmonic amplitudes at every ``interpolation_interval``-th step.

    Only F0 is taken from the tracking infos. Steps without a finite F0 or
    without any qualifying harmonic, and steps where the measurement window
    does not fit, produce no record.

    Args:
        signal: Signal samples.
        sample_rate: Sample rate [Hz].
        tracking_infos: Output of the harmonic tracker.
        tracking_interval: Tracking step [samples].
        interpolation_interval: Record step as a multiple of the tracking step.
        f_cutoff: Upper frequency limit for the harmonics [normalized].
        rel_window_width: Window width in F0 wavelengths.
        window_fn: Measurement window.

    Raises:
        HarmSynError: ``interpolation_interval`` is not a positive integer.
    """
    interval = check_step_multiple(interpolation_interval, "interpolation_interval")
    records: list[HarmSynRecord] = []
    skipped = 0
    for p in range(len(tracking_infos) // interval):
        position = p * interval * tracking_interval
        info = tracking_infos[p * interval]
        f0 = info.f0
        if not math.isfinite(f0) or not info.overall_amplitude > 0:
            skipped += 1
            continue
        harmonics = math.floor(f_cutoff / f0)
        amplitudes = get_harmonic_amplitudes(
            signal, position, f0, harmonics, rel_window_width, window_fn
        )
        if amplitudes is None:
            skipped += 1
            continue
        records.append(
            HarmSynRecord(
                time=position / sample_rate,
                f0=f0 * sample_rate,
                amplitudes=amplitude_to_db(amplitudes),
            )
        )

    logger.debug("records.generated", records=len(records), skipped=skipped)
    return records
