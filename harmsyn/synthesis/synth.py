"""Harmonic synthesis driver."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import structlog
from numpy.typing import NDArray

from harmsyn.intdata.model import MAX_HARMONICS, HarmSynDef
from harmsyn.synthesis.oscillator import synthesize_from_base
from harmsyn.synthesis.prepare import prepare

logger = structlog.get_logger()


@dataclass
class SynParms:
    """Synthesis parameters."""

    interpolation_method: str = "akima"
    f0_multiplier: float = 1.0
    freq_shift: float = 0.0  # [Hz]
    harmonic_mod: NDArray[np.float64] = field(default_factory=lambda: np.zeros(MAX_HARMONICS))
    output_sample_rate: int = 44100


def synthesize_harmonic_signal(
    harm_syn_def: HarmSynDef,
    parms: SynParms | None = None,
) -> NDArray[np.float64]:
    """Render a harmonic model to a mono signal at ``parms.output_sample_rate``."""
    p = parms or SynParms()
    base = prepare(
        harm_syn_def,
        p.interpolation_method,
        p.f0_multiplier,
        p.freq_shift,
        p.harmonic_mod,
    )
    logger.info(
        "synth.prepared",
        duration_s=round(base.duration, 3),
        harmonics=base.harmonics,
        f0_range_hz=(round(base.f0_min, 1), round(base.f0_max, 1)),
        freq_shift_hz=base.freq_shift,
    )
    return synthesize_from_base(base, p.output_sample_rate)
