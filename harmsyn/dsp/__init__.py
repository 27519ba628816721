"""DSP — Numeric primitives for harmonic analysis and synthesis.

- Windows: continuous window functions by identifier
- Spectrum: instantaneous frequency and harmonic amplitude measurement
- Pitch: harmonic-sum pitch detection
- Envelope: smoothed signal amplitude envelope
- Interpolation: linear / nearest / cubic / akima interpolators
"""

from harmsyn.dsp.envelope import generate_signal_envelope
from harmsyn.dsp.interpolation import (
    INTERPOLATION_METHODS,
    Interpolator,
    create_interpolator,
)
from harmsyn.dsp.levels import amplitude_to_db, db_to_amplitude
from harmsyn.dsp.pitch import HarmonicSumParms, estimate_pitch_harmonic_sum
from harmsyn.dsp.spectrum import (
    InstFreqResult,
    get_harmonic_amplitudes,
    inst_freq_single,
    inst_freq_single_rel_window,
)
from harmsyn.dsp.windows import WINDOW_IDS, WindowFunction, get_window_function

__all__ = [
    "generate_signal_envelope",
    "INTERPOLATION_METHODS",
    "Interpolator",
    "create_interpolator",
    "amplitude_to_db",
    "db_to_amplitude",
    "HarmonicSumParms",
    "estimate_pitch_harmonic_sum",
    "InstFreqResult",
    "get_harmonic_amplitudes",
    "inst_freq_single",
    "inst_freq_single_rel_window",
    "WINDOW_IDS",
    "WindowFunction",
    "get_window_function",
]
