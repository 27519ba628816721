"""ANALYSIS — Harmonic decomposition layer.

- Start: tracking start position and start F0
- Tracker: bidirectional F0 tracking from harmonic instantaneous frequencies
- Records: harmonic amplitude measurement along the F0 trace
- Analyzer: pass 1 / pass 2 driver and F0 trace extraction
"""

from harmsyn.analysis.analyzer import (
    AnalParms,
    analyze_harmonic_signal,
    analyze_harmonic_signal_pass1,
    analyze_harmonic_signal_pass2,
    get_f0_trace,
)
from harmsyn.analysis.records import gen_harm_syn_records
from harmsyn.analysis.start import (
    FALLBACK_START_FREQUENCY,
    TrackingStart,
    determine_start_frequency,
    find_tracking_start_frequency,
    find_tracking_start_position,
    locate_tracking_start,
)
from harmsyn.analysis.tracker import HarmonicTrackingInfo, track_harmonics

__all__ = [
    "AnalParms",
    "analyze_harmonic_signal",
    "analyze_harmonic_signal_pass1",
    "analyze_harmonic_signal_pass2",
    "get_f0_trace",
    "gen_harm_syn_records",
    "FALLBACK_START_FREQUENCY",
    "TrackingStart",
    "determine_start_frequency",
    "find_tracking_start_frequency",
    "find_tracking_start_position",
    "locate_tracking_start",
    "HarmonicTrackingInfo",
    "track_harmonics",
]
