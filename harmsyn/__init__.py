"""HarmSyn — Harmonic analysis and resynthesis of quasi-periodic signals.

Decomposes a sustained sound (e.g. a vowel) into an F0 trace and harmonic
amplitude curves, and resynthesizes audio from that model with pitch
scaling, frequency shifting and per-harmonic gain.
"""

from harmsyn.analysis import AnalParms, analyze_harmonic_signal, get_f0_trace
from harmsyn.errors import HarmSynError
from harmsyn.intdata import (
    HarmSynDef,
    HarmSynRecord,
    convert_records_to_def,
    create_harm_syn_file,
    parse_harm_syn_file,
)
from harmsyn.synthesis import SynParms, decode_harmonic_mod_string, synthesize_harmonic_signal

__version__ = "0.1.0"

__all__ = [
    "AnalParms",
    "analyze_harmonic_signal",
    "get_f0_trace",
    "HarmSynError",
    "HarmSynDef",
    "HarmSynRecord",
    "convert_records_to_def",
    "create_harm_syn_file",
    "parse_harm_syn_file",
    "SynParms",
    "decode_harmonic_mod_string",
    "synthesize_harmonic_signal",
]
