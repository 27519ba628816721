"""SYNTHESIS — Additive resynthesis layer.

- Prepare: harmonic model → bounded interpolation functions
- Oscillator: locked / shifted phase oscillator bank
- Harmonic mod: per-harmonic gain and mute strings
- Synth: parameter struct and one-call synthesis
"""

from harmsyn.synthesis.harmonic_mod import decode_harmonic_mod_string
from harmsyn.synthesis.oscillator import synthesize_from_base
from harmsyn.synthesis.prepare import HarmSynBase, prepare
from harmsyn.synthesis.synth import SynParms, synthesize_harmonic_signal

__all__ = [
    "decode_harmonic_mod_string",
    "synthesize_from_base",
    "HarmSynBase",
    "prepare",
    "SynParms",
    "synthesize_harmonic_signal",
]
