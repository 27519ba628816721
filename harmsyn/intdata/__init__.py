"""INTDATA — Harmonic model shared by analysis and synthesis.

- Model: HarmSynRecord, FunctionCurve, HarmSynDef, records → curves
- Text format: lossy text encoding of records
"""

from harmsyn.intdata.model import (
    MAX_HARMONICS,
    FunctionCurve,
    HarmSynDef,
    HarmSynRecord,
    convert_records_to_def,
)
from harmsyn.intdata.text_format import create_harm_syn_file, parse_harm_syn_file

__all__ = [
    "MAX_HARMONICS",
    "FunctionCurve",
    "HarmSynDef",
    "HarmSynRecord",
    "convert_records_to_def",
    "create_harm_syn_file",
    "parse_harm_syn_file",
]
