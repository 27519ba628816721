"""Harmonic mod strings.

A harmonic mod vector holds one dB gain per harmonic; -inf mutes the
harmonic. The string form enables harmonics selectively:

- ``"2 4"``: only the 2nd and 4th harmonic
- ``"2*"``: all even harmonics
- ``"1* 3/-5"``: all harmonics, the 3rd attenuated by 5 dB

An empty string enables all harmonics at 0 dB.
"""

from __future__ import annotations

import math
import re

import numpy as np
from numpy.typing import NDArray

from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import MAX_HARMONICS

_ENTRY_RE = re.compile(
    r"\s*(?P<harmonic>[+-]?[\d.]+)\s*(?P<multi>\*)?\s*(?:/\s*(?P<gain>[+-]?[\d.]+))?\s*,?"
)


def _decode_number(s: str) -> float:
    try:
        x = float(s)
    except ValueError:
        raise HarmSynError(f"Invalid number \"{s}\" in harmonic mod string.") from None
    if not math.isfinite(x):
        raise HarmSynError(f"Invalid number \"{s}\" in harmonic mod string.")
    return x


def decode_harmonic_mod_string(s: str | None) -> NDArray[np.float64]:
    """Decode a harmonic mod string into a vector of MAX_HARMONICS dB gains."""
    if not s or not s.strip():
        return np.zeros(MAX_HARMONICS)
    mods = np.full(MAX_HARMONICS, -np.inf)
    pos = 0
    while pos < len(s) and s[pos:].strip():
        m = _ENTRY_RE.match(s, pos)
        if not m or m.end() == pos:
            raise HarmSynError(f"Syntax error in harmonic mod string at position {pos + 1}.")
        harmonic = _decode_number(m.group("harmonic"))
        if not harmonic.is_integer() or harmonic < 1 or harmonic > MAX_HARMONICS:
            raise HarmSynError(f"Invalid harmonic number {m.group('harmonic')}.")
        h = int(harmonic)
        gain = _decode_number(m.group("gain")) if m.group("gain") else 0.0
        if m.group("multi"):
            mods[h - 1 :: h] = gain
        else:
            mods[h - 1] = gain
        pos = m.end()
    return mods
