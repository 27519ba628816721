"""Text intermediate file format for harmonic synthesizer records.

One line per record::

    0.125000 220.35/-12.40 *2/-18.05 *3/-30.00

The first field is the time [s], followed by ``f0/amplitude`` of the
fundamental [Hz/dB] and ``*harmonic/amplitude`` for the overtones. Lines that
are blank or start with ``;`` or ``*`` are ignored.

Writing is lossy: amplitudes are rounded to two decimals, raised to the
minimum relevant amplitude, and overtones that are irrelevant together with
both of their temporal neighbours are omitted.
"""

from __future__ import annotations

import math
import re
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import MAX_HARMONICS, HarmSynRecord

_NUMBER = r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)"
_NUMBER_RE = re.compile(_NUMBER)
_FUNDAMENTAL_RE = re.compile(rf"({_NUMBER})/({_NUMBER})")
_HARMONIC_RE = re.compile(rf"\*({_NUMBER})/({_NUMBER})")


# ── Writer ───────────────────────────────────────────────


def create_harm_syn_file(records: Sequence[HarmSynRecord], min_relevant_amplitude: float) -> str:
    """Encode records as text.

    Args:
        records: Records sorted by time.
        min_relevant_amplitude: Amplitude threshold [dB].
    """
    lines: list[str] = []
    n = len(records)
    for p, r in enumerate(records):
        prev_amps = records[p - 1].amplitudes if p > 0 else None
        next_amps = records[p + 1].amplitudes if p < n - 1 else None
        comp = _components_string(r.f0, r.amplitudes, prev_amps, next_amps, min_relevant_amplitude)
        if comp:
            lines.append(f"{r.time:.6f} {comp}\n")
    return "".join(lines)


def _is_relevant(amplitudes: NDArray[np.float64] | None, i: int, threshold: float) -> bool:
    if amplitudes is None or i >= len(amplitudes):
        return False
    a = amplitudes[i]
    return bool(math.isfinite(a) and a >= threshold)


def _components_string(
    f0: float,
    amplitudes: NDArray[np.float64],
    prev_amps: NDArray[np.float64] | None,
    next_amps: NDArray[np.float64] | None,
    threshold: float,
) -> str:
    if not math.isfinite(f0) or len(amplitudes) < 1:
        return ""
    a0 = amplitudes[0]
    head = f"{f0:.2f}/{max(a0, threshold):.2f}"
    overtones = ""
    for i in range(1, len(amplitudes)):
        a = amplitudes[i]
        if not math.isfinite(a):
            continue
        if not (
            _is_relevant(amplitudes, i, threshold)
            or _is_relevant(prev_amps, i, threshold)
            or _is_relevant(next_amps, i, threshold)
        ):
            continue
        overtones += f" *{i + 1}/{max(a, threshold):.2f}"
    if not overtones and not a0 >= threshold:
        return ""
    return head + overtones


# ── Reader ───────────────────────────────────────────────


def _parse_number(s: str, what: str) -> float:
    if not _NUMBER_RE.fullmatch(s):
        raise HarmSynError(f"Syntax error. Number expected for {what}, found \"{s}\".")
    return float(s)


def _parse_line(line: str) -> HarmSynRecord | None:
    s = line.strip()
    if not s or s[0] in ";*":
        return None
    tokens = s.split()
    if len(tokens) < 2:
        raise HarmSynError("'f0/amplitude' expected after time.")
    time = _parse_number(tokens[0], "time")
    m = _FUNDAMENTAL_RE.fullmatch(tokens[1])
    if not m:
        raise HarmSynError(f"'f0/amplitude' expected, found \"{tokens[1]}\".")
    f0 = _parse_number(m.group(1), "F0")

    amplitudes = np.full(MAX_HARMONICS, -np.inf)
    amplitudes[0] = _parse_number(m.group(2), "F0 amplitude")
    used = 1
    for token in tokens[2:]:
        m = _HARMONIC_RE.fullmatch(token)
        if not m:
            raise HarmSynError(f"'*harmonic/amplitude' expected, found \"{token}\".")
        harmonic = _parse_number(m.group(1), "harmonic")
        if not harmonic.is_integer() or harmonic <= 1 or harmonic > MAX_HARMONICS:
            raise HarmSynError(f"Invalid harmonic multiplier {m.group(1)}.")
        h = int(harmonic)
        amplitudes[h - 1] = _parse_number(m.group(2), "amplitude")
        used = max(used, h)
    return HarmSynRecord(time=time, f0=f0, amplitudes=amplitudes[:used].copy())


def parse_harm_syn_file(text: str) -> list[HarmSynRecord]:
    """Decode text into records.

    Raises:
        HarmSynError: On the first malformed line, with its line number.
    """
    records: list[HarmSynRecord] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        try:
            r = _parse_line(line)
        except HarmSynError as e:
            raise HarmSynError(f"Error while parsing line {line_no}: {e}") from e
        if r is not None:
            records.append(r)
    return records
