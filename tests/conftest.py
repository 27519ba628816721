"""Shared test signals."""

from __future__ import annotations

import numpy as np
import pytest

SR = 16000
F0 = 200.0
# Harmonic amplitudes of the test signal, index 0 = fundamental
AMPLITUDES = (0.5, 0.25, 0.1)


def harmonic_signal(
    duration_s: float = 0.5,
    sr: int = SR,
    f0: float = F0,
    amplitudes: tuple[float, ...] = AMPLITUDES,
) -> np.ndarray:
    """Steady harmonic tone: sum of a_h * sin(2π h f0 t)."""
    t = np.arange(int(duration_s * sr)) / sr
    return sum(a * np.sin(2 * np.pi * (h + 1) * f0 * t) for h, a in enumerate(amplitudes))


@pytest.fixture
def vowel() -> np.ndarray:
    """Half a second of a 200 Hz tone with three harmonics at 16 kHz."""
    return harmonic_signal()
