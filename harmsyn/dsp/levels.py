"""Level conversion between linear amplitudes and decibels."""

from __future__ import annotations

from typing import Any

import librosa
import numpy as np
from numpy.typing import ArrayLike, NDArray

# Smallest amplitude that still maps to a finite dB value.
_AMIN = 1e-150


def amplitude_to_db(amplitudes: ArrayLike) -> NDArray[np.float64]:
    """Convert linear amplitudes to dB (0 dB = amplitude 1).

    Zero maps to -inf and NaN stays NaN, so "not measured" is preserved.
    """
    a = np.asarray(amplitudes, dtype=np.float64)
    db = librosa.amplitude_to_db(np.abs(a), ref=1.0, amin=_AMIN, top_db=None)
    db = np.where(a == 0, -np.inf, db)
    return np.where(np.isnan(a), np.nan, db)


def db_to_amplitude(db: ArrayLike) -> Any:
    """Convert dB levels to linear amplitudes. Scalars stay scalars."""
    if np.isscalar(db):
        return float(librosa.db_to_amplitude(np.float64(db), ref=1.0))
    return librosa.db_to_amplitude(np.asarray(db, dtype=np.float64), ref=1.0)
