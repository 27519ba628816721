"""Signal amplitude envelope."""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy.ndimage import uniform_filter1d


def generate_signal_envelope(
    signal: NDArray[np.floating[Any]],
    dc_window_width: int,
    envelope_window_width: int,
) -> NDArray[np.float64]:
    """Smoothed amplitude envelope of a signal.

    The DC offset is removed with a moving average, then the moving RMS is
    scaled by sqrt(2) so that a steady sinusoid of amplitude A yields A.

    Args:
        signal: Mono signal.
        dc_window_width: Moving-average width for DC removal [samples].
        envelope_window_width: Moving-average width for the envelope [samples].
    """
    x = np.asarray(signal, dtype=np.float64)
    if len(x) == 0:
        return x.copy()
    dc = uniform_filter1d(x, size=max(1, dc_window_width), mode="nearest")
    ac = x - dc
    power = uniform_filter1d(ac * ac, size=max(1, envelope_window_width), mode="nearest")
    return np.sqrt(2.0 * np.maximum(power, 0.0))
