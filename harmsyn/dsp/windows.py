"""Window functions addressed by identifier.

Windows are continuous functions on the unit interval [0, 1] so that they
can be evaluated for window widths that are not a whole number of samples
(the analysis windows are sized in F0 wavelengths, not in samples).
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import NDArray

from harmsyn.errors import HarmSynError

WindowFunction = Callable[[NDArray[np.float64]], NDArray[np.float64]]

# Cosine-sum coefficients: w(x) = a0 - a1*cos(2πx) + a2*cos(4πx) - ...
_COSINE_SUM_COEFFS: dict[str, tuple[float, ...]] = {
    "hann": (0.5, 0.5),
    "hamming": (0.54, 0.46),
    "blackman": (0.42, 0.5, 0.08),
    "blackmanHarris": (0.35875, 0.48829, 0.14128, 0.01168),
    "blackmanNuttall": (0.3635819, 0.4891775, 0.1365995, 0.0106411),
    "nuttall": (0.355768, 0.487396, 0.144232, 0.012604),
    "flatTop": (0.21557895, 0.41663158, 0.277263158, 0.083578947, 0.006947368),
}


def _cosine_sum(coeffs: tuple[float, ...]) -> WindowFunction:
    def window(x: NDArray[np.float64]) -> NDArray[np.float64]:
        w = np.zeros_like(x, dtype=np.float64)
        for k, a in enumerate(coeffs):
            w += (-1) ** k * a * np.cos(2 * np.pi * k * x)
        return w

    return window


def _rect(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return np.ones_like(x, dtype=np.float64)


def _triangular(x: NDArray[np.float64]) -> NDArray[np.float64]:
    return 1.0 - np.abs(2.0 * x - 1.0)


_WINDOW_MAP: dict[str, WindowFunction] = {
    "rect": _rect,
    "triangular": _triangular,
    **{name: _cosine_sum(c) for name, c in _COSINE_SUM_COEFFS.items()},
}

WINDOW_IDS: tuple[str, ...] = tuple(_WINDOW_MAP)


def get_window_function(window_id: str) -> WindowFunction:
    """Return the window function for an identifier such as ``"flatTop"``."""
    try:
        return _WINDOW_MAP[window_id]
    except KeyError:
        raise HarmSynError(
            f"Unknown window function \"{window_id}\". Use one of: {', '.join(WINDOW_IDS)}."
        ) from None
