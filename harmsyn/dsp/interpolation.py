"""Interpolation functions addressed by method identifier.

Each interpolator maps a scalar or array of x values to y values. The
method is resolved once when the interpolator is built.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.interpolate import Akima1DInterpolator, CubicSpline

from harmsyn.errors import HarmSynError

Interpolator = Callable[[ArrayLike], NDArray[np.float64]]

INTERPOLATION_METHODS: tuple[str, ...] = ("linear", "nearest", "cubic", "akima")

# Minimum number of points for the spline methods; below, linear is used.
_MIN_POINTS = {"cubic": 3, "akima": 5}


def _linear(x_vals: NDArray[np.float64], y_vals: NDArray[np.float64]) -> Interpolator:
    def f(x: ArrayLike) -> NDArray[np.float64]:
        return np.interp(np.asarray(x, dtype=np.float64), x_vals, y_vals)

    return f


def _nearest(x_vals: NDArray[np.float64], y_vals: NDArray[np.float64]) -> Interpolator:
    midpoints = (x_vals[1:] + x_vals[:-1]) / 2

    def f(x: ArrayLike) -> NDArray[np.float64]:
        idx = np.searchsorted(midpoints, np.asarray(x, dtype=np.float64), side="left")
        return y_vals[idx]

    return f


def _spline(spline: Callable[[NDArray[np.float64]], NDArray[np.float64]]) -> Interpolator:
    def f(x: ArrayLike) -> NDArray[np.float64]:
        return np.asarray(spline(np.asarray(x, dtype=np.float64)), dtype=np.float64)

    return f


def create_interpolator(
    method: str,
    x_vals: ArrayLike,
    y_vals: ArrayLike,
) -> Interpolator:
    """Build an interpolation function through the points (x_vals, y_vals).

    Args:
        method: "linear", "nearest", "cubic" (natural cubic spline) or "akima".
        x_vals: Strictly increasing x values.
        y_vals: Matching y values.

    Raises:
        HarmSynError: Unknown method or inconsistent/empty point arrays.
    """
    x = np.asarray(x_vals, dtype=np.float64)
    y = np.asarray(y_vals, dtype=np.float64)
    if method not in INTERPOLATION_METHODS:
        raise HarmSynError(
            f"Unknown interpolation method \"{method}\". Use one of: {', '.join(INTERPOLATION_METHODS)}."
        )
    if len(x) == 0 or len(x) != len(y):
        raise HarmSynError("Interpolation requires matching, non-empty x and y arrays.")
    if len(x) > 1 and not np.all(np.diff(x) > 0):
        raise HarmSynError("Interpolation x values must be strictly increasing.")

    if len(x) < _MIN_POINTS.get(method, 1):
        method = "linear"
    if method == "nearest":
        return _nearest(x, y)
    if method == "cubic":
        return _spline(CubicSpline(x, y, bc_type="natural", extrapolate=True))
    if method == "akima":
        return _spline(Akima1DInterpolator(x, y))
    return _linear(x, y)
