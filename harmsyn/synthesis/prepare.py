"""Synthesis preparation — harmonic model → bounded interpolation functions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from harmsyn.dsp.interpolation import Interpolator, create_interpolator
from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import FunctionCurve, HarmSynDef

# Value of an amplitude function outside of its curve [dB]
SILENT = -np.inf

# Methods that may produce non-finite values near the curve boundaries
_SPLINE_METHODS = ("akima", "cubic")


@dataclass
class HarmSynBase:
    """Prepared state of the harmonic synthesizer.

    duration:            Signal duration [s] (last F0 curve time).
    harmonics:           Number of harmonic slots.
    freq_shift:          Frequency shift for all harmonics [Hz].
    f0_min / f0_max:     Observed F0 range after the multiplier [Hz].
    f0_function:         F0 [Hz] over time, clamped to the curve domain.
    amplitude_functions: Amplitude [dB] over time per harmonic; None for a
                         muted harmonic. SILENT outside the curve domain.
    """

    duration: float
    harmonics: int
    freq_shift: float
    f0_min: float
    f0_max: float
    f0_function: Interpolator
    amplitude_functions: list[Interpolator | None] = field(default_factory=list)


def prepare(
    harm_syn_def: HarmSynDef,
    interpolation_method: str,
    f0_multiplier: float,
    freq_shift: float,
    harmonic_mod: ArrayLike,
) -> HarmSynBase:
    """Build the synthesis state from a harmonic model.

    Args:
        harm_syn_def: Harmonic model.
        interpolation_method: "akima", "cubic", "linear" or "nearest".
        f0_multiplier: Factor applied to F0.
        freq_shift: Frequency shift [Hz], 0 for harmonic synthesis.
        harmonic_mod: dB gain per harmonic, -inf mutes the harmonic.

    Raises:
        HarmSynError: Empty definition or unknown interpolation method.
    """
    if len(harm_syn_def.f0_curve) == 0:
        raise HarmSynError("Empty harmonic synthesizer definition.")
    mods = np.asarray(harmonic_mod, dtype=np.float64)
    f0_curve = _apply_f0_multiplier(harm_syn_def.f0_curve, f0_multiplier)
    amplitude_curves = _apply_harmonic_mod(harm_syn_def.amplitude_curves, mods)

    f0_function = _create_constrained_interpolator(interpolation_method, f0_curve)
    amplitude_functions: list[Interpolator | None] = [
        _create_constrained_interpolator(interpolation_method, c, outside_value=SILENT)
        if c is not None and len(c)
        else None
        for c in amplitude_curves
    ]
    return HarmSynBase(
        duration=float(f0_curve.x_vals[-1]),
        harmonics=len(amplitude_curves),
        freq_shift=float(freq_shift),
        f0_min=float(np.min(f0_curve.y_vals)),
        f0_max=float(np.max(f0_curve.y_vals)),
        f0_function=f0_function,
        amplitude_functions=amplitude_functions,
    )


def _apply_f0_multiplier(f0_curve: FunctionCurve, f0_multiplier: float) -> FunctionCurve:
    return FunctionCurve(f0_curve.x_vals, f0_curve.y_vals * f0_multiplier)


def _find_max_enabled_harmonic(mods: NDArray[np.float64]) -> int:
    enabled = np.flatnonzero(np.isfinite(mods))
    return int(enabled[-1]) + 1 if len(enabled) else 0


def _apply_harmonic_mod(
    curves: Sequence[FunctionCurve],
    mods: NDArray[np.float64],
) -> list[FunctionCurve | None]:
    harmonics = min(_find_max_enabled_harmonic(mods), len(curves))
    out: list[FunctionCurve | None] = []
    for i in range(harmonics):
        if not np.isfinite(mods[i]):
            out.append(None)
            continue
        out.append(FunctionCurve(curves[i].x_vals, curves[i].y_vals + mods[i]))
    return out


def _with_linear_fallback(primary: Interpolator, fallback: Interpolator) -> Interpolator:
    def f(x: ArrayLike) -> NDArray[np.float64]:
        y = np.array(primary(x), dtype=np.float64)
        bad = ~np.isfinite(y)
        if np.any(bad):
            y[bad] = np.asarray(fallback(np.asarray(x, dtype=np.float64)[bad] if y.ndim else x))
        return y

    return f


def _create_constrained_interpolator(
    method: str,
    curve: FunctionCurve,
    outside_value: float | None = None,
) -> Callable[[ArrayLike], NDArray[np.float64]]:
    """Interpolator that never extrapolates.

    Without ``outside_value`` the input is clamped into the curve domain,
    otherwise ``outside_value`` is returned outside of it.
    """
    f = create_interpolator(method, curve.x_vals, curve.y_vals)
    if method in _SPLINE_METHODS:
        f = _with_linear_fallback(f, create_interpolator("linear", curve.x_vals, curve.y_vals))
    x_min = float(curve.x_vals[0])
    x_max = float(curve.x_vals[-1])

    if outside_value is None:

        def clamped(x: ArrayLike) -> NDArray[np.float64]:
            return f(np.clip(np.asarray(x, dtype=np.float64), x_min, x_max))

        return clamped

    def bounded(x: ArrayLike) -> NDArray[np.float64]:
        xa = np.asarray(x, dtype=np.float64)
        inside = (xa >= x_min) & (xa <= x_max)
        return np.where(inside, f(np.clip(xa, x_min, x_max)), outside_value)

    return bounded
