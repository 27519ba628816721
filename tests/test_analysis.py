"""HarmSyn analysis tests — start locator, tracker, record generator, drivers."""

from __future__ import annotations

import math

import numpy as np
import pytest

from conftest import AMPLITUDES, F0, SR, harmonic_signal
from harmsyn.analysis.analyzer import (
    AnalParms,
    analyze_harmonic_signal,
    analyze_harmonic_signal_pass1,
    get_f0_trace,
)
from harmsyn.analysis.records import check_step_multiple, gen_harm_syn_records
from harmsyn.analysis.start import (
    FALLBACK_START_FREQUENCY,
    determine_start_frequency,
    find_tracking_start_position,
    locate_tracking_start,
)
from harmsyn.analysis.tracker import _track_step, track_harmonics
from harmsyn.dsp.windows import get_window_function
from harmsyn.errors import HarmSynError

FLAT_TOP = get_window_function("flatTop")


def _track(signal: np.ndarray, start_index: int, positions: int, f0_hz: float = F0):
    return track_harmonics(
        signal,
        SR * 0.001,
        positions,
        start_index,
        f0_hz / SR,
        4.0 / SR,
        10 ** (-55 / 20),
        10,
        5500.0 / SR,
        0.25,
        12.0,
        FLAT_TOP,
    )


# ── Start locator ────────────────────────────────────────


def test_start_position_after_onset() -> None:
    """The start keeps a margin behind the first loud sample."""
    signal = np.concatenate([np.zeros(SR // 4), harmonic_signal(0.75)])
    t = find_tracking_start_position(signal, SR, None, -22.0, None, 75.0, 12.0)
    margin = (16 + 0.1) / 75 / 2
    assert 0.2 < t < 0.25 + margin + 0.01


def test_start_position_clipped() -> None:
    signal = harmonic_signal(1.0)
    margin = (12 + 0.1) / 200 / 2
    assert find_tracking_start_position(signal, SR, 0.0, -22.0, 200.0, 75.0, 12.0) == pytest.approx(margin)
    assert find_tracking_start_position(signal, SR, 5.0, -22.0, 200.0, 75.0, 12.0) == pytest.approx(1.0 - margin)


def test_start_position_short_signal_is_midpoint() -> None:
    signal = harmonic_signal(0.1)
    assert find_tracking_start_position(signal, SR, None, -22.0, None, 75.0, 12.0) == pytest.approx(0.05)


def test_start_frequency_explicit_and_fallback() -> None:
    assert determine_start_frequency(harmonic_signal(), SR, 0.25, 150.0, 75.0, 900.0) == 150.0
    f = determine_start_frequency(np.zeros(SR // 2), SR, 0.25, None, 75.0, 900.0)
    assert f == FALLBACK_START_FREQUENCY


def test_locate_tracking_start_on_grid(vowel: np.ndarray) -> None:
    start = locate_tracking_start(vowel, SR, None, -22.0, None, 75.0, 900.0, 12.0, tracking_interval=0.001)
    steps = start.time / 0.001
    assert steps == pytest.approx(round(steps), abs=1e-6)
    assert start.frequency == pytest.approx(F0, abs=2.0)


# ── Tracker ──────────────────────────────────────────────


def test_tracker_covers_every_step(vowel: np.ndarray) -> None:
    infos = _track(vowel, 250, 500)
    assert len(infos) == 500
    assert all(i is not None for i in infos)


def test_tracker_follows_f0(vowel: np.ndarray) -> None:
    """Tracking from a detuned start converges onto the true F0."""
    infos = _track(vowel, 250, 500, f0_hz=203.0)
    f0 = np.array([i.f0 for i in infos]) * SR

    assert np.all(f0 > 0)
    np.testing.assert_allclose(f0[100:240], F0, atol=0.5)
    np.testing.assert_allclose(f0[260:400], F0, atol=0.5)
    mid = infos[300]
    np.testing.assert_allclose(mid.amplitudes[:3], AMPLITUDES, rtol=2e-2)
    assert mid.overall_amplitude == pytest.approx(sum(AMPLITUDES), rel=2e-2)


def test_tracker_limits_f0_change(vowel: np.ndarray) -> None:
    """One step may move F0 by at most max_derivative * interval * f0."""
    infos = _track(vowel, 250, 500, f0_hz=260.0)
    f0 = np.array([i.f0 for i in infos]) * SR
    max_step = 4.0 * 0.001 * 260.0
    assert abs(f0[250] - 260.0) <= max_step + 1e-9
    assert np.all(np.abs(np.diff(f0[250:])) <= 4.0 * 0.001 * f0[250:-1] + 1e-9)


def test_tracker_start_step_seeds_both_directions(vowel: np.ndarray) -> None:
    """The start step is measured from f0_start and seeds both of its neighbours."""
    interval = SR * 0.001
    max_derivative = 4.0 / SR

    def step(p: int, f0: float):
        return _track_step(
            vowel, p * interval, f0, max_derivative * interval * f0,
            10 ** (-55 / 20), 10, 5500.0 / SR, 0.25, 12.0, FLAT_TOP,
        )

    infos = _track(vowel, 250, 500, f0_hz=203.0)
    start = step(250, 203.0 / SR)

    assert infos[250].f0 == start.f0
    np.testing.assert_array_equal(infos[250].amplitudes, start.amplitudes)
    assert infos[251].f0 == step(251, start.f0).f0
    assert infos[249].f0 == step(249, start.f0).f0


def test_tracker_edges_keep_f0(vowel: np.ndarray) -> None:
    """Where the windows do not fit, F0 is carried over unchanged."""
    infos = _track(vowel, 250, 500)
    assert math.isnan(infos[0].overall_amplitude)
    assert math.isnan(infos[0].inst_f0)
    assert infos[0].f0 == infos[1].f0


def test_tracker_empty_and_bad_start(vowel: np.ndarray) -> None:
    assert _track(vowel, 0, 0) == []
    with pytest.raises(HarmSynError, match="outside"):
        _track(vowel, 500, 500)


# ── Records ──────────────────────────────────────────────


@pytest.mark.parametrize("value, expected", [(1, 1), (5, 5), (3.0, 3), (np.int64(2), 2)])
def test_check_step_multiple(value: object, expected: int) -> None:
    assert check_step_multiple(value, "interval") == expected


@pytest.mark.parametrize("value", [0, -1, 2.5, True, "5", None])
def test_check_step_multiple_rejects(value: object) -> None:
    with pytest.raises(HarmSynError, match="interval"):
        check_step_multiple(value, "interval")


def test_records_along_trace(vowel: np.ndarray) -> None:
    infos = _track(vowel, 250, 500)
    records = gen_harm_syn_records(vowel, SR, infos, SR * 0.001, 5, 5500.0 / SR, 12.0, FLAT_TOP)

    assert records
    times = [r.time for r in records]
    assert all(b > a for a, b in zip(times, times[1:]))
    for r in records:
        assert len(r.amplitudes) <= math.floor(5500.0 / r.f0)
        assert r.time == pytest.approx(round(r.time / 0.005) * 0.005, abs=1e-9)
    mid = records[len(records) // 2]
    expected_db = 20 * np.log10(AMPLITUDES)
    np.testing.assert_allclose(mid.amplitudes[:3], expected_db, atol=0.3)


# ── Drivers ──────────────────────────────────────────────


def test_analyze_detects_and_measures(vowel: np.ndarray) -> None:
    records = analyze_harmonic_signal(vowel, SR)

    assert records
    mid = records[len(records) // 2]
    assert mid.f0 == pytest.approx(F0, abs=0.5)
    assert mid.amplitudes[0] == pytest.approx(20 * math.log10(AMPLITUDES[0]), abs=0.3)


def test_analyze_three_harmonic_levels() -> None:
    """A 200 Hz tone with harmonics at 0, -6 and -12 dB under default parameters."""
    levels = (0.0, -6.0, -12.0)
    signal = harmonic_signal(amplitudes=tuple(10 ** (db / 20) for db in levels))
    records = analyze_harmonic_signal(signal, SR)

    mid = records[len(records) // 2]
    assert mid.f0 == pytest.approx(200.0, abs=0.5)
    np.testing.assert_allclose(mid.amplitudes[:3], levels, atol=0.3)


def test_analyze_with_explicit_start(vowel: np.ndarray) -> None:
    parms = AnalParms(start_frequency=F0, tracking_start_pos=0.2, interpolation_interval=10)
    records = analyze_harmonic_signal(vowel, SR, parms)
    times = np.array([r.time for r in records])
    np.testing.assert_allclose(np.diff(times), 0.010, atol=1e-9)


def test_analyze_rejects_fractional_interval(vowel: np.ndarray) -> None:
    with pytest.raises(HarmSynError):
        analyze_harmonic_signal(vowel, SR, AnalParms(start_frequency=F0, interpolation_interval=2.5))


def test_analyze_rejects_unknown_window(vowel: np.ndarray) -> None:
    with pytest.raises(HarmSynError, match="Unknown window function"):
        analyze_harmonic_signal_pass1(vowel, SR, AnalParms(tracking_window_function="gauss"))


def test_f0_trace(vowel: np.ndarray) -> None:
    parms = AnalParms(start_frequency=F0)
    trace = get_f0_trace(vowel, SR, parms, 10)

    assert len(trace) == 500 // 10
    np.testing.assert_allclose(trace[10:40], F0, atol=0.5)
