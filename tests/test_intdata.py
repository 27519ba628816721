"""HarmSyn intermediate data tests — harmonic model and text file format."""

from __future__ import annotations

import numpy as np
import pytest

from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import HarmSynRecord, convert_records_to_def
from harmsyn.intdata.text_format import create_harm_syn_file, parse_harm_syn_file


def _record(time: float, f0: float, *amplitudes: float) -> HarmSynRecord:
    return HarmSynRecord(time=time, f0=f0, amplitudes=np.array(amplitudes, dtype=np.float64))


# ── Records → Definition ─────────────────────────────────


def test_convert_ragged_records() -> None:
    """Missing harmonics are filled with the floor of the lowest amplitude."""
    records = [
        _record(0.0, 200.0, -10.0, -20.5),
        _record(0.005, 201.0, -12.0),
        _record(0.010, 202.0, -11.0, np.nan, -30.0),
    ]
    d = convert_records_to_def(records)

    assert d.harmonics == 3
    np.testing.assert_array_equal(d.f0_curve.x_vals, [0.0, 0.005, 0.010])
    np.testing.assert_array_equal(d.f0_curve.y_vals, [200.0, 201.0, 202.0])
    np.testing.assert_array_equal(d.amplitude_curves[0].y_vals, [-10.0, -12.0, -11.0])
    np.testing.assert_array_equal(d.amplitude_curves[1].y_vals, [-20.5, -30.0, -30.0])
    np.testing.assert_array_equal(d.amplitude_curves[2].y_vals, [-30.0, -30.0, -30.0])


def test_convert_empty_records() -> None:
    d = convert_records_to_def([])
    assert len(d.f0_curve) == 0
    assert d.harmonics == 0


def test_convert_without_finite_amplitudes() -> None:
    d = convert_records_to_def([_record(0.0, 100.0, -np.inf), _record(0.1, 100.0, -np.inf, -np.inf)])
    assert d.harmonics == 2
    assert np.all(d.amplitude_curves[1].y_vals == -np.inf)


def test_record_to_dict() -> None:
    data = _record(0.5, 220.0, -6.0, -np.inf).to_dict()
    assert data == {"time": 0.5, "f0": 220.0, "amplitudes": [-6.0, None]}


# ── Text format ──────────────────────────────────────────


def test_text_line_layout() -> None:
    text = create_harm_syn_file([_record(0.125, 220.349, -12.4, -18.054, -30.0)], -70.0)
    assert text == "0.125000 220.35/-12.40 *2/-18.05 *3/-30.00\n"


def test_text_round_trip_two_decimals() -> None:
    records = [
        _record(0.0, 199.994, -6.021, -12.04, -20.0),
        _record(0.005, 200.123, -6.5, -12.5),
        _record(0.010, 200.456, -7.0, -13.0, -21.0),
    ]
    parsed = parse_harm_syn_file(create_harm_syn_file(records, -70.0))

    assert len(parsed) == len(records)
    for expected, r in zip(records, parsed):
        assert r.time == pytest.approx(expected.time, abs=5e-7)
        assert r.f0 == pytest.approx(expected.f0, abs=5e-3)
        np.testing.assert_allclose(r.amplitudes, expected.amplitudes, atol=5e-3)


def test_text_omits_irrelevant_overtones() -> None:
    """An overtone survives only when it or a temporal neighbour is relevant."""
    records = [
        _record(0.0, 100.0, -10.0, -80.0, -90.0, -20.0),
        _record(0.1, 100.0, -10.0, -30.0, -90.0, -20.0),
        _record(0.2, 100.0, -10.0, -80.0, -90.0, -20.0),
        _record(0.3, 100.0, -10.0, -80.0, -90.0, -20.0),
    ]
    parsed = parse_harm_syn_file(create_harm_syn_file(records, -70.0))

    np.testing.assert_array_equal(parsed[0].amplitudes, [-10.0, -70.0, -np.inf, -20.0])
    np.testing.assert_array_equal(parsed[1].amplitudes, [-10.0, -30.0, -np.inf, -20.0])
    np.testing.assert_array_equal(parsed[2].amplitudes, [-10.0, -70.0, -np.inf, -20.0])
    np.testing.assert_array_equal(parsed[3].amplitudes, [-10.0, -np.inf, -np.inf, -20.0])


def test_text_skips_silent_records() -> None:
    records = [_record(0.0, 100.0, -90.0), _record(0.1, 100.0, -10.0)]
    text = create_harm_syn_file(records, -70.0)
    assert text.splitlines() == ["0.100000 100.00/-10.00"]


def test_text_truncates_to_highest_harmonic() -> None:
    parsed = parse_harm_syn_file("0.5 100/-3 *4/-9\n")
    np.testing.assert_array_equal(parsed[0].amplitudes, [-3.0, -np.inf, -np.inf, -9.0])


def test_parse_ignores_comments_and_blank_lines() -> None:
    text = "; HarmSyn file\r\n\r\n* note\r\n0.0 100/-3\r\n   \r\n0.1 101/-4 *2/-10\r\n"
    parsed = parse_harm_syn_file(text)
    assert [r.time for r in parsed] == [0.0, 0.1]
    assert parsed[1].f0 == 101.0


@pytest.mark.parametrize(
    "line",
    [
        "0.1 100/-3 *1/-5",
        "0.1 100/-3 *101/-5",
        "0.1 100/-3 *2.5/-5",
        "0.1 100/-3 2/-5",
        "0.1 100-3",
        "abc 100/-3",
        "1e3 100/-3",
        "1_000 100/-3",
        "inf 100/-3",
        "0.1",
    ],
)
def test_parse_errors_report_line_number(line: str) -> None:
    with pytest.raises(HarmSynError, match="Error while parsing line 2"):
        parse_harm_syn_file(f"0.0 100/-3\n{line}\n")
