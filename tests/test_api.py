"""Tests for HarmSyn API — health, analysis, and synthesis endpoints."""

from __future__ import annotations

import io

import numpy as np
import soundfile as sf
from fastapi.testclient import TestClient

from conftest import F0, SR, harmonic_signal
from harmsyn.api.server import app

client = TestClient(app)


# ── Helpers ──────────────────────────────────────────────


def _wav_bytes(signal: np.ndarray, sr: int = SR) -> bytes:
    buf = io.BytesIO()
    sf.write(buf, signal, sr, format="WAV", subtype="PCM_16")
    return buf.getvalue()


STEADY_TEXT = "0.0 200/-6 *2/-12\n0.25 200/-6 *2/-12\n"


# ── Health & Version ─────────────────────────────────────


def test_health_check() -> None:
    """Health endpoint returns OK."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "harmsyn"


def test_version() -> None:
    """Package has correct version."""
    from harmsyn import __version__

    assert __version__ == "0.1.0"


def test_settings_defaults() -> None:
    """Settings load with sensible defaults."""
    from harmsyn.config import Settings

    s = Settings()
    assert s.port == 8000
    assert s.min_relevant_amplitude == -70.0


def test_settings_from_environment(monkeypatch) -> None:
    from harmsyn.config import Settings

    monkeypatch.setenv("HARMSYN_MIN_RELEVANT_AMPLITUDE", "-50")
    assert Settings().min_relevant_amplitude == -50.0


def test_api_info() -> None:
    """Info endpoint lists capabilities."""
    response = client.get("/api/info")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "HarmSyn"
    assert "flatTop" in data["window_functions"]
    assert "akima" in data["interpolation_methods"]


# ── Analysis ─────────────────────────────────────────────


def test_analyze_upload() -> None:
    """WAV upload returns the harmonic records as text."""
    response = client.post(
        "/api/analysis/analyze",
        files={"file": ("vowel.wav", _wav_bytes(harmonic_signal()), "audio/wav")},
        params={"start_frequency": F0},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    lines = response.text.splitlines()
    assert lines
    f0 = float(lines[len(lines) // 2].split()[1].split("/")[0])
    assert abs(f0 - F0) < 0.5


def test_analyze_stereo_upload_uses_first_channel() -> None:
    left = harmonic_signal()
    stereo = np.stack([left, np.zeros_like(left)], axis=1)
    response = client.post(
        "/api/analysis/analyze",
        files={"file": ("stereo.wav", _wav_bytes(stereo), "audio/wav")},
        params={"start_frequency": F0},
    )
    assert response.status_code == 200
    assert response.text


def test_analyze_rejects_other_formats() -> None:
    response = client.post(
        "/api/analysis/analyze",
        files={"file": ("voice.mp3", b"ID3", "audio/mpeg")},
    )
    assert response.status_code == 400
    assert "Unsupported format" in response.json()["detail"]


def test_analyze_rejects_broken_wav() -> None:
    response = client.post(
        "/api/analysis/analyze",
        files={"file": ("broken.wav", b"RIFF0000WAVE", "audio/wav")},
    )
    assert response.status_code == 400


def test_f0_trace() -> None:
    response = client.post(
        "/api/analysis/f0-trace",
        files={"file": ("vowel.wav", _wav_bytes(harmonic_signal()), "audio/wav")},
        params={"start_frequency": F0, "f0_extraction_interval": 10},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["sample_rate"] == SR
    assert abs(data["interval_s"] - 0.01) < 1e-9
    assert len(data["f0"]) == 50
    assert all(abs(f - F0) < 0.5 for f in data["f0"][10:40])


def test_analysis_records_json() -> None:
    """Records endpoint returns the per-step analysis as JSON."""
    response = client.post(
        "/api/analysis/records",
        files={"file": ("vowel.wav", _wav_bytes(harmonic_signal()), "audio/wav")},
        params={"start_frequency": F0, "f_cutoff": 1100},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["sample_rate"] == SR
    records = data["records"]
    assert records
    times = [r["time"] for r in records]
    assert all(b > a for a, b in zip(times, times[1:]))
    middle = records[len(records) // 2]
    assert set(middle) == {"time", "f0", "amplitudes"}
    assert abs(middle["f0"] - F0) < 0.5
    assert len(middle["amplitudes"]) == 5
    assert abs(middle["amplitudes"][0] - 20 * np.log10(0.5)) < 0.5
    assert "analysis_records" in client.get("/api/info").json()["endpoints"]


# ── Synthesis ────────────────────────────────────────────


def test_synthesize() -> None:
    """Text plus parameters render to a WAV file."""
    response = client.post(
        "/api/synthesis/synthesize",
        json={"text": STEADY_TEXT, "sample_rate": 8000, "freq_shift": 25.0},
    )
    assert response.status_code == 200
    assert response.headers["content-type"] == "audio/wav"
    data, sr = sf.read(io.BytesIO(response.content))
    assert sr == 8000
    assert len(data) == 2000
    assert np.max(np.abs(data)) > 0.4


def test_synthesize_parse_error() -> None:
    response = client.post(
        "/api/synthesis/synthesize",
        json={"text": "0.0 200/-6\nnot a record\n"},
    )
    assert response.status_code == 400
    assert "line 2" in response.json()["detail"]


def test_synthesize_empty_text() -> None:
    response = client.post("/api/synthesis/synthesize", json={"text": "; nothing\n"})
    assert response.status_code == 400
    assert "Empty harmonic synthesizer definition" in response.json()["detail"]


def test_synthesize_bad_parameters() -> None:
    response = client.post(
        "/api/synthesis/synthesize",
        json={"text": STEADY_TEXT, "interpolation_method": "sinc"},
    )
    assert response.status_code == 400
    response = client.post(
        "/api/synthesis/synthesize",
        json={"text": STEADY_TEXT, "harmonic_mod": "0"},
    )
    assert response.status_code == 400
    response = client.post(
        "/api/synthesis/synthesize",
        json={"text": STEADY_TEXT, "f0_multiplier": 0},
    )
    assert response.status_code == 422
