"""Audio file boundary — mono signals in and out of WAV files."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, BinaryIO

import numpy as np
import soundfile as sf
import structlog
from numpy.typing import NDArray

from harmsyn.config import settings

logger = structlog.get_logger()


def load_signal(source: str | Path | BinaryIO) -> tuple[NDArray[np.float64], int]:
    """Read an audio file as a mono float64 signal.

    Only the first channel of a multi-channel file is used.

    Returns:
        (samples, sample_rate)
    """
    data, sr = sf.read(source, dtype="float64", always_2d=True)
    if data.shape[1] > 1:
        logger.warning("audio.multichannel_input", channels=data.shape[1], used_channel=0)
    return np.ascontiguousarray(data[:, 0]), int(sr)


def save_audio(
    signal: NDArray[np.floating[Any]],
    path: str | Path,
    sr: int = 44100,
) -> Path:
    """Save a mono signal to a WAV file."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    sf.write(str(p), np.asarray(signal, dtype=np.float64), sr, subtype=settings.output_subtype)
    return p


def encode_wav(signal: NDArray[np.floating[Any]], sr: int = 44100) -> bytes:
    """Encode a mono signal as WAV file bytes."""
    buf = io.BytesIO()
    sf.write(buf, np.asarray(signal, dtype=np.float64), sr, subtype=settings.output_subtype, format="WAV")
    return buf.getvalue()
