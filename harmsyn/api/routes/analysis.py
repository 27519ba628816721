"""API routes for harmonic analysis."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Annotated, Any

import numpy as np
import structlog
from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import PlainTextResponse

from harmsyn.analysis.analyzer import AnalParms, analyze_harmonic_signal, get_f0_trace
from harmsyn.audio import load_signal
from harmsyn.config import settings
from harmsyn.errors import HarmSynError
from harmsyn.intdata.text_format import create_harm_syn_file

logger = structlog.get_logger()

router = APIRouter(prefix="/analysis", tags=["analysis"])


async def _read_upload(file: UploadFile) -> tuple[np.ndarray, int]:
    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")
    suffix = Path(file.filename).suffix.lower()
    if suffix != ".wav":
        raise HTTPException(status_code=400, detail=f"Unsupported format: {suffix}. Use: .wav")
    content = await file.read()
    try:
        return load_signal(io.BytesIO(content))
    except RuntimeError as e:
        raise HTTPException(status_code=400, detail=f"Unreadable WAV file: {e}") from None


def _parms(
    start_frequency: float | None,
    tracking_start_pos: float | None,
    tracking_interval_ms: float,
    harmonics: int,
    f_cutoff: float,
) -> AnalParms:
    return AnalParms(
        start_frequency=start_frequency,
        tracking_start_pos=tracking_start_pos,
        tracking_interval=tracking_interval_ms / 1000,
        harmonics=harmonics,
        f_cutoff=f_cutoff,
    )


_DEFAULTS = AnalParms()


@router.post("/analyze", response_class=PlainTextResponse)
async def analyze(
    file: Annotated[UploadFile, File(...)],
    start_frequency: Annotated[float | None, Query(gt=0)] = None,
    tracking_start_pos: Annotated[float | None, Query(ge=0)] = None,
    tracking_interval_ms: Annotated[float, Query(gt=0)] = _DEFAULTS.tracking_interval * 1000,
    harmonics: Annotated[int, Query(ge=1)] = _DEFAULTS.harmonics,
    f_cutoff: Annotated[float, Query(gt=0)] = _DEFAULTS.f_cutoff,
    min_relevant_amplitude: float = settings.min_relevant_amplitude,
) -> PlainTextResponse:
    """Analyze an uploaded WAV file and return the harmonic records as text."""
    signal, sr = await _read_upload(file)
    parms = _parms(start_frequency, tracking_start_pos, tracking_interval_ms, harmonics, f_cutoff)
    try:
        records = analyze_harmonic_signal(signal, sr, parms)
    except HarmSynError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    logger.info("api.analysis.done", filename=file.filename, records=len(records))
    return PlainTextResponse(create_harm_syn_file(records, min_relevant_amplitude))


@router.post("/f0-trace")
async def f0_trace(
    file: Annotated[UploadFile, File(...)],
    f0_extraction_interval: Annotated[int, Query(ge=1)] = 1,
    start_frequency: Annotated[float | None, Query(gt=0)] = None,
    tracking_start_pos: Annotated[float | None, Query(ge=0)] = None,
    tracking_interval_ms: Annotated[float, Query(gt=0)] = _DEFAULTS.tracking_interval * 1000,
) -> dict[str, Any]:
    """Track the fundamental frequency of an uploaded WAV file."""
    signal, sr = await _read_upload(file)
    parms = _parms(
        start_frequency, tracking_start_pos, tracking_interval_ms, _DEFAULTS.harmonics, _DEFAULTS.f_cutoff
    )
    try:
        trace = get_f0_trace(signal, sr, parms, f0_extraction_interval)
    except HarmSynError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return {
        "sample_rate": sr,
        "interval_s": parms.tracking_interval * f0_extraction_interval,
        "f0": [round(float(f), 3) if np.isfinite(f) else None for f in trace],
    }


@router.post("/records")
async def records(
    file: Annotated[UploadFile, File(...)],
    start_frequency: Annotated[float | None, Query(gt=0)] = None,
    tracking_start_pos: Annotated[float | None, Query(ge=0)] = None,
    tracking_interval_ms: Annotated[float, Query(gt=0)] = _DEFAULTS.tracking_interval * 1000,
    harmonics: Annotated[int, Query(ge=1)] = _DEFAULTS.harmonics,
    f_cutoff: Annotated[float, Query(gt=0)] = _DEFAULTS.f_cutoff,
) -> dict[str, Any]:
    """Analyze an uploaded WAV file and return the unthresholded records as JSON."""
    signal, sr = await _read_upload(file)
    parms = _parms(start_frequency, tracking_start_pos, tracking_interval_ms, harmonics, f_cutoff)
    try:
        result = analyze_harmonic_signal(signal, sr, parms)
    except HarmSynError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    logger.info("api.analysis.records", filename=file.filename, records=len(result))
    return {"sample_rate": sr, "records": [r.to_dict() for r in result]}
