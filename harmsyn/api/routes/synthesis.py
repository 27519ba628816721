"""API routes for harmonic synthesis."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel, Field

from harmsyn.audio import encode_wav
from harmsyn.dsp.interpolation import INTERPOLATION_METHODS
from harmsyn.errors import HarmSynError
from harmsyn.intdata.model import convert_records_to_def
from harmsyn.intdata.text_format import parse_harm_syn_file
from harmsyn.synthesis.harmonic_mod import decode_harmonic_mod_string
from harmsyn.synthesis.synth import SynParms, synthesize_harmonic_signal

logger = structlog.get_logger()

router = APIRouter(prefix="/synthesis", tags=["synthesis"])


class SynthesisRequest(BaseModel):
    """Harmonic records in text form plus synthesis parameters."""

    text: str
    interpolation_method: str = "akima"
    f0_multiplier: float = Field(default=1.0, gt=0)
    freq_shift: float = 0.0
    harmonic_mod: str = ""
    sample_rate: int = Field(default=44100, ge=1000, le=192000)


@router.post("/synthesize")
def synthesize(req: SynthesisRequest) -> Response:
    """Render harmonic records to a WAV file."""
    if req.interpolation_method not in INTERPOLATION_METHODS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown interpolation method: {req.interpolation_method}. "
            f"Use: {', '.join(INTERPOLATION_METHODS)}",
        )
    try:
        records = parse_harm_syn_file(req.text)
        parms = SynParms(
            interpolation_method=req.interpolation_method,
            f0_multiplier=req.f0_multiplier,
            freq_shift=req.freq_shift,
            harmonic_mod=decode_harmonic_mod_string(req.harmonic_mod),
            output_sample_rate=req.sample_rate,
        )
        signal = synthesize_harmonic_signal(convert_records_to_def(records), parms)
    except HarmSynError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    logger.info("api.synthesis.done", records=len(records), samples=len(signal))
    return Response(content=encode_wav(signal, req.sample_rate), media_type="audio/wav")
