"""HarmSyn FastAPI server — main application."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from harmsyn.api.routes.analysis import router as analysis_router
from harmsyn.api.routes.synthesis import router as synthesis_router

app = FastAPI(
    title="HarmSyn",
    description="Harmonic Synthesizer — analysis and resynthesis of quasi-periodic signals.",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router, prefix="/api")
app.include_router(synthesis_router, prefix="/api")


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "service": "harmsyn"}


@app.get("/api/info")
async def info() -> dict[str, object]:
    """System information and capabilities."""
    from harmsyn import __version__
    from harmsyn.dsp.interpolation import INTERPOLATION_METHODS
    from harmsyn.dsp.windows import WINDOW_IDS

    return {
        "name": "HarmSyn",
        "version": __version__,
        "tagline": "Harmonic analysis and additive resynthesis.",
        "window_functions": list(WINDOW_IDS),
        "interpolation_methods": list(INTERPOLATION_METHODS),
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "analysis_analyze": "POST /api/analysis/analyze",
            "analysis_f0_trace": "POST /api/analysis/f0-trace",
            "analysis_records": "POST /api/analysis/records",
            "synthesis_synthesize": "POST /api/synthesis/synthesize",
        },
    }


def run() -> None:
    """Run the server with uvicorn using the configured host and port."""
    import uvicorn

    from harmsyn.config import settings

    uvicorn.run(app, host=settings.host, port=settings.port)
