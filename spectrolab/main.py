from functools import lru_cache
from typing import Optional

import logging
from fastapi import FastAPI, File, Form, HTTPException, Query, UploadFile

from spectrolab.analysis import analyze_wav_bytes, summarize
from spectrolab.config import AnalysisConfig
from spectrolab.dsp_engine.transforms import TRANSFORM_BACKENDS
from spectrolab.dsp_engine.wav import MAX_INPUT_BYTES
from spectrolab.dsp_engine.windows import WINDOW_KINDS
from spectrolab.errors import (
    LengthMismatch,
    SpectrogramError,
    TooLarge,
    TransformFailure,
)
from spectrolab.models import CapabilitiesResponse, ErrorResponse, SpectrogramResponse

logger = logging.getLogger("spectrolab")

app = FastAPI(title="SpectroLab")


@lru_cache(maxsize=1)
def get_default_config() -> AnalysisConfig:
    """Process-wide defaults, read once from ``SPECTRO_*`` env vars."""
    return AnalysisConfig.from_env()


def _status_for(exc: SpectrogramError) -> int:
    if isinstance(exc, TooLarge):
        return 413
    if isinstance(exc, (TransformFailure, LengthMismatch)):
        return 500
    return 422


@app.get("/health")
async def health():
    """Static payload so monitors can check the service without analysing audio."""

    return {"status": "ok"}


@app.get("/windows", response_model=CapabilitiesResponse)
async def capabilities():
    return {
        "window_kinds": list(WINDOW_KINDS),
        "transforms": list(TRANSFORM_BACKENDS),
        "max_input_bytes": MAX_INPUT_BYTES,
    }


@app.post(
    "/spectrogram",
    response_model=SpectrogramResponse,
    response_model_exclude_none=True,
    responses={413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def spectrogram(
    file: UploadFile = File(...),
    window_kind: Optional[str] = Form(None),
    window_length: Optional[int] = Form(None),
    hop_size: Optional[int] = Form(None),
    use_db: Optional[bool] = Form(None),
    channel: Optional[str] = Form(None),
    transform: Optional[str] = Form(None),
    workers: Optional[int] = Form(None),
    pad_tail: Optional[bool] = Form(None),
    include_matrix: bool = Query(default=True),
):
    """Analyse an uploaded WAV file and return its spectrogram.

    Form fields override the server defaults for this request only. Pass
    ``include_matrix=false`` to receive just the axes and peak frequencies.
    """

    try:
        # one byte over the ceiling is enough for the decoder to reject it
        data = await file.read(MAX_INPUT_BYTES + 1)
    finally:
        await file.close()

    try:
        config = get_default_config().with_overrides(
            window_kind=window_kind.strip().lower() if window_kind else None,
            window_length=window_length,
            hop_size=hop_size,
            use_db=use_db,
            channel=channel,
            transform=transform.strip().lower() if transform else None,
            workers=workers,
            pad_tail=pad_tail,
        )
        result = analyze_wav_bytes(data, config)
    except SpectrogramError as exc:
        status = _status_for(exc)
        if status >= 500:
            logger.exception("[API] analysis failed for %s: %s", file.filename, exc)
        else:
            logger.info("[API] rejected %s: %s %s", file.filename, exc.kind, exc.message)
        raise HTTPException(status_code=status, detail=exc.to_dict()) from exc

    return summarize(result, include_matrix=include_matrix)
