"""
api/routes/audio.py — Audio normalization, clipping and analysis endpoints.

Endpoints:
    POST /audio/normalize  — Convert an upload to the 48 kHz / 24-bit WAV master
    POST /audio/clip       — Cut a 60 s (configurable) preview clip as WAV
    POST /audio/analyze    — Heuristic AI-probability and copyright analysis
    POST /audio/duration   — Decoded duration, for the trimmer slider

All endpoints accept a multipart upload and delegate to AudioProcessingEngine
in ingestion/audio_engine.py. Handlers are plain ``def`` so FastAPI runs the
CPU-bound decode/render work in its threadpool, off the event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from api.deps import get_audio_engine
from api.schemas.audio import AnalysisResponse, DurationResponse
from core.audio.errors import DecodeError, RenderError
from core.audio.types import EncodedAudio
from infrastructure.metrics import LatencyTimer, record_operation, record_rejected_upload
from ingestion.audio_engine import AudioProcessingEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/audio", tags=["audio"])


def _read_upload(upload: UploadFile, engine: AudioProcessingEngine) -> bytes:
    """Read an upload into memory, enforcing the configured size limit."""
    limit = engine.config.max_upload_bytes
    data = upload.file.read(limit + 1)
    if not data:
        record_rejected_upload("empty")
        raise HTTPException(status_code=422, detail="Uploaded audio file is empty")
    if len(data) > limit:
        record_rejected_upload("too_large")
        raise HTTPException(
            status_code=413,
            detail=f"Uploaded audio exceeds the {limit // (1024 * 1024)} MB limit",
        )
    return data


def _wav_response(encoded: EncodedAudio) -> Response:
    return Response(
        content=encoded.data,
        media_type=encoded.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{encoded.filename}"'},
    )


# ---------------------------------------------------------------------------
# POST /audio/normalize
# ---------------------------------------------------------------------------


@router.post("/normalize", response_class=Response)
def normalize_audio(
    file: UploadFile = File(...),
    title: str = Form(""),
    track_number: str = Form(""),
    engine: AudioProcessingEngine = Depends(get_audio_engine),
) -> Response:
    """Convert any decodable upload into the canonical WAV master.

    Returns:
        ``audio/wav`` body named ``<sanitized-title>.wav``.

    Raises:
        413: Upload larger than the configured limit.
        422: Empty upload or audio that cannot be decoded.
    """
    data = _read_upload(file, engine)
    try:
        with LatencyTimer() as t:
            encoded = engine.normalize_full_track(data, title=title, track_number=track_number)
    except DecodeError as exc:
        logger.error("Audio conversion failed for %r: %s", file.filename, exc)
        record_operation(operation="normalize", status="error", latency_seconds=t.elapsed)
        raise HTTPException(
            status_code=422, detail=f"Failed to convert audio to WAV. {exc}"
        ) from exc
    record_operation(operation="normalize", status="success", latency_seconds=t.elapsed)
    return _wav_response(encoded)


# ---------------------------------------------------------------------------
# POST /audio/clip
# ---------------------------------------------------------------------------


@router.post("/clip", response_class=Response)
def clip_audio(
    file: UploadFile = File(...),
    start_time: float = Form(..., ge=0.0),
    duration: float | None = Form(None, gt=0.0),
    title: str = Form(""),
    track_number: str = Form(""),
    engine: AudioProcessingEngine = Depends(get_audio_engine),
) -> Response:
    """Cut a preview clip starting at ``start_time`` seconds.

    Returns:
        ``audio/wav`` body named ``<sanitized-title>-trim.wav``.

    Raises:
        413: Upload larger than the configured limit.
        422: Undecodable audio, or start_time beyond the end of the track.
    """
    data = _read_upload(file, engine)
    try:
        with LatencyTimer() as t:
            encoded = engine.extract_clip(
                data,
                start_time=start_time,
                duration=duration,
                title=title,
                track_number=track_number,
            )
    except (DecodeError, RenderError) as exc:
        logger.error("Audio trimming failed for %r: %s", file.filename, exc)
        record_operation(operation="clip", status="error", latency_seconds=t.elapsed)
        raise HTTPException(
            status_code=422, detail=f"Failed to process audio clip. {exc}"
        ) from exc
    record_operation(operation="clip", status="success", latency_seconds=t.elapsed)
    return _wav_response(encoded)


# ---------------------------------------------------------------------------
# POST /audio/analyze
# ---------------------------------------------------------------------------


@router.post("/analyze", response_model=AnalysisResponse)
def analyze_audio(
    file: UploadFile = File(...),
    engine: AudioProcessingEngine = Depends(get_audio_engine),
) -> AnalysisResponse:
    """Estimate AI-generation probability and simulate copyright matching.

    Always succeeds for a non-empty upload: undecodable audio is analyzed
    with fallback features instead of failing.
    """
    data = _read_upload(file, engine)
    with LatencyTimer() as t:
        result = engine.analyze(data)
    record_operation(operation="analyze", status="success", latency_seconds=t.elapsed)
    return AnalysisResponse.from_result(result)


# ---------------------------------------------------------------------------
# POST /audio/duration
# ---------------------------------------------------------------------------


@router.post("/duration", response_model=DurationResponse)
def audio_duration(
    file: UploadFile = File(...),
    engine: AudioProcessingEngine = Depends(get_audio_engine),
) -> DurationResponse:
    """Return the decoded duration of an upload in seconds.

    Raises:
        422: Audio that cannot be decoded.
    """
    data = _read_upload(file, engine)
    try:
        with LatencyTimer() as t:
            duration_sec = engine.probe_duration(data)
    except DecodeError as exc:
        record_operation(operation="duration", status="error", latency_seconds=t.elapsed)
        raise HTTPException(status_code=422, detail=f"Failed to read audio. {exc}") from exc
    record_operation(operation="duration", status="success", latency_seconds=t.elapsed)
    return DurationResponse(duration_sec=duration_sec)
