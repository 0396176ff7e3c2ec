"""
whisperprobe/api/upload.py
===========================
API Upload Endpoints — WhisperProbe

Responsibility:
    - Expose GET /health, POST /debug-audio and POST /analyze-audio
    - Accept a single audio file via multipart/form-data (field ``audioFile``)
    - Screen the upload with whisperprobe.audio and return the analysis
    - On /analyze-audio, forward accepted uploads to OpenAI Whisper
    - Optionally dump raw uploads to disk and forward analyses to a webhook

The sniffer and validator are pure; every log line, file write and HTTP
status decision lives here.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiohttp
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from whisperprobe import settings
from whisperprobe.audio import AudioSample, detect, header_hex, validate
from whisperprobe.report import build_analysis, build_debug_response
from whisperprobe.stt import (
    WhisperConfigurationError,
    WhisperTranscriptionError,
    estimate_cost,
    transcribe,
)

logger = logging.getLogger("whisperprobe.api")

PROFILE = settings.load_profile()
UPLOAD_FIELD = "audioFile"
_STARTED_AT = time.monotonic()


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="WhisperProbe",
    description="Diagnostic endpoints for mobile audio uploads bound for OpenAI Whisper.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    headers = request.headers
    logger.info(
        "%s %s | content-length=%s | user-agent=%s | origin=%s",
        request.method,
        request.url.path,
        headers.get("content-length", "N/A"),
        headers.get("user-agent", "N/A"),
        headers.get("origin", "N/A"),
    )
    return await call_next(request)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _read_upload(request: Request):
    """
    Read the ``audioFile`` part of a multipart request.

    Any file part counts as the upload, whatever its filename. A missing
    part, or a part sent as a plain form field, is a client error.

    Returns:
        (UploadFile, bytes, None) on success, or (None, None, JSONResponse)
        describing the client error.
    """
    form = await request.form()
    audio_file = form.get(UPLOAD_FIELD)

    if not isinstance(audio_file, UploadFile):
        logger.warning("No audio file received (fields: %s)", list(form.keys()))
        return None, None, JSONResponse(
            status_code=400,
            content={"error": "Pas de fichier reçu", "received_fields": list(form.keys())},
        )

    data = await audio_file.read()
    if not data:
        logger.warning("Empty audio file received: %s", audio_file.filename)
        return None, None, JSONResponse(
            status_code=400,
            content={"error": "Pas de fichier reçu", "received_fields": list(form.keys())},
        )

    if len(data) > settings.MAX_UPLOAD_BYTES:
        logger.warning("Upload too large: %d bytes", len(data))
        return None, None, JSONResponse(
            status_code=413,
            content={
                "error": "Fichier trop volumineux",
                "max_bytes": settings.MAX_UPLOAD_BYTES,
            },
        )

    logger.info(
        "File received: name=%s mimetype=%s size=%d bytes (%.1f KB)",
        audio_file.filename,
        audio_file.content_type,
        len(data),
        len(data) / 1024,
    )
    return audio_file, data, None


def _screen(data: bytes, audio_file: UploadFile):
    sample = AudioSample(
        data=data,
        declared_mime_type=audio_file.content_type,
        declared_size=len(data),
    )
    detection = detect(data)
    report = validate(sample, detection, PROFILE)

    logger.info("Header hex: %s", header_hex(data))
    logger.info(
        "Detected format: %s (offset=%d, confidence=%s) | content ratio: %.1f%%",
        detection.label,
        detection.signature_offset,
        detection.confidence.value,
        report.content_ratio * 100,
    )
    logger.info(
        "Checks: %s → %s",
        report.checks(),
        "ACCEPTED" if report.overall_accepted else "REJECTED",
    )
    return sample, detection, report


def _dump_upload(data: bytes, mime_type: str | None, timestamp: int) -> str | None:
    """Write the raw upload to DEBUG_AUDIO_DUMP_DIR; return its file name or None."""
    dump_dir = settings.DEBUG_AUDIO_DUMP_DIR
    if not dump_dir:
        return None

    subtype = ""
    if mime_type and "/" in mime_type:
        subtype = mime_type.split("/", 1)[1].split(";", 1)[0].strip()
    path = Path(dump_dir) / f"debug-mobile-{timestamp}.{subtype or 'webm'}"

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        logger.warning("Failed to save upload to %s: %s", path, exc)
        return None

    logger.info("Upload saved: %s", path)
    return path.name


async def _forward_to_webhook(payload: dict[str, Any]) -> None:
    webhook_url = settings.WEBHOOK_URL
    if not webhook_url:
        logger.debug("WEBHOOK_URL not configured — skipping POST.")
        return

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                webhook_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=30),
            ) as resp:
                logger.info("Webhook POST to %s — status %d", webhook_url, resp.status)
    except Exception as exc:
        logger.error("Webhook POST failed: %s", exc)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {
        "status": "OK",
        "service": "Whisper Mobile Debug Server",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "openai_configured": settings.openai_configured(),
    }


@app.post("/debug-audio")
async def debug_audio(request: Request):
    """
    Analyse an uploaded audio file without transcribing it.

    Returns the container detection, the four acceptance checks and
    recommendations for every failing check.
    """
    audio_file, data, error = await _read_upload(request)
    if error is not None:
        return error

    try:
        timestamp = int(time.time() * 1000)
        sample, detection, report = _screen(data, audio_file)
        saved_as = _dump_upload(data, sample.declared_mime_type, timestamp)

        analysis = build_analysis(
            sample,
            detection,
            report,
            filename=saved_as or audio_file.filename,
            debug_info={
                "timestamp": timestamp,
                "userAgent": request.headers.get("user-agent", "N/A"),
                "origin": request.headers.get("origin", "N/A"),
            },
        )
        body = build_debug_response(analysis)
    except Exception as exc:
        logger.error("Debug analysis failed: %s", exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Erreur serveur debug", "details": str(exc)},
        )

    await _forward_to_webhook(body)
    return JSONResponse(status_code=200, content=body)


@app.post("/analyze-audio")
async def analyze_audio(request: Request):
    """
    Screen an upload and, when it passes every check, transcribe it with
    OpenAI Whisper.
    """
    audio_file, data, error = await _read_upload(request)
    if error is not None:
        return error

    if not settings.openai_configured():
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "OpenAI non configuré"},
        )

    sample, detection, report = _screen(data, audio_file)
    analysis = build_analysis(sample, detection, report, filename=audio_file.filename)

    if not report.overall_accepted:
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": "Fichier audio rejeté", "analysis": analysis},
        )

    started = time.monotonic()
    try:
        result = await asyncio.to_thread(
            transcribe, data, audio_file.filename, sample.declared_mime_type
        )
    except WhisperConfigurationError as exc:
        return JSONResponse(
            status_code=503,
            content={"success": False, "error": "OpenAI non configuré", "details": str(exc)},
        )
    except WhisperTranscriptionError as exc:
        logger.error("Whisper transcription failed: %s", exc)
        return JSONResponse(
            status_code=502,
            content={
                "success": False,
                "error": "Échec de la transcription",
                "details": str(exc),
                "analysis": analysis,
            },
        )

    processing_ms = int((time.monotonic() - started) * 1000)
    cost = estimate_cost(len(data))
    logger.info(
        "Transcription success — %d chars, cost €%.4f, %d ms",
        len(result.text),
        cost,
        processing_ms,
    )

    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "transcript": result.text,
            "language": result.language,
            "analysis": analysis,
            "usage": {
                "model": result.model,
                "file_size": len(data),
                "cost": cost,
                "processing_time_ms": processing_ms,
            },
        },
    )
