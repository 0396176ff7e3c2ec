"""
whisperprobe/stt/whisper_client.py
===================================
OpenAI Whisper STT Client — WhisperProbe

Responsibility:
    - Transcribe an already-screened upload with the OpenAI Whisper API
    - Estimate the cost of a transcription from the upload size

This module does NOT:
    - Screen uploads (see whisperprobe.audio)
    - Convert or re-encode audio; bytes are sent as received
"""

import io
import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv
from openai import OpenAI

from whisperprobe import settings
from whisperprobe.openai_retry import transcriptions_with_retry

load_dotenv()

logger = logging.getLogger("whisperprobe.stt.whisper_client")

# USD per minute of audio; minutes are approximated as MiB of upload.
PRICE_PER_MINUTE: float = 0.006
MIN_COST: float = 0.001

# Extension used for the upload name, keyed by MIME token. Whisper infers
# the container from the file name.
_EXTENSIONS: tuple[tuple[str, str], ...] = (
    ("webm", "webm"),
    ("wav", "wav"),
    ("m4a", "m4a"),
    ("mp4", "mp4"),
    ("mpeg", "mp3"),
    ("mp3", "mp3"),
    ("ogg", "ogg"),
)


class WhisperConfigurationError(RuntimeError):
    """Raised when OPENAI_API_KEY is missing."""


class WhisperTranscriptionError(RuntimeError):
    """Raised when the Whisper API call fails."""


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    model: str
    language: str | None = None
    duration: float | None = None


def upload_name(filename: str | None, mime_type: str | None) -> str:
    """Pick a file name whose extension Whisper will accept."""
    if filename and "." in filename:
        return filename
    lowered = (mime_type or "").lower()
    for token, ext in _EXTENSIONS:
        if token in lowered:
            return f"audio.{ext}"
    return "audio.webm"


def estimate_cost(file_size: int) -> float:
    minutes = max(file_size, 0) / (1024 * 1024)
    return round(max(MIN_COST, minutes * PRICE_PER_MINUTE), 4)


def transcribe(
    audio_bytes: bytes,
    filename: str | None = None,
    mime_type: str | None = None,
) -> TranscriptionResult:
    """
    Transcribe ``audio_bytes`` with Whisper.

    Raises:
        WhisperConfigurationError: If OPENAI_API_KEY is not set.
        WhisperTranscriptionError: If the API call fails after retries.
    """
    api_key = os.environ.get("OPENAI_API_KEY")
    if not api_key:
        raise WhisperConfigurationError("OPENAI_API_KEY environment variable is not set.")

    client = OpenAI(api_key=api_key)
    model = settings.WHISPER_MODEL

    audio_file = io.BytesIO(audio_bytes)
    audio_file.name = upload_name(filename, mime_type)

    options: dict = {"temperature": settings.WHISPER_TEMPERATURE}
    if settings.WHISPER_LANGUAGE:
        options["language"] = settings.WHISPER_LANGUAGE

    try:
        response = transcriptions_with_retry(
            client,
            model=model,
            file=audio_file,
            response_format="verbose_json",
            **options,
        )
    except Exception as exc:
        raise WhisperTranscriptionError(f"Whisper transcription failed: {exc}") from exc

    text = (getattr(response, "text", None) or "").strip()
    result = TranscriptionResult(
        text=text,
        model=model,
        language=getattr(response, "language", None),
        duration=getattr(response, "duration", None),
    )
    logger.info(
        "Whisper transcription: %d chars, language=%s", len(result.text), result.language,
    )
    return result
