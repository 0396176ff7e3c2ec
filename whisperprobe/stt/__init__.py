# whisperprobe/stt/__init__.py
# =============================
# Speech-to-Text Layer — WhisperProbe
#
# Public API:
#   transcribe(audio_bytes, filename, mime_type) → TranscriptionResult

from whisperprobe.stt.whisper_client import (       # noqa: F401
    TranscriptionResult,
    WhisperConfigurationError,
    WhisperTranscriptionError,
    estimate_cost,
    transcribe,
)

__all__ = [
    "TranscriptionResult",
    "WhisperConfigurationError",
    "WhisperTranscriptionError",
    "estimate_cost",
    "transcribe",
]
