"""
whisperprobe/settings.py
=========================
Runtime configuration — WhisperProbe

All values come from the environment (a local ``.env`` is loaded first).
Malformed numeric values fall back to their defaults with a warning.
"""

import logging
import os

from dotenv import load_dotenv

from whisperprobe.audio.validator import (
    DEFAULT_ACCEPTED_MIME,
    DEFAULT_MAX_SIZE,
    DEFAULT_MIN_CONTENT_RATIO,
    DEFAULT_MIN_SIZE,
    ValidationProfile,
)

load_dotenv()

logger = logging.getLogger("whisperprobe.settings")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r — using %d", name, raw, default)
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid number for %s=%r — using %s", name, raw, default)
        return default


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------

HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = _env_int("PORT", 3002)
MAX_UPLOAD_BYTES: int = _env_int("MAX_UPLOAD_BYTES", 50 * 1024 * 1024)
DEBUG_AUDIO_DUMP_DIR: str | None = os.getenv("DEBUG_AUDIO_DUMP_DIR") or None
WEBHOOK_URL: str | None = os.getenv("WEBHOOK_URL") or None

# ---------------------------------------------------------------------------
# Whisper
# ---------------------------------------------------------------------------

WHISPER_MODEL: str = os.getenv("WHISPER_MODEL", "whisper-1")
# Empty WHISPER_LANGUAGE lets Whisper auto-detect.
WHISPER_LANGUAGE: str | None = os.getenv("WHISPER_LANGUAGE", "fr") or None
WHISPER_TEMPERATURE: float = _env_float("WHISPER_TEMPERATURE", 0.1)


def openai_configured() -> bool:
    return bool(os.environ.get("OPENAI_API_KEY"))


# ---------------------------------------------------------------------------
# Acceptance profile
# ---------------------------------------------------------------------------


def load_profile() -> ValidationProfile:
    """Build the acceptance profile, applying any AUDIO_* overrides."""
    raw_mime = os.getenv("AUDIO_ACCEPTED_MIME", "")
    tokens = tuple(t.strip().lower() for t in raw_mime.split(",") if t.strip())

    return ValidationProfile(
        accepted_mime_substrings=tokens or DEFAULT_ACCEPTED_MIME,
        min_size=_env_int("AUDIO_MIN_SIZE", DEFAULT_MIN_SIZE),
        max_size=_env_int("AUDIO_MAX_SIZE", DEFAULT_MAX_SIZE),
        min_content_ratio=_env_float("AUDIO_MIN_CONTENT_RATIO", DEFAULT_MIN_CONTENT_RATIO),
    )
