"""
whisperprobe/audio/validator.py
================================
Acceptance Validator — WhisperProbe

Responsibility:
    - Run the four acceptance checks Whisper uploads are screened with
      (MIME type, declared size, non-zero content, recognized container)
    - Compute the content ratio (share of non-zero bytes)
    - Produce human-readable recommendations for every failing check

Every check is evaluated, even after one fails, so the report is always
complete. ``validate`` is total: any input, however malformed, yields a
well-formed AcceptanceReport.

This module does NOT:
    - Sniff formats (see sniffer.py)
    - Log, raise, or perform any I/O
"""

from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from whisperprobe.audio.sniffer import AudioFormat, FormatDetection, as_bytes


# ---------------------------------------------------------------------------
# Defaults (OpenAI Whisper upload constraints)
# ---------------------------------------------------------------------------

DEFAULT_ACCEPTED_MIME: tuple[str, ...] = (
    "webm", "wav", "mp3", "mp4", "mpeg", "m4a", "ogg",
)
DEFAULT_MIN_SIZE: int = 100                   # bytes, exclusive
DEFAULT_MAX_SIZE: int = 25 * 1024 * 1024      # bytes, exclusive
DEFAULT_MIN_CONTENT_RATIO: float = 0.05       # exclusive

SUCCESS_MESSAGE = "Fichier semble correct pour OpenAI Whisper"


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AudioSample:
    """An uploaded buffer with the metadata the client declared for it."""

    data: bytes = b""
    declared_mime_type: Optional[str] = None
    declared_size: Optional[int] = None


@dataclass(frozen=True)
class ValidationProfile:
    """Thresholds the acceptance checks are evaluated against."""

    accepted_mime_substrings: tuple[str, ...] = DEFAULT_ACCEPTED_MIME
    min_size: int = DEFAULT_MIN_SIZE
    max_size: int = DEFAULT_MAX_SIZE
    min_content_ratio: float = DEFAULT_MIN_CONTENT_RATIO


DEFAULT_PROFILE = ValidationProfile()


@dataclass(frozen=True)
class AcceptanceReport:
    """Outcome of the acceptance checks for a single sample."""

    mime_accepted: bool
    size_accepted: bool
    content_accepted: bool
    format_accepted: bool
    content_ratio: float
    recommendations: tuple[str, ...] = field(default_factory=tuple)

    @property
    def overall_accepted(self) -> bool:
        return (
            self.mime_accepted
            and self.size_accepted
            and self.content_accepted
            and self.format_accepted
        )

    def checks(self) -> dict[str, bool]:
        return {
            "mimetype": self.mime_accepted,
            "size": self.size_accepted,
            "content": self.content_accepted,
            "format": self.format_accepted,
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def content_ratio(data: Any) -> float:
    """Fraction of non-zero bytes in ``data``; 0.0 for an empty buffer."""
    buf = as_bytes(data)
    if not buf:
        return 0.0
    arr = np.frombuffer(buf, dtype=np.uint8)
    return float(np.count_nonzero(arr)) / arr.size


def validate(
    sample: AudioSample,
    detection: FormatDetection,
    profile: ValidationProfile = DEFAULT_PROFILE,
) -> AcceptanceReport:
    """
    Evaluate ``sample`` against ``profile``.

    Checks (all evaluated, in this order):
        1. mimetype — declared MIME contains an accepted token (case-insensitive)
        2. size     — min_size < declared_size < max_size
        3. content  — content ratio > min_content_ratio
        4. format   — detection is not Unknown

    Args:
        sample:    The uploaded buffer and its declared metadata.
        detection: Output of ``sniffer.detect`` for the same buffer.
        profile:   Thresholds; defaults to the Whisper upload limits.

    Returns:
        AcceptanceReport with one recommendation per failing check, or a
        single success message when everything passes.
    """
    mime = sample.declared_mime_type
    size = sample.declared_size
    ratio = content_ratio(sample.data)

    mime_ok = _mime_accepted(mime, profile.accepted_mime_substrings)
    size_ok = _size_accepted(size, profile.min_size, profile.max_size)
    content_ok = ratio > profile.min_content_ratio
    format_ok = detection.format is not AudioFormat.UNKNOWN

    recommendations: list[str] = []
    if not mime_ok:
        recommendations.append(f'Mimetype "{mime or ""}" non supporté par OpenAI')
    if not size_ok:
        shown = size if size is not None else "inconnue"
        recommendations.append(f"Taille {shown} bytes hors limites OpenAI")
    if not content_ok:
        recommendations.append(f"Audio semble vide ({ratio * 100:.1f}% contenu)")
    if not format_ok:
        recommendations.append(f'Format "{detection.label}" non reconnu par OpenAI')

    if not recommendations:
        recommendations.append(SUCCESS_MESSAGE)

    return AcceptanceReport(
        mime_accepted=mime_ok,
        size_accepted=size_ok,
        content_accepted=content_ok,
        format_accepted=format_ok,
        content_ratio=ratio,
        recommendations=tuple(recommendations),
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mime_accepted(mime: Any, accepted: tuple[str, ...]) -> bool:
    if not isinstance(mime, str) or not mime:
        return False
    lowered = mime.lower()
    return any(token in lowered for token in accepted)


def _size_accepted(size: Any, min_size: int, max_size: int) -> bool:
    if isinstance(size, bool) or not isinstance(size, (int, float)):
        return False
    return min_size < size < max_size
