"""
whisperprobe/audio/sniffer.py
==============================
Container Format Sniffer — WhisperProbe

Responsibility:
    - Guess the container/codec of an uploaded buffer from its magic bytes
    - Recognize WebM (EBML), WAV (RIFF), MP4 (ftyp) and MP3 (MPEG sync)
    - Fall back to a shallow scan for a shifted EBML prefix
    - Render a short hex preview of the buffer header

This module does NOT:
    - Decode or parse audio streams
    - Log, raise, or perform any I/O
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------

EBML_MAGIC = b"\x1a\x45\xdf\xa3"
RIFF_MAGIC = b"RIFF"
FTYP_MAGIC = b"ftyp"
EBML_PREFIX = b"\x1a\x45"

# How far into the buffer the shifted-EBML fallback looks.
OFFSET_SCAN_LIMIT = 100


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class AudioFormat(str, Enum):
    """Container formats the sniffer can report."""

    WEBM = "webm"
    WAV = "wav"
    MP4 = "mp4"
    MP3 = "mp3"
    UNKNOWN_OFFSET_WEBM = "webm_offset"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def signature(self) -> Optional[str]:
        return _SIGNATURES.get(self)


class Confidence(str, Enum):
    DEFINITE = "definite"
    PROBABLE = "probable"


_LABELS: dict[AudioFormat, str] = {
    AudioFormat.WEBM: "WebM/Matroska",
    AudioFormat.WAV: "WAV/RIFF",
    AudioFormat.MP4: "MP4",
    AudioFormat.MP3: "MP3",
    AudioFormat.UNKNOWN_OFFSET_WEBM: "WebM (décalé)",
    AudioFormat.UNKNOWN: "unknown",
}

_SIGNATURES: dict[AudioFormat, str] = {
    AudioFormat.WEBM: "EBML",
    AudioFormat.WAV: "RIFF",
    AudioFormat.MP4: "ftyp",
    AudioFormat.MP3: "MPEG sync",
}


@dataclass(frozen=True)
class FormatDetection:
    """Result of sniffing a buffer."""

    format: AudioFormat
    signature_offset: int = 0
    confidence: Confidence = Confidence.DEFINITE

    @property
    def label(self) -> str:
        return self.format.label

    @property
    def is_known(self) -> bool:
        return self.format is not AudioFormat.UNKNOWN


UNKNOWN_DETECTION = FormatDetection(format=AudioFormat.UNKNOWN)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def as_bytes(data: Any) -> bytes:
    """Coerce a bytes-like buffer to ``bytes``; anything else becomes ``b""``."""
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return b""


def detect(data: Any) -> FormatDetection:
    """
    Identify the container format of ``data`` from its leading bytes.

    Signatures are checked in a fixed order (EBML, RIFF, ftyp, MPEG sync)
    and the first match wins, so a RIFF file that happens to contain
    ``1A 45`` further in is still reported as WAV. When nothing matches,
    the first ``OFFSET_SCAN_LIMIT`` offsets are scanned for the 2-byte
    EBML prefix and a hit is reported as a probable, shifted WebM.

    Args:
        data: Raw upload bytes. ``None``, short buffers and non-bytes-like
              values are allowed and reported as Unknown.

    Returns:
        FormatDetection. Never raises.
    """
    buf = as_bytes(data)
    if not buf:
        return UNKNOWN_DETECTION

    size = len(buf)

    if size >= 4:
        head = buf[:4]
        if head == EBML_MAGIC:
            return FormatDetection(format=AudioFormat.WEBM)
        if head == RIFF_MAGIC:
            return FormatDetection(format=AudioFormat.WAV)
        if size >= 8 and buf[4:8] == FTYP_MAGIC:
            return FormatDetection(format=AudioFormat.MP4)
        if buf[0] == 0xFF and (buf[1] & 0xE0) == 0xE0:
            return FormatDetection(format=AudioFormat.MP3)

    # Only the 2-byte prefix is matched here, unlike the full EBML check above.
    for offset in range(min(OFFSET_SCAN_LIMIT, size - 4)):
        if buf[offset:offset + 2] == EBML_PREFIX:
            return FormatDetection(
                format=AudioFormat.UNKNOWN_OFFSET_WEBM,
                signature_offset=offset,
                confidence=Confidence.PROBABLE,
            )

    return UNKNOWN_DETECTION


def header_hex(data: Any, limit: int = 32) -> str:
    """Return the first ``limit`` bytes as space-separated lowercase hex."""
    return " ".join(f"{b:02x}" for b in as_bytes(data)[:limit])
