# whisperprobe/audio/__init__.py
# ===============================
# Audio Inspection Layer — WhisperProbe
#
# Public API:
#   detect(data)                     → FormatDetection
#   validate(sample, detection, ...) → AcceptanceReport

from whisperprobe.audio.sniffer import (            # noqa: F401
    AudioFormat,
    Confidence,
    FormatDetection,
    detect,
    header_hex,
)
from whisperprobe.audio.validator import (          # noqa: F401
    AcceptanceReport,
    AudioSample,
    DEFAULT_PROFILE,
    ValidationProfile,
    content_ratio,
    validate,
)

__all__ = [
    "AudioFormat",
    "Confidence",
    "FormatDetection",
    "detect",
    "header_hex",
    "AcceptanceReport",
    "AudioSample",
    "DEFAULT_PROFILE",
    "ValidationProfile",
    "content_ratio",
    "validate",
]
