"""
whisperprobe/report.py
=======================
Analysis Response Assembly — WhisperProbe

Responsibility:
    - Turn a (sample, detection, report) triple into the JSON body returned
      by the debug and transcription endpoints
    - Keep the response shape in one place for every endpoint

This module ONLY assembles — it does NOT sniff, validate, or log.
"""

from typing import Any, Optional

from whisperprobe.audio.sniffer import Confidence, FormatDetection, header_hex
from whisperprobe.audio.validator import AcceptanceReport, AudioSample

HEADER_PREVIEW_BYTES = 32
HEADER_PREVIEW_CHARS = 50

MESSAGE_OK = "Fichier audio valide pour OpenAI"
MESSAGE_PROBLEMS = "Problèmes détectés"


def format_details(detection: FormatDetection) -> dict[str, Any]:
    """Signature/offset details for the detected format."""
    if not detection.is_known:
        return {}
    if detection.confidence is Confidence.PROBABLE:
        return {"offset": detection.signature_offset, "compatible": "OpenAI: PROBABLE"}
    return {"signature": detection.format.signature, "compatible": "OpenAI: OUI"}


def header_preview(data: bytes) -> str:
    hexed = header_hex(data, HEADER_PREVIEW_BYTES)
    if len(hexed) > HEADER_PREVIEW_CHARS:
        return hexed[:HEADER_PREVIEW_CHARS] + "..."
    return hexed


def build_analysis(
    sample: AudioSample,
    detection: FormatDetection,
    report: AcceptanceReport,
    filename: Optional[str] = None,
    debug_info: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Assemble the ``analysis`` object.

    ``shouldWorkWithOpenAI`` mirrors ``report.overall_accepted``; the name
    refers to the downstream transcription API.
    """
    analysis: dict[str, Any] = {
        "filename": filename,
        "mimetype": sample.declared_mime_type,
        "size": sample.declared_size,
        "detectedFormat": detection.label,
        "formatDetails": format_details(detection),
        "contentRatio": round(report.content_ratio, 3),
        "header": header_preview(sample.data),
        "checks": report.checks(),
        "recommendations": list(report.recommendations),
        "shouldWorkWithOpenAI": report.overall_accepted,
    }
    if debug_info is not None:
        analysis["debugInfo"] = debug_info
    return analysis


def build_debug_response(analysis: dict[str, Any]) -> dict[str, Any]:
    """Wrap an analysis in the ``/debug-audio`` envelope."""
    return {
        "success": True,
        "message": MESSAGE_OK if analysis["shouldWorkWithOpenAI"] else MESSAGE_PROBLEMS,
        "analysis": analysis,
    }
