"""
tests/test_report.py
=====================
Response Assembly Tests — WhisperProbe

All tests are OFFLINE.
"""

import os
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from whisperprobe.audio import AudioSample, detect, validate
from whisperprobe.audio.sniffer import AudioFormat, Confidence, FormatDetection
from whisperprobe.report import (
    MESSAGE_OK,
    MESSAGE_PROBLEMS,
    build_analysis,
    build_debug_response,
    format_details,
    header_preview,
)


def _analyse(data: bytes, mime: str = "audio/webm", **kwargs):
    sample = AudioSample(data=data, declared_mime_type=mime, declared_size=len(data))
    detection = detect(data)
    return build_analysis(sample, detection, validate(sample, detection), **kwargs)


class TestFormatDetails(unittest.TestCase):

    def test_definite(self):
        details = format_details(FormatDetection(format=AudioFormat.WEBM))
        self.assertEqual(details, {"signature": "EBML", "compatible": "OpenAI: OUI"})

    def test_probable(self):
        details = format_details(
            FormatDetection(
                format=AudioFormat.UNKNOWN_OFFSET_WEBM,
                signature_offset=12,
                confidence=Confidence.PROBABLE,
            )
        )
        self.assertEqual(details, {"offset": 12, "compatible": "OpenAI: PROBABLE"})

    def test_unknown(self):
        self.assertEqual(format_details(FormatDetection(format=AudioFormat.UNKNOWN)), {})


class TestHeaderPreview(unittest.TestCase):

    def test_truncated_with_ellipsis(self):
        preview = header_preview(bytes(range(1, 64)))
        self.assertTrue(preview.endswith("..."))
        self.assertEqual(len(preview), 53)

    def test_short_header_untouched(self):
        self.assertEqual(header_preview(b"RIFF"), "52 49 46 46")


class TestBuildAnalysis(unittest.TestCase):

    def test_shape(self):
        data = b"\x1a\x45\xdf\xa3" + b"\x42" * 400
        analysis = _analyse(data, filename="clip.webm", debug_info={"timestamp": 1})

        self.assertEqual(analysis["filename"], "clip.webm")
        self.assertEqual(analysis["mimetype"], "audio/webm")
        self.assertEqual(analysis["size"], 404)
        self.assertEqual(analysis["detectedFormat"], "WebM/Matroska")
        self.assertEqual(analysis["contentRatio"], 1.0)
        self.assertEqual(
            analysis["checks"],
            {"mimetype": True, "size": True, "content": True, "format": True},
        )
        self.assertTrue(analysis["shouldWorkWithOpenAI"])
        self.assertEqual(analysis["debugInfo"], {"timestamp": 1})

    def test_content_ratio_rounded(self):
        data = b"\x1a\x45\xdf\xa3" + bytes(296)  # 4 of 300 bytes non-zero
        analysis = _analyse(data)
        self.assertEqual(analysis["contentRatio"], round(4 / 300, 3))

    def test_debug_info_omitted_by_default(self):
        self.assertNotIn("debugInfo", _analyse(b"RIFF" + b"\x01" * 200))

    def test_should_work_matches_checks(self):
        analysis = _analyse(bytes(16))
        self.assertFalse(analysis["shouldWorkWithOpenAI"])
        self.assertEqual(len(analysis["recommendations"]), 3)


class TestDebugEnvelope(unittest.TestCase):

    def test_ok_message(self):
        body = build_debug_response(_analyse(b"RIFF" + b"\x01" * 200, mime="audio/wav"))
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], MESSAGE_OK)

    def test_problem_message(self):
        body = build_debug_response(_analyse(bytes(16)))
        self.assertTrue(body["success"])
        self.assertEqual(body["message"], MESSAGE_PROBLEMS)


if __name__ == "__main__":
    unittest.main()
