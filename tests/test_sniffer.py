"""
tests/test_sniffer.py
======================
Container Sniffer Tests — WhisperProbe

All tests are OFFLINE — pure byte comparisons, no audio decoding.
"""

import os
import random
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from whisperprobe.audio.sniffer import (
    AudioFormat,
    Confidence,
    OFFSET_SCAN_LIMIT,
    detect,
    header_hex,
)


# ===================================================================
# Outer signatures
# ===================================================================


class TestDefiniteSignatures(unittest.TestCase):

    def test_ebml_is_webm(self):
        for tail in (b"", b"\x00" * 10, bytes(range(256))):
            result = detect(b"\x1a\x45\xdf\xa3" + tail)
            self.assertEqual(result.format, AudioFormat.WEBM)
            self.assertEqual(result.confidence, Confidence.DEFINITE)
            self.assertEqual(result.signature_offset, 0)

    def test_riff_is_wav(self):
        result = detect(b"RIFF\x24\x00\x00\x00WAVEfmt ")
        self.assertEqual(result.format, AudioFormat.WAV)
        self.assertEqual(result.label, "WAV/RIFF")

    def test_ftyp_at_offset_four_is_mp4(self):
        result = detect(b"\x00\x00\x00\x20ftypM4A ")
        self.assertEqual(result.format, AudioFormat.MP4)

    def test_ftyp_needs_eight_bytes(self):
        self.assertEqual(detect(b"\x00\x00\x00\x20fty").format, AudioFormat.UNKNOWN)

    def test_mpeg_sync_is_mp3(self):
        self.assertEqual(detect(b"\xff\xfb\x90\x64").format, AudioFormat.MP3)
        self.assertEqual(detect(b"\xff\xe0\x00\x00").format, AudioFormat.MP3)

    def test_partial_mpeg_sync_is_not_mp3(self):
        self.assertEqual(detect(b"\xff\xc0\x00\x00").format, AudioFormat.UNKNOWN)

    def test_riff_wins_over_embedded_ebml_prefix(self):
        data = b"RIFF" + b"\x00" * 20 + b"\x1a\x45" + b"\x00" * 20
        self.assertEqual(detect(data).format, AudioFormat.WAV)


# ===================================================================
# Shifted EBML fallback
# ===================================================================


class TestOffsetScan(unittest.TestCase):

    def test_prefix_at_offset_fifty(self):
        data = bytearray(120)
        data[50:52] = b"\x1a\x45"
        result = detect(bytes(data))
        self.assertEqual(result.format, AudioFormat.UNKNOWN_OFFSET_WEBM)
        self.assertEqual(result.signature_offset, 50)
        self.assertEqual(result.confidence, Confidence.PROBABLE)
        self.assertTrue(result.is_known)

    def test_two_byte_prefix_is_enough(self):
        data = bytearray(40)
        data[3:5] = b"\x1a\x45"
        self.assertEqual(detect(bytes(data)).signature_offset, 3)

    def test_first_hit_wins(self):
        data = bytearray(200)
        data[10:12] = b"\x1a\x45"
        data[30:32] = b"\x1a\x45"
        self.assertEqual(detect(bytes(data)).signature_offset, 10)

    def test_prefix_beyond_scan_limit_is_ignored(self):
        data = bytearray(400)
        data[OFFSET_SCAN_LIMIT:OFFSET_SCAN_LIMIT + 2] = b"\x1a\x45"
        self.assertEqual(detect(bytes(data)).format, AudioFormat.UNKNOWN)

    def test_scan_stops_four_bytes_before_end(self):
        # len 10 → offsets 0..5 are scanned
        data = bytearray(10)
        data[6:8] = b"\x1a\x45"
        self.assertEqual(detect(bytes(data)).format, AudioFormat.UNKNOWN)
        data = bytearray(10)
        data[5:7] = b"\x1a\x45"
        self.assertEqual(detect(bytes(data)).signature_offset, 5)


# ===================================================================
# Degenerate input
# ===================================================================


class TestDegenerateInput(unittest.TestCase):

    def test_empty_and_none(self):
        self.assertEqual(detect(b"").format, AudioFormat.UNKNOWN)
        self.assertEqual(detect(None).format, AudioFormat.UNKNOWN)

    def test_non_bytes_input_is_unknown(self):
        for data in ("RIFFabcd", [0x1A, 0x45, 0xDF, 0xA3], 12345, object()):
            self.assertEqual(detect(data).format, AudioFormat.UNKNOWN, msg=repr(data))
        self.assertEqual(header_hex("RIFF"), "")

    def test_short_buffers(self):
        for data in (b"\x1a", b"\x1a\x45", b"RIF", b"\xff\xfb"):
            self.assertEqual(detect(data).format, AudioFormat.UNKNOWN)

    def test_zeros(self):
        self.assertEqual(detect(bytes(16)).format, AudioFormat.UNKNOWN)

    def test_random_buffers_never_raise(self):
        rng = random.Random(1234)
        for _ in range(200):
            data = bytes(rng.randrange(256) for _ in range(rng.randrange(0, 64)))
            detect(data)

    def test_accepts_bytearray_and_memoryview(self):
        raw = b"\x1a\x45\xdf\xa3\x01"
        self.assertEqual(detect(bytearray(raw)).format, AudioFormat.WEBM)
        self.assertEqual(detect(memoryview(raw)).format, AudioFormat.WEBM)


class TestHeaderHex(unittest.TestCase):

    def test_formats_lowercase_pairs(self):
        self.assertEqual(header_hex(b"\x1a\x45\xdf\xa3"), "1a 45 df a3")

    def test_limit(self):
        self.assertEqual(header_hex(bytes(range(40)), limit=3), "00 01 02")

    def test_empty(self):
        self.assertEqual(header_hex(b""), "")


if __name__ == "__main__":
    unittest.main()
