"""
tests/test_audio_validator.py
==============================
Audio Validator Tests — size bounds, encoding sniffing, WAV probing
"""

import os
import sys
import unittest
from unittest.mock import patch

from pydub.exceptions import CouldntDecodeError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fakes import make_wav

from voxtranslate.audio.validator import detect_encoding, validate_audio, validate_size
from voxtranslate.errors import InvalidInputError


class TestSizeBounds(unittest.TestCase):

    def test_empty(self):
        with self.assertRaises(InvalidInputError):
            validate_size(b"", 1000, 5000)

    def test_below_minimum(self):
        with self.assertRaises(InvalidInputError) as ctx:
            validate_size(b"\x00" * 999, 1000, 5000)
        self.assertIn("999 bytes", str(ctx.exception))

    def test_above_maximum(self):
        with self.assertRaises(InvalidInputError):
            validate_size(b"\x00" * 5001, 1000, 5000)

    def test_bounds_are_inclusive(self):
        validate_size(b"\x00" * 1000, 1000, 5000)
        validate_size(b"\x00" * 5000, 1000, 5000)


class TestDetectEncoding(unittest.TestCase):

    def test_magic_bytes(self):
        self.assertEqual(detect_encoding(make_wav()), "linear16")
        self.assertEqual(detect_encoding(b"\x1a\x45\xdf\xa3" + b"\x00" * 16), "webm_opus")
        self.assertEqual(detect_encoding(b"OggS" + b"\x00" * 16), "ogg_opus")
        self.assertEqual(detect_encoding(b"fLaC" + b"\x00" * 16), "flac")
        self.assertEqual(detect_encoding(b"ID3" + b"\x00" * 16), "mp3")
        self.assertEqual(detect_encoding(b"\xff\xfb" + b"\x00" * 16), "mp3")

    def test_magic_bytes_beat_filename(self):
        self.assertEqual(detect_encoding(make_wav(), filename="clip.webm"), "linear16")

    def test_filename_then_content_type(self):
        raw = b"\x01\x02" * 20
        self.assertEqual(detect_encoding(raw, filename="clip.PCM"), "pcm16")
        self.assertEqual(detect_encoding(raw, content_type="audio/L16; rate=16000"), "pcm16")
        self.assertEqual(detect_encoding(raw, filename="clip", content_type="audio/ogg"), "ogg_opus")

    def test_default_is_webm(self):
        self.assertEqual(detect_encoding(b"\x01\x02" * 20), "webm_opus")


class TestValidateAudio(unittest.TestCase):

    def test_wav_is_probed(self):
        audio = validate_audio(make_wav(seconds=0.5, sample_rate=16000))

        self.assertEqual(audio.encoding, "linear16")
        self.assertEqual(audio.sample_rate, 16000)
        self.assertAlmostEqual(audio.duration_seconds, 0.5)

    def test_zero_length_wav_rejected(self):
        wav = make_wav(seconds=0.0)
        with self.assertRaises(InvalidInputError):
            validate_audio(wav, min_bytes=1)

    def test_overlong_wav_rejected(self):
        with self.assertRaises(InvalidInputError):
            validate_audio(make_wav(seconds=3.0, sample_rate=8000), max_duration_seconds=2.0)

    def test_probe_disabled(self):
        audio = validate_audio(
            make_wav(seconds=3.0, sample_rate=8000),
            max_duration_seconds=2.0,
            probe_duration=False,
        )
        self.assertIsNone(audio.duration_seconds)

    def test_opus_defaults_to_48k_when_unprobed(self):
        data = b"\x1a\x45\xdf\xa3" + b"\x00" * 2000
        audio = validate_audio(data, probe_duration=False)

        self.assertEqual(audio.encoding, "webm_opus")
        self.assertEqual(audio.sample_rate, 48000)
        self.assertEqual(audio.size_bytes, len(data))

    def test_decoder_unavailable_skips_duration(self):
        data = b"OggS" + b"\x00" * 2000
        with patch(
            "voxtranslate.audio.validator.AudioSegment.from_file",
            side_effect=FileNotFoundError("ffmpeg"),
        ):
            audio = validate_audio(data)
        self.assertIsNone(audio.duration_seconds)
        self.assertEqual(audio.encoding, "ogg_opus")

    def test_corrupt_audio_keeps_decoder_error(self):
        data = b"OggS" + b"\x00" * 2000
        with patch(
            "voxtranslate.audio.validator.AudioSegment.from_file",
            side_effect=CouldntDecodeError("bad header"),
        ):
            with self.assertRaises(InvalidInputError) as ctx:
                validate_audio(data)
        self.assertIsInstance(ctx.exception.__cause__, CouldntDecodeError)


if __name__ == "__main__":
    unittest.main()
