"""
voxtranslate/audio/validator.py
================================
Audio Validator — voxtranslate

Responsibility:
    - Reject audio that is empty, too small to contain speech, or too large
      for the recognition backend
    - Identify the encoding (magic bytes first, then filename / content type)
    - Probe sample rate and duration, rejecting zero-length or over-long clips
    - Return an immutable AudioInput owned by one orchestration call

This module does NOT:
    - Transcode, resample or otherwise modify the audio
    - Call any recognizer or translator
"""

import io
import logging
import wave
from dataclasses import dataclass

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from voxtranslate.errors import InvalidInputError

logger = logging.getLogger("voxtranslate.audio.validator")


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MIN_AUDIO_BYTES = 1000
MAX_AUDIO_BYTES = 10 * 1024 * 1024
MAX_DURATION_SECONDS = 60.0

# Browser MediaRecorder uploads are WebM/Opus, recorded at 48 kHz.
DEFAULT_ENCODING = "webm_opus"
OPUS_SAMPLE_RATE = 48000

_EXTENSION_ENCODINGS: dict[str, str] = {
    ".webm": "webm_opus",
    ".ogg": "ogg_opus",
    ".opus": "ogg_opus",
    ".wav": "linear16",
    ".mp3": "mp3",
    ".flac": "flac",
    ".pcm": "pcm16",
}

_CONTENT_TYPE_ENCODINGS: dict[str, str] = {
    "audio/webm": "webm_opus",
    "audio/ogg": "ogg_opus",
    "audio/wav": "linear16",
    "audio/x-wav": "linear16",
    "audio/wave": "linear16",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/flac": "flac",
    "audio/l16": "pcm16",
    "audio/pcm": "pcm16",
}

# pydub/ffmpeg format names for containers that need ffmpeg to decode
_PYDUB_FORMATS: dict[str, str] = {
    "webm_opus": "webm",
    "ogg_opus": "ogg",
    "mp3": "mp3",
    "flac": "flac",
}


@dataclass(frozen=True)
class AudioInput:
    """Validated audio for one orchestration call. Never mutated."""

    data: bytes
    encoding: str
    sample_rate: int | None
    duration_seconds: float | None  # None when the container could not be probed

    @property
    def size_bytes(self) -> int:
        return len(self.data)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_audio(
    audio_bytes: bytes,
    filename: str | None = None,
    content_type: str | None = None,
    min_bytes: int = MIN_AUDIO_BYTES,
    max_bytes: int = MAX_AUDIO_BYTES,
    max_duration_seconds: float = MAX_DURATION_SECONDS,
    probe_duration: bool = True,
) -> AudioInput:
    """
    Validate raw uploaded audio and describe it.

    Steps:
        1. Size bounds
        2. Encoding detection
        3. Duration / sample-rate probe (optional)

    Raises:
        InvalidInputError: On any validation failure.
    """
    validate_size(audio_bytes, min_bytes, max_bytes)

    encoding = detect_encoding(audio_bytes, filename, content_type)

    sample_rate: int | None = OPUS_SAMPLE_RATE if encoding.endswith("_opus") else None
    duration: float | None = None
    if probe_duration:
        probed_rate, duration = _probe(audio_bytes, encoding)
        if probed_rate:
            sample_rate = probed_rate
        if duration is not None:
            validate_duration(duration, max_duration_seconds)

    logger.info(
        "Audio accepted: %.2f KB, encoding=%s, sample_rate=%s, duration=%s",
        len(audio_bytes) / 1024,
        encoding,
        sample_rate or "unknown",
        f"{duration:.2f}s" if duration is not None else "unknown",
    )
    return AudioInput(
        data=bytes(audio_bytes),
        encoding=encoding,
        sample_rate=sample_rate,
        duration_seconds=duration,
    )


def validate_size(audio_bytes: bytes, min_bytes: int, max_bytes: int) -> None:
    """
    Raises:
        InvalidInputError: If the buffer is empty, below ``min_bytes`` or above
            ``max_bytes``.
    """
    if not audio_bytes:
        raise InvalidInputError("Audio file is empty.")
    size = len(audio_bytes)
    if size < min_bytes:
        raise InvalidInputError(
            f"Audio file too small ({size} bytes) - please record longer audio."
        )
    if size > max_bytes:
        raise InvalidInputError(
            f"Audio file too large ({size} bytes); the maximum is {max_bytes} bytes."
        )


def validate_duration(duration_seconds: float, max_duration_seconds: float) -> None:
    if duration_seconds <= 0:
        raise InvalidInputError("Audio file has zero duration.")
    if duration_seconds > max_duration_seconds:
        raise InvalidInputError(
            f"Audio duration ({duration_seconds:.1f}s) exceeds the "
            f"maximum allowed ({max_duration_seconds:.0f}s)."
        )


def detect_encoding(
    audio_bytes: bytes,
    filename: str | None = None,
    content_type: str | None = None,
) -> str:
    """Identify the audio encoding; magic bytes win over declared metadata."""
    head = audio_bytes[:12]
    if head[:4] == b"RIFF" and head[8:12] == b"WAVE":
        return "linear16"
    if head[:4] == b"\x1a\x45\xdf\xa3":
        return "webm_opus"
    if head[:4] == b"OggS":
        return "ogg_opus"
    if head[:4] == b"fLaC":
        return "flac"
    if head[:3] == b"ID3" or (len(head) > 1 and head[0] == 0xFF and head[1] & 0xE0 == 0xE0):
        return "mp3"

    if filename:
        ext = _extract_extension(filename)
        if ext in _EXTENSION_ENCODINGS:
            return _EXTENSION_ENCODINGS[ext]

    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime in _CONTENT_TYPE_ENCODINGS:
            return _CONTENT_TYPE_ENCODINGS[mime]

    return DEFAULT_ENCODING


# ---------------------------------------------------------------------------
# Probing
# ---------------------------------------------------------------------------


def _probe(audio_bytes: bytes, encoding: str) -> tuple[int | None, float | None]:
    """Return (sample_rate, duration_seconds); None for what cannot be read."""
    if encoding == "linear16":
        return _probe_wav(audio_bytes)

    fmt = _PYDUB_FORMATS.get(encoding)
    if fmt is None:
        return None, None

    try:
        audio = AudioSegment.from_file(io.BytesIO(audio_bytes), format=fmt)
    except CouldntDecodeError as exc:
        raise InvalidInputError("Audio file is corrupt or could not be decoded.") from exc
    except Exception as exc:
        # Typically ffmpeg missing on the host; size bounds still apply.
        logger.warning("Could not probe %s audio: %s — skipping duration check.", fmt, exc)
        return None, None

    return audio.frame_rate, len(audio) / 1000.0


def _probe_wav(audio_bytes: bytes) -> tuple[int, float]:
    try:
        with wave.open(io.BytesIO(audio_bytes), "rb") as wf:
            sample_rate = wf.getframerate()
            n_frames = wf.getnframes()
    except (wave.Error, EOFError) as exc:
        raise InvalidInputError(f"WAV audio could not be decoded: {exc}") from exc

    if sample_rate <= 0:
        raise InvalidInputError("WAV audio declares an invalid sample rate.")
    return sample_rate, n_frames / sample_rate


def _extract_extension(filename: str) -> str:
    """Return lowercase file extension including the dot, e.g. '.wav'."""
    dot_index = filename.rfind(".")
    if dot_index == -1:
        return ""
    return filename[dot_index:].lower()
