"""
voxtranslate/stt/whisper_client.py
===================================
OpenAI Whisper Speech Recognizer — voxtranslate

Responsibility:
    - Transcribe audio with the OpenAI transcription API, forcing a language
    - Derive a 0–1 confidence from Whisper's per-segment log probabilities

Whisper takes ISO 639-1 language hints, so the locale region is dropped
("hi-IN" → "hi"). Whisper has a single hosted model; FAST and ENHANCED
map to the same model unless configured otherwise.

This module does NOT:
    - Choose which languages to try
    - Translate text
"""

import io
import logging
import math

from voxtranslate.stt.languages import base_language
from voxtranslate.stt.recognizer import ModelQuality, RecognitionResponse, SpeechRecognizer

logger = logging.getLogger("voxtranslate.stt.whisper_client")

# File extension per encoding; the API sniffs the format from the name.
_FILENAMES: dict[str, str] = {
    "webm_opus": "audio.webm",
    "ogg_opus": "audio.ogg",
    "linear16": "audio.wav",
    "mp3": "audio.mp3",
    "flac": "audio.flac",
}


class WhisperRecognizer(SpeechRecognizer):
    """SpeechRecognizer backed by OpenAI's audio transcription endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        timeout_seconds: float = 15.0,
        client=None,
    ):
        if not api_key and client is None:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
        self._api_key = api_key
        self._model = model
        self._timeout_seconds = timeout_seconds
        self._client = client

    @property
    def name(self) -> str:
        return "whisper"

    def recognize(
        self,
        audio_bytes: bytes,
        encoding: str,
        sample_rate: int | None,
        language_code: str,
        model_quality: ModelQuality,
    ) -> RecognitionResponse:
        audio_file = io.BytesIO(audio_bytes)
        audio_file.name = _FILENAMES.get(encoding, "audio.webm")

        try:
            response = self._get_client().audio.transcriptions.create(
                model=self._model,
                file=audio_file,
                language=base_language(language_code),
                response_format="verbose_json",
                timeout=self._timeout_seconds,
            )
        except Exception as exc:
            raise RuntimeError(
                f"Whisper transcription failed ({language_code}): {exc}"
            ) from exc

        transcript = (getattr(response, "text", "") or "").strip()
        raw_segments = getattr(response, "segments", None) or []
        confidence = segment_confidence(raw_segments)

        logger.debug(
            "Whisper %s: %d segments, confidence %.3f",
            language_code, len(raw_segments), confidence,
        )
        return RecognitionResponse(transcript=transcript, confidence=confidence)

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self._api_key)
        return self._client


def segment_confidence(raw_segments) -> float:
    """
    Mean of exp(avg_logprob) across segments, clamped to [0, 1].

    Returns 0.0 when there are no segments.
    """
    probabilities: list[float] = []
    for seg in raw_segments:
        # Handle both dict and object attribute access patterns
        if isinstance(seg, dict):
            logprob = seg.get("avg_logprob")
        else:
            logprob = getattr(seg, "avg_logprob", None)
        if logprob is None:
            continue
        probabilities.append(math.exp(float(logprob)))

    if not probabilities:
        return 0.0
    return max(0.0, min(1.0, sum(probabilities) / len(probabilities)))
