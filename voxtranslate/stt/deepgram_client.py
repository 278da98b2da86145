"""
voxtranslate/stt/deepgram_client.py
====================================
Deepgram Speech Recognizer — voxtranslate

Responsibility:
    - Transcribe an audio clip with Deepgram, forcing a given language
    - Return the transcript and Deepgram's confidence for that language
    - FAST probes use the low-latency model, ENHANCED uses the accurate one

Containerized audio (webm, ogg, wav, mp3, flac) is sniffed by Deepgram
itself; encoding and sample rate are only sent for raw PCM.

This module does NOT:
    - Choose which languages to try (handled by language_detector)
    - Translate text
    - Retry failed calls (the detector skips failed candidates)
"""

import logging

from voxtranslate.stt.recognizer import (
    ModelQuality,
    RecognitionResponse,
    SpeechRecognizer,
    join_segments,
)

logger = logging.getLogger("voxtranslate.stt.deepgram_client")

# Encodings Deepgram cannot sniff from a container header.
_RAW_ENCODINGS: dict[str, str] = {
    "pcm16": "linear16",
}


class DeepgramRecognizer(SpeechRecognizer):
    """SpeechRecognizer backed by the Deepgram pre-recorded API."""

    def __init__(
        self,
        api_key: str,
        fast_model: str = "nova-2",
        enhanced_model: str = "nova-3",
        timeout_seconds: float = 15.0,
        client=None,
    ):
        if not api_key and client is None:
            raise RuntimeError("DEEPGRAM_API_KEY environment variable is not set.")
        self._api_key = api_key
        self._models = {
            ModelQuality.FAST: fast_model,
            ModelQuality.ENHANCED: enhanced_model,
        }
        self._timeout_seconds = timeout_seconds
        self._client = client

    @property
    def name(self) -> str:
        return "deepgram"

    def recognize(
        self,
        audio_bytes: bytes,
        encoding: str,
        sample_rate: int | None,
        language_code: str,
        model_quality: ModelQuality,
    ) -> RecognitionResponse:
        model = self._models[model_quality]
        options: dict = {
            "model": model,
            "language": language_code,
            "punctuate": True,
            "smart_format": True,
        }
        raw_encoding = _RAW_ENCODINGS.get(encoding)
        if raw_encoding:
            options["encoding"] = raw_encoding
            if sample_rate:
                options["sample_rate"] = sample_rate

        try:
            logger.debug(
                "Sending %d bytes to Deepgram %s (language=%s)...",
                len(audio_bytes), model, language_code,
            )
            response = self._get_client().listen.v1.media.transcribe_file(
                request=audio_bytes,
                request_options={"timeout_in_seconds": int(self._timeout_seconds)},
                **options,
            )
        except Exception as exc:
            raise RuntimeError(
                f"Deepgram transcription failed ({language_code}, {model}): {exc}"
            ) from exc

        return parse_response(response)

    def _get_client(self):
        if self._client is None:
            try:
                from deepgram import DeepgramClient
            except ImportError as exc:
                raise RuntimeError(
                    "Deepgram SDK is required. Install with: pip install deepgram-sdk"
                ) from exc
            self._client = DeepgramClient(api_key=self._api_key)
        return self._client


# ---------------------------------------------------------------------------
# Response parsing
# ---------------------------------------------------------------------------


def parse_response(response) -> RecognitionResponse:
    """
    Extract transcript and confidence from a Deepgram response
    (results → channels → alternatives[0]).

    Accepts SDK response objects or plain dicts. Every channel's top
    alternative is a segment; segments are joined with a space.
    """
    results = _get_attr(response, "results", None)
    if results is None:
        logger.warning("Deepgram response has no 'results' field.")
        return RecognitionResponse(transcript="", confidence=0.0)

    channels = _get_attr(results, "channels", None) or []
    segments: list[tuple[str, float]] = []
    for channel in channels:
        alternatives = _get_attr(channel, "alternatives", None) or []
        if not alternatives:
            continue
        top = alternatives[0]
        transcript = _get_attr(top, "transcript", "") or ""
        confidence = _get_attr(top, "confidence", 0.0) or 0.0
        segments.append((transcript, float(confidence)))

    return join_segments(segments)


def _get_attr(obj, name: str, default):
    """Get an attribute from an SDK object or dict key, with a default."""
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)
