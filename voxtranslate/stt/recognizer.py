"""
voxtranslate/stt/recognizer.py
===============================
Speech Recognizer Contract — voxtranslate

Responsibility:
    - Define the capability every STT backend must provide:
          audio + language hint → transcript + confidence
    - Define the model-quality knob (fast probing vs. enhanced transcription)

Backends (deepgram_client, whisper_client) implement SpeechRecognizer.
The language detector and the orchestrator only depend on this contract,
so tests can inject a fake recognizer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class ModelQuality(str, Enum):
    """FAST is used for auto-detect probes, ENHANCED for explicit languages."""

    FAST = "fast"
    ENHANCED = "enhanced"


@dataclass(frozen=True)
class RecognitionResponse:
    transcript: str
    confidence: float  # 0.0–1.0


class SpeechRecognizer(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def recognize(
        self,
        audio_bytes: bytes,
        encoding: str,
        sample_rate: int | None,
        language_code: str,
        model_quality: ModelQuality,
    ) -> RecognitionResponse:
        """
        Transcribe audio assuming it is spoken in ``language_code``.

        Raises:
            RuntimeError: On unsupported language/encoding or transient failure.
        """


def join_segments(segments: list[tuple[str, float]]) -> RecognitionResponse:
    """
    Collapse per-segment (transcript, confidence) pairs into one response.

    Non-empty segment texts are joined with a space; the confidence is the
    first non-empty segment's.
    """
    texts = [text.strip() for text, _ in segments if text and text.strip()]
    if not texts:
        return RecognitionResponse(transcript="", confidence=0.0)
    first_confidence = next(conf for text, conf in segments if text and text.strip())
    return RecognitionResponse(
        transcript=" ".join(texts),
        confidence=_clamp(first_confidence),
    )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value or 0.0)))
