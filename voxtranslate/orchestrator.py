"""
voxtranslate/orchestrator.py
=============================
Voice Translation Orchestrator — voxtranslate

Responsibility:
    Convert an audio buffer plus an optional source-language hint into a
    transcript, a detected language and (conditionally) a translation:
        1. Validate the audio (size, encoding, duration)
        2. Transcribe
               explicit source language → one ENHANCED recognition call
               "auto"                   → tiered multi-candidate detection
        3. Strip the region subtag of the detected language
        4. Translate unless the detected language equals the target
        5. Return one structured result, or raise one specific error kind

Error kinds surfaced to the caller:
    InvalidInputError, NoSpeechDetectedError, RecognitionFailedError,
    TranscriptionCancelledError, InternalError (anything unexpected).
    Translation failures never surface; they degrade to the original text.

This module does NOT:
    - Speak HTTP (handled by voxtranslate.api.voice)
    - Persist results or cache anything between calls
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any

from voxtranslate.audio.validator import AudioInput, validate_audio
from voxtranslate.config import Settings
from voxtranslate.errors import (
    InternalError,
    InvalidInputError,
    NoSpeechDetectedError,
    RecognitionFailedError,
    TranscriptionCancelledError,
    VoiceTranslationError,
)
from voxtranslate.nlp.translator import TextTranslator, TranslationOutcome, translate_transcript
from voxtranslate.stt.language_detector import (
    DetectionPolicy,
    DetectionResult,
    LanguageDetector,
    quality_score,
)
from voxtranslate.stt.languages import (
    Tier,
    base_language,
    build_candidates,
    language_name,
    to_locale,
)
from voxtranslate.stt.recognizer import ModelQuality, SpeechRecognizer
from voxtranslate.timeouts import call_with_timeout

logger = logging.getLogger("voxtranslate.orchestrator")

AUTO_DETECT = "auto"


@dataclass(frozen=True)
class VoiceTranslationResult:
    """Complete outcome of one call: detection plus translation."""

    detection: DetectionResult
    translation: TranslationOutcome

    @property
    def transcription(self) -> str:
        return self.detection.transcript

    @property
    def was_translated(self) -> bool:
        return self.translation.was_translated

    @property
    def warnings(self) -> list[str]:
        warning = self.translation.warning
        return [str(warning)] if warning is not None else []

    def to_dict(self) -> dict[str, Any]:
        return {
            "transcription": self.detection.transcript,
            "translation": self.translation.translated_text,
            "detected_language": self.detection.detected_language_code,
            "target_language": self.translation.target_language_code,
            "translated_from": self.translation.source_language_code,
            "was_translated": self.translation.was_translated,
            "confidence": round(self.detection.confidence, 4),
            "warnings": self.warnings,
        }


def policy_from_settings(settings: Settings) -> DetectionPolicy:
    return DetectionPolicy(
        confidence_threshold=settings.confidence_threshold,
        min_quality_threshold=settings.min_quality_threshold,
        quality_length_saturation=settings.quality_length_saturation,
        secondary_max_kept=settings.secondary_max_kept,
        early_stop_metric=settings.early_stop_metric,
        probe_window=settings.probe_window,
        probe_timeout_seconds=settings.probe_timeout_seconds,
    )


class VoiceTranslationOrchestrator:
    """
    Stateless across calls apart from read-only configuration, so one
    instance can serve concurrent requests.
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        translator: TextTranslator,
        settings: Settings | None = None,
    ):
        self.settings = settings or Settings()
        self.recognizer = recognizer
        self.translator = translator
        self.detector = LanguageDetector(
            recognizer,
            primary=build_candidates(self.settings.primary_languages, Tier.PRIMARY),
            secondary=build_candidates(self.settings.secondary_languages, Tier.SECONDARY),
            policy=policy_from_settings(self.settings),
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def transcribe_and_translate(
        self,
        audio_bytes: bytes,
        target_language: str,
        source_language: str | None = AUTO_DETECT,
        filename: str | None = None,
        content_type: str | None = None,
        cancel_event: threading.Event | None = None,
    ) -> VoiceTranslationResult:
        """
        Transcribe ``audio_bytes`` and translate into ``target_language``.

        Args:
            audio_bytes:     Raw uploaded audio.
            target_language: Requested output language (e.g. "en").
            source_language: Language code, or "auto" / None to auto-detect.
            filename:        Optional upload name, used as an encoding hint.
            content_type:    Optional MIME type, used as an encoding hint.
            cancel_event:    Set by the caller to abort in-flight probes.

        Raises:
            InvalidInputError, NoSpeechDetectedError, RecognitionFailedError,
            TranscriptionCancelledError, InternalError.
        """
        try:
            return self._run(
                audio_bytes, target_language, source_language,
                filename, content_type, cancel_event,
            )
        except VoiceTranslationError:
            raise
        except Exception as exc:
            logger.error("Voice translation failed unexpectedly: %s", exc, exc_info=True)
            raise InternalError(f"Processing failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _run(
        self,
        audio_bytes: bytes,
        target_language: str,
        source_language: str | None,
        filename: str | None,
        content_type: str | None,
        cancel_event: threading.Event | None,
    ) -> VoiceTranslationResult:
        target = (target_language or "").strip()
        if not target:
            raise InvalidInputError("Target language is required.")

        hint = (source_language or "").strip()
        auto = not hint or hint.lower() == AUTO_DETECT

        audio = validate_audio(
            audio_bytes,
            filename=filename,
            content_type=content_type,
            min_bytes=self.settings.min_audio_bytes,
            max_bytes=self.settings.max_audio_bytes,
            max_duration_seconds=self.settings.max_audio_seconds,
            probe_duration=self.settings.probe_audio_duration,
        )

        logger.info(
            "Processing %d bytes: target=%s, source=%s",
            audio.size_bytes, target, AUTO_DETECT if auto else hint,
        )

        if auto:
            detection = self.detector.detect(audio, cancel_event)
            source_base = base_language(detection.detected_language_code)
        else:
            detection = self._transcribe_explicit(audio, hint, cancel_event)
            source_base = base_language(hint)

        logger.info(
            'Transcription (%s, confidence %.3f): "%s"',
            detection.detected_language_code, detection.confidence, detection.transcript,
        )

        translation = translate_transcript(
            detection.transcript,
            source_base,
            target,
            self.translator,
            timeout_seconds=self.settings.translate_timeout_seconds,
            cancel_event=cancel_event,
        )
        return VoiceTranslationResult(detection=detection, translation=translation)

    def _transcribe_explicit(
        self,
        audio: AudioInput,
        hint: str,
        cancel_event: threading.Event | None,
    ) -> DetectionResult:
        """
        One ENHANCED recognition call in the user's chosen language.

        No fallback to other languages: the user made an explicit choice.
        """
        locale = to_locale(hint)
        logger.info("Using specified base language: %s (%s)", hint, locale)

        try:
            response = call_with_timeout(
                self.recognizer.recognize,
                audio.data,
                audio.encoding,
                audio.sample_rate,
                locale,
                ModelQuality.ENHANCED,
                timeout=self.settings.probe_timeout_seconds,
                cancel_event=cancel_event,
            )
        except TranscriptionCancelledError:
            raise
        except Exception as exc:
            logger.error("Error with specified language %s: %s", locale, exc)
            raise RecognitionFailedError(hint, exc) from exc

        transcript = (response.transcript or "").strip()
        if not transcript:
            logger.warning("No transcription found for %s.", locale)
            raise NoSpeechDetectedError(
                "No speech could be transcribed from the audio. "
                "Please speak more clearly or check your microphone."
            )

        return DetectionResult(
            transcript=transcript,
            detected_language_code=locale,
            confidence=response.confidence,
            quality_score=quality_score(
                transcript, response.confidence, self.settings.quality_length_saturation
            ),
            language_name=language_name(locale),
            probes_issued=1,
        )
