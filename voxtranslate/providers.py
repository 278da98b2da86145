"""
voxtranslate/providers.py
==========================
Provider Factory — voxtranslate

Builds the configured Speech Recognizer and Text Translator from Settings
(provider choice and API keys), and wires them into an orchestrator.
"""

import logging
from functools import lru_cache

from voxtranslate.config import Settings, load_settings
from voxtranslate.nlp.translator import OpenAITranslator, SarvamTranslator, TextTranslator
from voxtranslate.orchestrator import (
    AUTO_DETECT,
    VoiceTranslationOrchestrator,
    VoiceTranslationResult,
)
from voxtranslate.stt.deepgram_client import DeepgramRecognizer
from voxtranslate.stt.recognizer import SpeechRecognizer
from voxtranslate.stt.whisper_client import WhisperRecognizer

logger = logging.getLogger("voxtranslate.providers")


def build_recognizer(settings: Settings) -> SpeechRecognizer:
    """
    Raises:
        RuntimeError: If the provider's API key is not set.
    """
    if settings.stt_provider == "whisper":
        recognizer: SpeechRecognizer = WhisperRecognizer(
            api_key=settings.openai_api_key,
            model=settings.whisper_model,
            timeout_seconds=settings.probe_timeout_seconds,
        )
    else:
        recognizer = DeepgramRecognizer(
            api_key=settings.deepgram_api_key,
            fast_model=settings.deepgram_fast_model,
            enhanced_model=settings.deepgram_enhanced_model,
            timeout_seconds=settings.probe_timeout_seconds,
        )
    logger.info("STT provider selected: %s", recognizer.name)
    return recognizer


def build_translator(settings: Settings) -> TextTranslator:
    """
    Raises:
        RuntimeError: If the provider's API key is not set.
    """
    if settings.translator_provider == "sarvam":
        translator: TextTranslator = SarvamTranslator(
            api_key=settings.sarvam_api_key,
            max_retries=settings.translate_max_retries,
            timeout_seconds=settings.translate_timeout_seconds,
        )
    else:
        translator = OpenAITranslator(
            api_key=settings.openai_api_key,
            model=settings.openai_translation_model,
            max_retries=settings.translate_max_retries,
            timeout_seconds=settings.translate_timeout_seconds,
        )
    logger.info("Translation provider selected: %s", translator.name)
    return translator


def build_orchestrator(settings: Settings) -> VoiceTranslationOrchestrator:
    return VoiceTranslationOrchestrator(
        recognizer=build_recognizer(settings),
        translator=build_translator(settings),
        settings=settings,
    )


# ---------------------------------------------------------------------------
# Module-level entry point
# ---------------------------------------------------------------------------


@lru_cache
def default_orchestrator() -> VoiceTranslationOrchestrator:
    """Orchestrator built from the environment, created on first use."""
    return build_orchestrator(load_settings())


def transcribe_and_translate(
    audio_bytes: bytes,
    target_language: str,
    source_language: str | None = AUTO_DETECT,
    **kwargs,
) -> VoiceTranslationResult:
    """
    Transcribe and translate with the environment-configured providers.

    See VoiceTranslationOrchestrator.transcribe_and_translate for arguments
    and error kinds.
    """
    return default_orchestrator().transcribe_and_translate(
        audio_bytes, target_language, source_language, **kwargs
    )
