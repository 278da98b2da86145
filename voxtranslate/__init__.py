# voxtranslate/__init__.py
# =========================
# voxtranslate — speech transcription with automatic language detection
# and translation.
#
# Public API:
#   transcribe_and_translate(audio_bytes, target_language, source_language="auto")
#       → VoiceTranslationResult
#
# Error kinds: see voxtranslate.errors

from voxtranslate.errors import (  # noqa: F401
    InternalError,
    InvalidInputError,
    NoSpeechDetectedError,
    RecognitionFailedError,
    TranscriptionCancelledError,
    TranslationDegradedWarning,
)
from voxtranslate.orchestrator import (  # noqa: F401
    VoiceTranslationOrchestrator,
    VoiceTranslationResult,
)
from voxtranslate.providers import transcribe_and_translate  # noqa: F401

__all__ = [
    "transcribe_and_translate",
    "VoiceTranslationOrchestrator",
    "VoiceTranslationResult",
    "InvalidInputError",
    "NoSpeechDetectedError",
    "RecognitionFailedError",
    "TranscriptionCancelledError",
    "TranslationDegradedWarning",
    "InternalError",
]
