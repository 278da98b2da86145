"""
voxtranslate/errors.py
=======================
Error Taxonomy — voxtranslate

Responsibility:
    - Define every error kind the voice translation operation can surface
    - Carry enough context for the request handler to map an HTTP status

Only InvalidInputError, NoSpeechDetectedError, RecognitionFailedError,
InternalError and TranscriptionCancelledError are ever raised to the caller.
TranslationDegradedWarning is attached to a successful result, never raised.
"""


class VoiceTranslationError(Exception):
    """Base class for all failures of the voice translation operation."""


class InvalidInputError(VoiceTranslationError):
    """Raised when the audio or request parameters are unusable."""


class NoSpeechDetectedError(VoiceTranslationError):
    """Raised when no language candidate produced a usable transcript."""


class RecognitionFailedError(VoiceTranslationError):
    """Raised when recognition fails for an explicitly requested language."""

    def __init__(self, language: str, cause: BaseException | None = None):
        self.language = language
        self.cause = cause
        detail = f": {cause}" if cause is not None else "."
        super().__init__(f"Speech recognition failed for language {language}{detail}")


class InternalError(VoiceTranslationError):
    """Raised for unexpected failures that fit no other error kind."""


class TranscriptionCancelledError(VoiceTranslationError):
    """Raised when the caller aborted the request while probes were running."""


class TranslationDegradedWarning(UserWarning):
    """Translation failed; the untranslated transcript was returned instead."""

    def __init__(self, source_language: str, target_language: str, cause: BaseException):
        self.source_language = source_language
        self.target_language = target_language
        self.cause = cause
        super().__init__(
            f"Translation {source_language} -> {target_language} failed ({cause}); "
            "returning original transcript."
        )
