"""
voxtranslate/nlp/translator.py
===============================
Translator — voxtranslate

Responsibility:
    - Decide whether a transcript needs translating (detected base language
      vs. requested target language)
    - Call the configured Text Translator when it does
    - Degrade gracefully: a failed or timed-out translation returns the
      original transcript, flagged with TranslationDegradedWarning

Backends:
    - OpenAITranslator  — chat completion, retried on transient errors
    - SarvamTranslator  — Sarvam Translate API (Indian languages + English)

This module does NOT:
    - Perform STT or language detection
    - Raise on translation failure (the transcription already succeeded)
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import requests

from voxtranslate.errors import TranscriptionCancelledError, TranslationDegradedWarning
from voxtranslate.retry import call_with_retry
from voxtranslate.stt.languages import base_language, language_name
from voxtranslate.timeouts import call_with_timeout

logger = logging.getLogger("voxtranslate.nlp.translator")

# Floor for a per-attempt backend timeout near the deadline (seconds).
MIN_ATTEMPT_TIMEOUT: float = 1.0


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class TextTranslator(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        deadline: float | None = None,
    ) -> str:
        """
        ``deadline`` is a ``time.monotonic()`` value after which no backend
        call may be started (retries included).

        Raises:
            Exception: On any backend failure; callers degrade gracefully.
        """


@dataclass(frozen=True)
class TranslationOutcome:
    translated_text: str
    source_language_code: str
    target_language_code: str
    was_translated: bool
    warning: TranslationDegradedWarning | None = None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def translate_transcript(
    transcript: str,
    source_language: str,
    target_language: str,
    translator: TextTranslator,
    timeout_seconds: float = 15.0,
    cancel_event: threading.Event | None = None,
) -> TranslationOutcome:
    """
    Translate ``transcript`` unless it is already in the target language.

    Args:
        transcript:      Winning transcript.
        source_language: Detected base language (e.g. "hi").
        target_language: Requested target language (e.g. "en").
        translator:      Backend to call when translation is needed.

    Returns:
        TranslationOutcome. When the languages match, the translated text is
        the transcript itself and the translator is never called.
    """
    if source_language.strip().lower() == target_language.strip().lower():
        logger.info("Source language %s equals target — skipping translation.", source_language)
        return TranslationOutcome(
            translated_text=transcript,
            source_language_code=source_language,
            target_language_code=target_language,
            was_translated=False,
        )

    logger.info(
        "Translating from %s to %s with %s (%d chars).",
        source_language, target_language, translator.name, len(transcript),
    )
    # Fixed before the wait starts, so no retry can begin after we return.
    deadline = time.monotonic() + timeout_seconds
    try:
        translated = call_with_timeout(
            translator.translate,
            transcript,
            source_language,
            target_language,
            deadline=deadline,
            timeout=timeout_seconds,
            cancel_event=cancel_event,
        )
        if not translated or not translated.strip():
            raise RuntimeError("translator returned empty text")
    except TranscriptionCancelledError:
        raise
    except Exception as exc:
        warning = TranslationDegradedWarning(source_language, target_language, exc)
        logger.warning("%s", warning)
        return TranslationOutcome(
            translated_text=transcript,
            source_language_code=source_language,
            target_language_code=target_language,
            was_translated=False,
            warning=warning,
        )

    logger.info("Translation complete: %d chars.", len(translated))
    return TranslationOutcome(
        translated_text=translated.strip(),
        source_language_code=source_language,
        target_language_code=target_language,
        was_translated=True,
    )


# ---------------------------------------------------------------------------
# Translation engine (OpenAI)
# ---------------------------------------------------------------------------


class OpenAITranslator(TextTranslator):
    """Translate with an OpenAI chat model."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        max_retries: int = 2,
        timeout_seconds: float = 15.0,
        client=None,
    ):
        if not api_key and client is None:
            raise RuntimeError("OPENAI_API_KEY environment variable is not set.")
        self._api_key = api_key
        self._model = model
        self._max_retries = max_retries
        self._timeout_seconds = timeout_seconds
        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        deadline: float | None = None,
    ) -> str:
        prompt = (
            f"Translate the following text from {language_name(source_language)} "
            f"({source_language}) to {language_name(target_language)} ({target_language}). "
            "Preserve the meaning exactly — do not add, remove, or interpret anything. "
            "Return ONLY the translation:\n\n"
            f"{text}"
        )
        response = call_with_retry(
            self._create,
            max_retries=self._max_retries,
            description="OpenAI translation",
            deadline=deadline,
            messages=[{"role": "user", "content": prompt}],
            call_deadline=deadline,
        )
        content = response.choices[0].message.content
        return (content or "").strip()

    def _create(self, messages: list[dict], call_deadline: float | None = None):
        return self._get_client().chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=0.0,
            max_tokens=2048,
            timeout=attempt_timeout(self._timeout_seconds, call_deadline),
        )

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=self._api_key)
        return self._client


# ---------------------------------------------------------------------------
# Translation engine (Sarvam)
# ---------------------------------------------------------------------------

SARVAM_TRANSLATE_ENDPOINT = "https://api.sarvam.ai/translate"
SARVAM_TRANSLATE_MODEL = "mayura:v1"

# ISO 639-1 → Sarvam BCP 47 codes (languages the Translate API supports)
_SARVAM_CODES: dict[str, str] = {
    "en": "en-IN",
    "hi": "hi-IN",
    "bn": "bn-IN",
    "gu": "gu-IN",
    "kn": "kn-IN",
    "ml": "ml-IN",
    "mr": "mr-IN",
    "or": "od-IN",  # Sarvam uses "od-IN" for Odia
    "pa": "pa-IN",
    "ta": "ta-IN",
    "te": "te-IN",
}


class SarvamTranslator(TextTranslator):
    """Translate with the Sarvam Translate API."""

    def __init__(
        self,
        api_key: str,
        max_retries: int = 2,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise RuntimeError("SARVAM_API_KEY environment variable is not set.")
        self._api_key = api_key
        self._max_retries = max_retries
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @property
    def name(self) -> str:
        return "sarvam"

    def translate(
        self,
        text: str,
        source_language: str,
        target_language: str,
        deadline: float | None = None,
    ) -> str:
        source = sarvam_code(source_language)
        target = sarvam_code(target_language)

        payload = {
            "input": text,
            "source_language_code": source,
            "target_language_code": target,
            "model": SARVAM_TRANSLATE_MODEL,
            "enable_preprocessing": True,
        }
        headers = {
            "api-subscription-key": self._api_key,
            "Content-Type": "application/json",
        }

        resp = call_with_retry(
            self._post,
            max_retries=self._max_retries,
            description="Sarvam translation",
            deadline=deadline,
            headers=headers,
            payload=payload,
            call_deadline=deadline,
        )
        body = resp.json()
        translated = body.get("translated_text")
        if not translated:
            raise RuntimeError("Sarvam response has no 'translated_text'.")
        return translated

    def _post(
        self,
        headers: dict,
        payload: dict,
        call_deadline: float | None = None,
    ) -> requests.Response:
        resp = self._session.post(
            SARVAM_TRANSLATE_ENDPOINT,
            headers=headers,
            json=payload,
            timeout=attempt_timeout(self._timeout_seconds, call_deadline),
        )
        resp.raise_for_status()
        return resp


def attempt_timeout(timeout_seconds: float, deadline: float | None) -> float:
    """Per-attempt backend timeout, shortened to what is left before ``deadline``."""
    if deadline is None:
        return timeout_seconds
    remaining = deadline - time.monotonic()
    return max(MIN_ATTEMPT_TIMEOUT, min(timeout_seconds, remaining))


def sarvam_code(language_code: str) -> str:
    """
    Raises:
        ValueError: If Sarvam Translate does not support the language.
    """
    base = base_language(language_code)
    try:
        return _SARVAM_CODES[base]
    except KeyError:
        raise ValueError(f"Sarvam Translate does not support language '{language_code}'.") from None
