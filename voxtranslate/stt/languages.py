"""
voxtranslate/stt/languages.py
==============================
Language Candidates — voxtranslate

Responsibility:
    - Define the ordered primary / secondary candidate tiers probed during
      auto-detection (ordering encodes the prior over likely source languages)
    - Map short language codes to recognizer locales ("en" → "en-US")
    - Strip region subtags for translation comparison ("en-US" → "en")

This module does NOT:
    - Call any recognizer or translator
    - Hold per-request state
"""

from dataclasses import dataclass
from enum import Enum


class Tier(str, Enum):
    """Priority group controlling probing order and search depth."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class LanguageCandidate:
    """One language/locale hypothesis probed against the recognizer."""

    code: str          # BCP-47-like locale, e.g. "en-US"
    display_name: str  # e.g. "English"
    tier: Tier


# ---------------------------------------------------------------------------
# Default tiers (most common languages for the user base first)
# ---------------------------------------------------------------------------

DEFAULT_PRIMARY_CODES: tuple[str, ...] = (
    "en-US",
    "hi-IN",
    "es-ES",
    "fr-FR",
    "pa-IN",
)

DEFAULT_SECONDARY_CODES: tuple[str, ...] = (
    "de-DE",
    "gu-IN",
    "bn-IN",
    "ta-IN",
    "te-IN",
    "ml-IN",
    "mr-IN",
    "it-IT",
    "pt-BR",
    "ru-RU",
    "ja-JP",
    "ko-KR",
    "zh-CN",
    "ar-SA",
)


# ---------------------------------------------------------------------------
# Short code → recognizer locale (explicit source-language mode)
# ---------------------------------------------------------------------------

_LOCALE_MAP: dict[str, str] = {
    "en": "en-US",
    "hi": "hi-IN",
    "pa": "pa-IN",
    "mr": "mr-IN",
    "fr": "fr-FR",
    "es": "es-ES",
    "ta": "ta-IN",
    "gu": "gu-IN",
    "bn": "bn-IN",
    "te": "te-IN",
    "ml": "ml-IN",
    "kn": "kn-IN",
    "or": "or-IN",
    "de": "de-DE",
    "it": "it-IT",
    "pt": "pt-BR",
    "ru": "ru-RU",
    "ja": "ja-JP",
    "ko": "ko-KR",
    "zh": "zh-CN",
    "ar": "ar-SA",
    "th": "th-TH",
    "vi": "vi-VN",
    "id": "id-ID",
    "ms": "ms-MY",
    "tl": "tl-PH",
    "sw": "sw-KE",
    "tr": "tr-TR",
    "nl": "nl-NL",
    "sv": "sv-SE",
    "no": "no-NO",
    "da": "da-DK",
    "fi": "fi-FI",
}

_LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "hi": "Hindi",
    "pa": "Punjabi",
    "mr": "Marathi",
    "fr": "French",
    "es": "Spanish",
    "ta": "Tamil",
    "gu": "Gujarati",
    "bn": "Bengali",
    "te": "Telugu",
    "ml": "Malayalam",
    "kn": "Kannada",
    "or": "Odia",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "th": "Thai",
    "vi": "Vietnamese",
    "id": "Indonesian",
    "ms": "Malay",
    "tl": "Filipino",
    "sw": "Swahili",
    "tr": "Turkish",
    "nl": "Dutch",
    "sv": "Swedish",
    "no": "Norwegian",
    "da": "Danish",
    "fi": "Finnish",
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def to_locale(language_code: str) -> str:
    """
    Map a short language code to a recognizer locale.

    Codes that already carry a region are returned as-is. Unmapped codes
    fall back to "<code>-US".
    """
    code = language_code.strip()
    if "-" in code:
        return code
    code = code.lower()
    return _LOCALE_MAP.get(code, f"{code}-US")


def base_language(language_code: str) -> str:
    """Strip any region subtag: "en-US" → "en"."""
    return language_code.strip().split("-")[0].lower()


def language_name(language_code: str) -> str:
    base = base_language(language_code)
    return _LANGUAGE_NAMES.get(base, base.title())


def build_candidates(codes: tuple[str, ...] | list[str], tier: Tier) -> list[LanguageCandidate]:
    """Turn an ordered list of locales into LanguageCandidate objects."""
    return [
        LanguageCandidate(code=code, display_name=language_name(code), tier=tier)
        for code in codes
    ]


PRIMARY_CANDIDATES: list[LanguageCandidate] = build_candidates(DEFAULT_PRIMARY_CODES, Tier.PRIMARY)
SECONDARY_CANDIDATES: list[LanguageCandidate] = build_candidates(
    DEFAULT_SECONDARY_CODES, Tier.SECONDARY
)
