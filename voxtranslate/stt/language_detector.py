"""
voxtranslate/stt/language_detector.py
======================================
Language Detection — voxtranslate

Responsibility:
    - Determine the spoken language of a clip by probing the recognizer with
      one language hypothesis at a time, in priority order
    - Score each probe: quality = confidence × min(1, len(transcript) / L)
    - Stop early on a strong match, fall back to the secondary tier only when
      the primary tier kept nothing, and cap the secondary search
    - Select the kept attempt with the highest quality score

Probing rules:
    - Primary pass, FAST model. An attempt is kept when its quality is above
      the minimum quality threshold. A kept attempt whose early-stop metric
      (quality by default, raw confidence in legacy mode) is above the
      confidence threshold ends the whole search.
    - Secondary pass only if the primary pass kept zero attempts. Same rules,
      and the search also ends once ``secondary_max_kept`` attempts are kept.
    - A probe that raises or times out is logged and skipped.
    - With ``probe_window`` > 1, candidates are probed concurrently in windows
      but consumed strictly in priority order; whatever is still in flight when
      the search ends is cancelled and discarded.

This module does NOT:
    - Translate text
    - Handle explicit (user-chosen) source languages
    - Validate audio
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from voxtranslate.audio.validator import AudioInput
from voxtranslate.errors import NoSpeechDetectedError, TranscriptionCancelledError
from voxtranslate.stt.languages import LanguageCandidate
from voxtranslate.stt.recognizer import ModelQuality, SpeechRecognizer
from voxtranslate.timeouts import wait_for

logger = logging.getLogger("voxtranslate.stt.language_detector")


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DetectionPolicy:
    """Thresholds and limits that bound the search."""

    confidence_threshold: float = 0.8
    min_quality_threshold: float = 0.3
    quality_length_saturation: int = 10
    secondary_max_kept: int = 3
    early_stop_metric: str = "quality"  # "quality" | "confidence"
    probe_window: int = 1
    probe_timeout_seconds: float = 15.0


@dataclass(frozen=True)
class RecognitionAttempt:
    """Outcome of probing one candidate."""

    candidate: LanguageCandidate
    transcript: str
    confidence: float
    quality_score: float


@dataclass
class _Search:
    """Per-call search state; detectors are shared across requests."""

    executor: ThreadPoolExecutor
    audio: AudioInput
    cancel_event: threading.Event | None
    probes_issued: int = 0


@dataclass(frozen=True)
class DetectionResult:
    """The winning attempt of an auto-detect search."""

    transcript: str
    detected_language_code: str  # locale, e.g. "en-US"
    confidence: float
    quality_score: float
    language_name: str
    probes_issued: int


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


def quality_score(transcript: str, confidence: float, length_saturation: int = 10) -> float:
    """
    Confidence scaled by a saturating function of transcript length.

    Discounts confident-but-degenerate (very short) transcripts.
    """
    length = len(transcript.strip())
    return confidence * min(1.0, length / length_saturation)


def select_best(attempts: list[RecognitionAttempt]) -> RecognitionAttempt | None:
    """Highest quality wins; ties keep priority order (stable sort)."""
    if not attempts:
        return None
    return sorted(attempts, key=lambda a: a.quality_score, reverse=True)[0]


# ---------------------------------------------------------------------------
# Detector
# ---------------------------------------------------------------------------


class LanguageDetector:
    """Multi-candidate language detection over an injected recognizer."""

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        primary: list[LanguageCandidate],
        secondary: list[LanguageCandidate],
        policy: DetectionPolicy | None = None,
    ):
        self.recognizer = recognizer
        self.primary = list(primary)
        self.secondary = list(secondary)
        self.policy = policy or DetectionPolicy()

    def detect(
        self,
        audio: AudioInput,
        cancel_event: threading.Event | None = None,
    ) -> DetectionResult:
        """
        Run the tiered search and return the winning attempt.

        Raises:
            NoSpeechDetectedError:       If no candidate in any applicable tier
                                         produced a kept attempt.
            TranscriptionCancelledError: If ``cancel_event`` is set mid-search.
        """
        # Only probe_window probes are submitted at a time; the spare workers
        # keep a timed-out probe's thread from delaying the next candidate.
        executor = ThreadPoolExecutor(
            max_workers=max(self.policy.probe_window, len(self.primary) + len(self.secondary)),
            thread_name_prefix="voxtranslate-probe",
        )
        search = _Search(executor=executor, audio=audio, cancel_event=cancel_event)
        try:
            logger.info("Auto-detecting language: trying %d primary languages...", len(self.primary))
            kept, stopped = self._search_tier(search, self.primary, None)

            if not kept and not stopped and self.secondary:
                logger.info(
                    "No usable primary matches, trying %d secondary languages...",
                    len(self.secondary),
                )
                kept, _ = self._search_tier(search, self.secondary, self.policy.secondary_max_kept)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        best = select_best(kept)
        if best is None:
            logger.warning(
                "No valid transcription found in any language (%d probes).",
                search.probes_issued,
            )
            raise NoSpeechDetectedError(
                "No speech could be transcribed from the audio. "
                "Please speak more clearly or check your microphone."
            )

        _log_ranking(kept)
        return DetectionResult(
            transcript=best.transcript,
            detected_language_code=best.candidate.code,
            confidence=best.confidence,
            quality_score=best.quality_score,
            language_name=best.candidate.display_name,
            probes_issued=search.probes_issued,
        )

    # ------------------------------------------------------------------
    # Tier search
    # ------------------------------------------------------------------

    def _search_tier(
        self,
        search: _Search,
        candidates: list[LanguageCandidate],
        max_kept: int | None,
    ) -> tuple[list[RecognitionAttempt], bool]:
        """
        Probe one tier. Returns (kept attempts, early_terminated).
        """
        kept: list[RecognitionAttempt] = []
        window = self.policy.probe_window

        for start in range(0, len(candidates), window):
            if search.cancel_event is not None and search.cancel_event.is_set():
                raise TranscriptionCancelledError("Request cancelled by caller.")

            batch = candidates[start:start + window]
            in_flight: list[tuple[LanguageCandidate, Future]] = []
            for cand in batch:
                logger.info("Trying %s (%s)", cand.display_name, cand.code)
                in_flight.append((cand, search.executor.submit(self._recognize, search.audio, cand)))
            # Counted at submission; discarded probes still reach the backend.
            search.probes_issued += len(in_flight)
            try:
                for cand, future in in_flight:
                    attempt = self._collect(search, cand, future)
                    if attempt is None:
                        continue

                    kept.append(attempt)

                    if self._is_strong(attempt):
                        logger.info(
                            "High confidence found for %s (confidence %.3f, quality %.3f), "
                            "stopping search.",
                            cand.display_name, attempt.confidence, attempt.quality_score,
                        )
                        return kept, True

                    if max_kept is not None and len(kept) >= max_kept:
                        logger.info(
                            "Kept %d %s-tier attempts, stopping search.",
                            len(kept), cand.tier.value,
                        )
                        return kept, False
            finally:
                # Anything still pending belongs to a lower-priority candidate.
                for _, future in in_flight:
                    future.cancel()

        return kept, False

    def _recognize(self, audio: AudioInput, candidate: LanguageCandidate):
        return self.recognizer.recognize(
            audio.data,
            audio.encoding,
            audio.sample_rate,
            candidate.code,
            ModelQuality.FAST,
        )

    def _collect(
        self,
        search: _Search,
        candidate: LanguageCandidate,
        future: Future,
    ) -> RecognitionAttempt | None:
        """Wait for one probe and turn it into a kept attempt, or None."""
        try:
            response = wait_for(future, self.policy.probe_timeout_seconds, search.cancel_event)
        except TranscriptionCancelledError:
            raise
        except TimeoutError:
            logger.warning(
                "Probe for %s timed out after %.1fs — skipping.",
                candidate.display_name, self.policy.probe_timeout_seconds,
            )
            return None
        except Exception as exc:
            logger.warning("Error with %s: %s — skipping.", candidate.display_name, exc)
            return None

        transcript = (response.transcript or "").strip()
        if not transcript:
            logger.info("%s: empty transcript.", candidate.display_name)
            return None

        score = quality_score(transcript, response.confidence, self.policy.quality_length_saturation)
        logger.info(
            '%s: "%s" (confidence: %.3f, quality: %.3f)',
            candidate.display_name, transcript, response.confidence, score,
        )
        if score <= self.policy.min_quality_threshold:
            logger.info(
                "%s discarded: quality %.3f not above %.2f.",
                candidate.display_name, score, self.policy.min_quality_threshold,
            )
            return None

        return RecognitionAttempt(
            candidate=candidate,
            transcript=transcript,
            confidence=response.confidence,
            quality_score=score,
        )

    def _is_strong(self, attempt: RecognitionAttempt) -> bool:
        if self.policy.early_stop_metric == "confidence":
            return attempt.confidence > self.policy.confidence_threshold
        return attempt.quality_score > self.policy.confidence_threshold


def _log_ranking(kept: list[RecognitionAttempt]) -> None:
    ranked = sorted(kept, key=lambda a: a.quality_score, reverse=True)
    best = ranked[0]
    logger.info(
        "Best detection: %s with quality score %.3f",
        best.candidate.display_name, best.quality_score,
    )
    for idx, attempt in enumerate(ranked[:3], start=1):
        logger.debug(
            '%d. %s: "%s" (quality: %.3f)',
            idx, attempt.candidate.display_name, attempt.transcript, attempt.quality_score,
        )
