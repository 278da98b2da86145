"""
tests/test_translator.py
=========================
Translation Tests — gating, graceful degradation and backends

Test categories:
    1. translate_transcript gating and fallback
    2. OpenAITranslator (mocked client)
    3. SarvamTranslator (mocked HTTP session)

All tests are OFFLINE.
"""

import os
import sys
import time
import unittest
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from fakes import FakeTranslator

from voxtranslate.errors import TranslationDegradedWarning
from voxtranslate.nlp.translator import (
    MIN_ATTEMPT_TIMEOUT,
    SARVAM_TRANSLATE_ENDPOINT,
    OpenAITranslator,
    SarvamTranslator,
    attempt_timeout,
    sarvam_code,
    translate_transcript,
)


# ===================================================================
# 1. Gating & fallback
# ===================================================================


class TestTranslateTranscript(unittest.TestCase):

    def test_same_language_skips_translator(self):
        translator = FakeTranslator()
        outcome = translate_transcript("hello", "en", "EN", translator)

        self.assertFalse(outcome.was_translated)
        self.assertEqual(outcome.translated_text, "hello")
        self.assertIsNone(outcome.warning)
        self.assertEqual(translator.calls, [])

    def test_different_language_is_translated(self):
        translator = FakeTranslator()
        outcome = translate_transcript("namaste", "hi", "en", translator)

        self.assertTrue(outcome.was_translated)
        self.assertEqual(outcome.translated_text, "[en] namaste")
        self.assertEqual(outcome.source_language_code, "hi")
        self.assertEqual(outcome.target_language_code, "en")

    def test_failure_falls_back_with_warning(self):
        translator = FakeTranslator(error=ConnectionError("unreachable"))
        outcome = translate_transcript("namaste", "hi", "en", translator)

        self.assertFalse(outcome.was_translated)
        self.assertEqual(outcome.translated_text, "namaste")
        self.assertIsInstance(outcome.warning, TranslationDegradedWarning)
        self.assertEqual(outcome.warning.source_language, "hi")
        self.assertIsInstance(outcome.warning.cause, ConnectionError)

    def test_empty_translation_is_a_failure(self):
        translator = MagicMock()
        translator.name = "mock"
        translator.translate.return_value = "   "
        outcome = translate_transcript("namaste", "hi", "en", translator)

        self.assertFalse(outcome.was_translated)
        self.assertEqual(outcome.translated_text, "namaste")
        self.assertIsNotNone(outcome.warning)

    def test_timeout_falls_back(self):
        translator = FakeTranslator(delay=0.5)
        outcome = translate_transcript("namaste", "hi", "en", translator, timeout_seconds=0.05)

        self.assertFalse(outcome.was_translated)
        self.assertIsNotNone(outcome.warning)


# ===================================================================
# 2. OpenAI backend
# ===================================================================


def _chat_response(content):
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


class RateLimitError(Exception):
    """Named like the OpenAI SDK error so the retry layer treats it as transient."""


class TestOpenAITranslator(unittest.TestCase):

    def test_requires_api_key(self):
        with self.assertRaises(RuntimeError):
            OpenAITranslator(api_key="")

    def test_translate_calls_chat_completion(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response("  Hello world \n")
        translator = OpenAITranslator(api_key="", client=client, model="gpt-test")

        result = translator.translate("नमस्ते दुनिया", "hi", "en")

        self.assertEqual(result, "Hello world")
        kwargs = client.chat.completions.create.call_args.kwargs
        self.assertEqual(kwargs["model"], "gpt-test")
        self.assertEqual(kwargs["temperature"], 0.0)
        prompt = kwargs["messages"][0]["content"]
        self.assertIn("Hindi", prompt)
        self.assertIn("English", prompt)
        self.assertIn("नमस्ते दुनिया", prompt)

    @patch("voxtranslate.retry.BASE_DELAY", 0.0)
    def test_transient_error_is_retried(self):
        client = MagicMock()
        client.chat.completions.create.side_effect = [
            RateLimitError("slow down"),
            _chat_response("Bonjour"),
        ]
        translator = OpenAITranslator(api_key="", client=client)

        self.assertEqual(translator.translate("Hello", "en", "fr"), "Bonjour")
        self.assertEqual(client.chat.completions.create.call_count, 2)


class TestRetriesStopAtDeadline(unittest.TestCase):

    def _always_rate_limited(self, max_retries):
        client = MagicMock()
        client.chat.completions.create.side_effect = RateLimitError("slow down")
        translator = OpenAITranslator(api_key="", client=client, max_retries=max_retries)
        return translator, client.chat.completions.create

    def test_no_backend_call_after_fallback_returns(self):
        translator, create = self._always_rate_limited(max_retries=2)

        outcome = translate_transcript("Hello", "en", "fr", translator, timeout_seconds=0.2)
        calls_at_return = create.call_count
        time.sleep(0.8)

        self.assertFalse(outcome.was_translated)
        self.assertEqual(calls_at_return, 1)
        self.assertEqual(create.call_count, calls_at_return)

    @patch("voxtranslate.retry.BASE_DELAY", 0.05)
    def test_retries_within_budget_only(self):
        translator, create = self._always_rate_limited(max_retries=10)

        started = time.monotonic()
        outcome = translate_transcript("Hello", "en", "fr", translator, timeout_seconds=0.3)
        elapsed = time.monotonic() - started
        calls_at_return = create.call_count
        time.sleep(0.6)

        self.assertFalse(outcome.was_translated)
        self.assertGreater(calls_at_return, 1)
        self.assertLess(elapsed, 0.3)
        self.assertEqual(create.call_count, calls_at_return)

    def test_attempt_timeout_shrinks_to_deadline(self):
        client = MagicMock()
        client.chat.completions.create.return_value = _chat_response("Bonjour")
        translator = OpenAITranslator(api_key="", client=client, timeout_seconds=15.0)

        translator.translate("Hello", "en", "fr", deadline=time.monotonic() + 5.0)
        timeout = client.chat.completions.create.call_args.kwargs["timeout"]
        self.assertLessEqual(timeout, 5.0)
        self.assertGreaterEqual(timeout, MIN_ATTEMPT_TIMEOUT)

    def test_attempt_timeout_without_deadline(self):
        self.assertEqual(attempt_timeout(15.0, None), 15.0)
        self.assertEqual(attempt_timeout(15.0, time.monotonic() - 1.0), MIN_ATTEMPT_TIMEOUT)


# ===================================================================
# 3. Sarvam backend
# ===================================================================


def _http_response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body or {}
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status}", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


class TestSarvamTranslator(unittest.TestCase):

    def test_requires_api_key(self):
        with self.assertRaises(RuntimeError):
            SarvamTranslator(api_key="")

    def test_translate_posts_payload(self):
        session = MagicMock()
        session.post.return_value = _http_response(body={"translated_text": "Hello"})
        translator = SarvamTranslator(api_key="key", session=session)

        self.assertEqual(translator.translate("नमस्ते", "hi", "en"), "Hello")

        args, kwargs = session.post.call_args
        self.assertEqual(args[0], SARVAM_TRANSLATE_ENDPOINT)
        self.assertEqual(kwargs["headers"]["api-subscription-key"], "key")
        self.assertEqual(kwargs["json"]["source_language_code"], "hi-IN")
        self.assertEqual(kwargs["json"]["target_language_code"], "en-IN")

    @patch("voxtranslate.retry.BASE_DELAY", 0.0)
    def test_server_error_is_retried(self):
        session = MagicMock()
        session.post.side_effect = [
            _http_response(status=503),
            _http_response(body={"translated_text": "Hello"}),
        ]
        translator = SarvamTranslator(api_key="key", session=session)

        self.assertEqual(translator.translate("नमस्ते", "hi", "en"), "Hello")
        self.assertEqual(session.post.call_count, 2)

    def test_client_error_not_retried(self):
        session = MagicMock()
        session.post.return_value = _http_response(status=400)
        translator = SarvamTranslator(api_key="key", session=session)

        with self.assertRaises(requests.HTTPError):
            translator.translate("नमस्ते", "hi", "en")
        self.assertEqual(session.post.call_count, 1)

    def test_missing_translated_text(self):
        session = MagicMock()
        session.post.return_value = _http_response(body={})
        translator = SarvamTranslator(api_key="key", session=session)

        with self.assertRaises(RuntimeError):
            translator.translate("नमस्ते", "hi", "en")

    def test_sarvam_code_mapping(self):
        self.assertEqual(sarvam_code("hi-IN"), "hi-IN")
        self.assertEqual(sarvam_code("en-US"), "en-IN")
        self.assertEqual(sarvam_code("or"), "od-IN")
        with self.assertRaises(ValueError):
            sarvam_code("fr")


if __name__ == "__main__":
    unittest.main()
