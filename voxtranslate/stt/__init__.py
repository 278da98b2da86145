# voxtranslate/stt/__init__.py
# =============================
# Speech-to-Text Layer — voxtranslate
#
#   languages.py         candidate tiers, locale mapping
#   recognizer.py        SpeechRecognizer contract
#   language_detector.py tiered multi-candidate language detection
#   deepgram_client.py   Deepgram backend (default)
#   whisper_client.py    OpenAI Whisper backend
