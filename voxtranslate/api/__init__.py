# voxtranslate/api/__init__.py
# =============================
# API Layer — voxtranslate
#
#   voice.py   POST /api/v1/voice, GET /health
