# voxtranslate/nlp/__init__.py
# =============================
# Text layer — voxtranslate
#
#   translator.py   translation gating + OpenAI / Sarvam backends
