# voxtranslate/audio/__init__.py
# ===============================
# Audio layer — voxtranslate
#
#   validator.py   size / encoding / duration checks → AudioInput
