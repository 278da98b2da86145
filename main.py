"""
main.py
========
ASGI entry point for the voxtranslate speech-to-translated-text service.

Serves POST /api/v1/voice and GET /health.

Run with:
    uvicorn main:app --reload
"""

import logging

from dotenv import load_dotenv

# Settings reads .env itself; this exports it for the vendor SDKs too.
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Per-request HTTP chatter from the recognizer and translator clients.
for _sdk_logger_name in (
    "openai",
    "openai._base_client",
    "httpx",
    "httpcore",
    "httpcore.http11",
    "httpcore.connection",
    "deepgram",
    "urllib3",
):
    logging.getLogger(_sdk_logger_name).setLevel(logging.WARNING)

from voxtranslate.api.voice import app  # noqa: F401, E402

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
