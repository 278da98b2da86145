"""
voxtranslate/api/voice.py
==========================
Voice Translation Endpoint — voxtranslate

Responsibility:
    - Expose POST /api/v1/voice (multipart audio + target/source language)
    - Run the orchestrator off the event loop
    - Abort in-flight probes when the client disconnects
    - Map orchestrator error kinds to HTTP status codes
    - Forward successful results to RESULT_WEBHOOK_URL (history service)

Status mapping:
    InvalidInputError           → 400
    NoSpeechDetectedError       → 400
    RecognitionFailedError      → 400
    TranscriptionCancelledError → 499 (client closed request)
    InternalError / other       → 500
"""

import asyncio
import logging
import threading
from functools import lru_cache

import aiohttp
from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voxtranslate.config import Settings, load_settings
from voxtranslate.errors import (
    InvalidInputError,
    NoSpeechDetectedError,
    RecognitionFailedError,
    TranscriptionCancelledError,
    VoiceTranslationError,
)
from voxtranslate.orchestrator import AUTO_DETECT, VoiceTranslationOrchestrator

logger = logging.getLogger("voxtranslate.api")

# How often the handler checks whether the client went away (seconds).
DISCONNECT_POLL_SECONDS: float = 0.25

CLIENT_CLOSED_REQUEST = 499


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return load_settings()


@lru_cache
def get_orchestrator() -> VoiceTranslationOrchestrator:
    """Build the orchestrator once; it holds no per-request state."""
    from voxtranslate.providers import build_orchestrator

    return build_orchestrator(get_settings())


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="voxtranslate",
    description="Speech transcription with automatic language detection and translation.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy", "version": app.version}


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


@app.post("/api/v1/voice")
async def transcribe_voice(
    request: Request,
    audio: UploadFile = File(...),
    target_language: str = Form("en"),
    source_language: str = Form(AUTO_DETECT),
    orchestrator: VoiceTranslationOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_settings),
):
    """
    Transcribe an uploaded clip, detecting its language unless
    ``source_language`` names one, and translate it into ``target_language``.
    """
    logger.info(
        "Audio received: %s (%s), target=%s, source=%s",
        audio.filename, audio.content_type, target_language, source_language,
    )

    try:
        audio_bytes = await audio.read()
    except Exception:
        raise HTTPException(status_code=400, detail="Failed to read uploaded file.")

    cancel_event = threading.Event()
    work = asyncio.ensure_future(
        asyncio.to_thread(
            orchestrator.transcribe_and_translate,
            audio_bytes,
            target_language,
            source_language,
            filename=audio.filename,
            content_type=audio.content_type,
            cancel_event=cancel_event,
        )
    )

    try:
        while not work.done():
            await asyncio.wait({work}, timeout=DISCONNECT_POLL_SECONDS)
            if not work.done() and await request.is_disconnected():
                logger.info("Client disconnected — cancelling in-flight probes.")
                cancel_event.set()
        result = work.result()
    except asyncio.CancelledError:
        cancel_event.set()
        raise
    except (InvalidInputError, NoSpeechDetectedError, RecognitionFailedError) as exc:
        logger.info("Request rejected (%s): %s", type(exc).__name__, exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except TranscriptionCancelledError as exc:
        return JSONResponse(status_code=CLIENT_CLOSED_REQUEST, content={"detail": str(exc)})
    except VoiceTranslationError as exc:
        logger.error("Voice translation error: %s", exc)
        raise HTTPException(status_code=500, detail="Processing failed.")
    except Exception as exc:
        logger.error("Voice endpoint unexpected error: %s", exc, exc_info=True)
        raise HTTPException(status_code=500, detail="Processing failed.")

    payload = result.to_dict()
    logger.info(
        "Voice translation complete: %s → %s (translated=%s).",
        payload["detected_language"], payload["target_language"], payload["was_translated"],
    )

    if settings.result_webhook_url:
        await post_result_webhook(settings.result_webhook_url, payload)
    else:
        logger.debug("RESULT_WEBHOOK_URL not configured — skipping POST.")

    return JSONResponse(status_code=200, content=payload)


# ---------------------------------------------------------------------------
# Result forwarding
# ---------------------------------------------------------------------------


async def post_result_webhook(url: str, payload: dict) -> None:
    """POST the result to the history service. Failures are logged only."""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=aiohttp.ClientTimeout(total=10),
            ) as resp:
                logger.info("Webhook POST to %s — status %d", url, resp.status)
    except Exception as exc:
        logger.error("Webhook POST failed: %s", exc)
