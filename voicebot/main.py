"""
FastAPI app: WebSocket endpoint for streaming voice chat; stateless HTTP helpers.

Client sends binary PCM 16-bit mono 16kHz on /ws/audio (any chunk size). For each
detected utterance the server sends JSON events:
{ "event_type": "disappear", "message": "..." }                       progress
{ "event_type": "final_response", "userText", "aiResponse", "audio", "role" }
{ "error": "...", "details"?: "..." }                                 failure
"""
from __future__ import annotations

import base64
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import HTTPConnection
from fastapi.responses import PlainTextResponse

from voicebot.asr.assemblyai import AssemblyAITranscriber
from voicebot.audio.segmenter import UtteranceSegmenter
from voicebot.audio.vad import WebRTCVoiceClassifier
from voicebot.config import get_settings
from voicebot.job_queue import SequentialJobQueue
from voicebot.llm.service import get_text_generator
from voicebot.logging_setup import configure_logging
from voicebot.pipeline import VoicePipeline
from voicebot.schemas.messages import AudioMessageResponse, SendMessageRequest, SendMessageResponse
from voicebot.tts.service import get_speech_synthesizer
from voicebot.websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)


def build_pipeline() -> VoicePipeline:
    """Wire collaborators from config."""
    return VoicePipeline(
        transcriber=AssemblyAITranscriber(),
        generator=get_text_generator(),
        synthesizer=get_speech_synthesizer(),
        classifier=WebRTCVoiceClassifier(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # One queue for the whole process: every connection's utterances share it
    app.state.job_queue = SequentialJobQueue("pipeline")
    app.state.pipeline = build_pipeline()
    logger.info("Backend ready (port %s)", get_settings().PORT)
    yield
    await app.state.job_queue.close()


app = FastAPI(
    title="Voice chat backend",
    description="Streaming PCM -> VAD utterances -> transcription -> LLM -> TTS",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in get_settings().CORS_ORIGIN.split(",") if o.strip()] or ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_pipeline(conn: HTTPConnection) -> VoicePipeline:
    return conn.app.state.pipeline


def get_job_queue(conn: HTTPConnection) -> SequentialJobQueue:
    return conn.app.state.job_queue


@app.websocket("/ws/audio")
async def websocket_audio(
    websocket: WebSocket,
    pipeline: VoicePipeline = Depends(get_pipeline),
    job_queue: SequentialJobQueue = Depends(get_job_queue),
) -> None:
    """
    WebSocket: client sends raw PCM 16-bit mono 16kHz (binary).
    Server sends JSON events per utterance (see module docstring).
    """
    await websocket.accept()
    segmenter = UtteranceSegmenter(classifier=WebRTCVoiceClassifier())
    manager = WebSocketManager(websocket, segmenter, pipeline, job_queue)
    await manager.run()


@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Welcome to the AI Chat API!"


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.post("/api/send-message", response_model=SendMessageResponse)
async def send_message(
    request: SendMessageRequest,
    pipeline: VoicePipeline = Depends(get_pipeline),
) -> SendMessageResponse:
    """
    User text -> AI reply -> TTS. Stateless; independent of the streaming path.

    Errors use FastAPI's HTTPException body, {"detail": "..."}:
    400 when message is missing or blank, 500 when no speech audio was produced.
    """
    message = (request.message or "").strip()
    if not message:
        raise HTTPException(status_code=400, detail="message is required")
    reply, audio = await pipeline.reply_to_text(message)
    if not audio:
        raise HTTPException(status_code=500, detail="Failed to generate audio")
    return SendMessageResponse(response=reply, audio=base64.b64encode(audio).decode("ascii"))


@app.post("/api/audio-message", response_model=AudioMessageResponse)
async def audio_message(
    audio: UploadFile | None = File(None),
    pipeline: VoicePipeline = Depends(get_pipeline),
) -> AudioMessageResponse:
    """
    Uploaded audio file -> transcription -> AI reply -> TTS.

    Errors use FastAPI's HTTPException body, {"detail": "..."}:
    400 "No audio file provided" (missing or empty upload),
    400 "Could not transcribe audio", 500 "Failed to generate audio response".
    """
    if audio is None:
        raise HTTPException(status_code=400, detail="No audio file provided")
    data = await audio.read()
    logger.info("Received audio file: %s Size: %d", audio.filename, len(data))
    if not data:
        raise HTTPException(status_code=400, detail="No audio file provided")

    result = await pipeline.transcribe(data)
    if not result.ok:
        raise HTTPException(status_code=400, detail="Could not transcribe audio")
    transcribed = result.text.strip()
    logger.info("Transcribed text: %s", transcribed)

    reply, speech = await pipeline.reply_to_text(transcribed)
    if not speech:
        raise HTTPException(status_code=500, detail="Failed to generate audio response")
    return AudioMessageResponse(
        transcribedText=transcribed,
        response=reply,
        audio=base64.b64encode(speech).decode("ascii"),
    )
