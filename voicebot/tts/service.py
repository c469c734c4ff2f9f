"""
TTS service: choose engine from config.
- elevenlabs: ElevenLabs API (default).
- edge: Edge TTS (local, free).
- none: TTS disabled (synthesis always yields no audio).
"""
from __future__ import annotations

import logging

from voicebot.config import get_settings
from voicebot.tts.base import SpeechSynthesizer
from voicebot.tts.edge_tts import EdgeSynthesizer
from voicebot.tts.elevenlabs import ElevenLabsSynthesizer

logger = logging.getLogger(__name__)


class DisabledSynthesizer(SpeechSynthesizer):
    """TTS_BACKEND=none: no audio, so the pipeline reports a synthesis failure."""

    @property
    def mime_type(self) -> str:
        return ""

    async def synthesize(self, text: str) -> bytes | None:
        logger.info("TTS disabled (TTS_BACKEND=none); audio=null")
        return None


def get_speech_synthesizer() -> SpeechSynthesizer:
    """Return TTS engine from config (elevenlabs / edge / none)."""
    settings = get_settings()
    backend = (settings.TTS_BACKEND or "elevenlabs").strip().lower()
    if backend == "none":
        return DisabledSynthesizer()
    if backend == "edge":
        return EdgeSynthesizer(voice=settings.TTS_EDGE_VOICE or None)
    if backend != "elevenlabs":
        logger.warning("Unknown TTS_BACKEND=%s; use elevenlabs, edge or none", backend)
    return ElevenLabsSynthesizer()
