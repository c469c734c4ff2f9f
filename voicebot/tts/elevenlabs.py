"""ElevenLabs TTS via the streaming text-to-speech endpoint. Output: MP3."""
from __future__ import annotations

import logging

import httpx

from voicebot.config import get_settings
from voicebot.tts.base import SpeechSynthesizer

logger = logging.getLogger(__name__)


class ElevenLabsSynthesizer(SpeechSynthesizer):
    def __init__(
        self,
        api_key: str | None = None,
        voice_id: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.ELEVENLABS_API_KEY
        self._voice_id = voice_id or settings.ELEVENLABS_VOICE_ID
        self._api_url = (api_url or settings.ELEVENLABS_API_URL).rstrip("/")
        self._timeout = timeout or settings.HTTP_TIMEOUT_SEC
        self._transport = transport

    @property
    def mime_type(self) -> str:
        return "audio/mpeg"

    async def synthesize(self, text: str) -> bytes | None:
        if not (text or "").strip():
            return None
        if not self._api_key:
            logger.error("ELEVENLABS_API_KEY is not set; cannot synthesize speech")
            return None
        url = f"{self._api_url}/text-to-speech/{self._voice_id}/stream"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    url,
                    json={"text": text},
                    headers={"xi-api-key": self._api_key, "Content-Type": "application/json"},
                )
                resp.raise_for_status()
                audio = resp.content
        except httpx.HTTPError as e:
            logger.error("ElevenLabs TTS failed: %s", e)
            return None
        if not audio:
            logger.warning("ElevenLabs returned no audio for %d chars", len(text))
            return None
        return audio
