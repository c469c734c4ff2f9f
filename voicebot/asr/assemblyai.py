"""
AssemblyAITranscriber: upload -> create transcript -> poll until completed.

Polling is bounded: at most TRANSCRIBE_MAX_POLLS polls, TRANSCRIBE_POLL_INTERVAL_SEC
apart (default 60 x 2s = 120s). Running out of polls is a terminal failure for
that call; the pipeline does not retry.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from voicebot.asr.base import Transcriber, TranscriptionResult
from voicebot.config import get_settings

logger = logging.getLogger(__name__)


class AssemblyAITranscriber(Transcriber):
    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        language_code: str | None = None,
        poll_interval: float | None = None,
        max_polls: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.ASSEMBLY_API_KEY
        self._api_url = (api_url or settings.ASSEMBLY_API_URL).rstrip("/")
        self._language_code = language_code or settings.ASSEMBLY_LANGUAGE_CODE
        self._poll_interval = poll_interval if poll_interval is not None else settings.TRANSCRIBE_POLL_INTERVAL_SEC
        self._max_polls = max_polls if max_polls is not None else settings.TRANSCRIBE_MAX_POLLS
        self._timeout = timeout or settings.HTTP_TIMEOUT_SEC
        self._transport = transport
        self._sleep = sleep

    @property
    def max_wait_seconds(self) -> float:
        return self._max_polls * self._poll_interval

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._api_url,
            headers={"authorization": self._api_key},
            timeout=self._timeout,
            transport=self._transport,
        )

    async def transcribe(self, audio: bytes) -> TranscriptionResult:
        if not self._api_key:
            logger.error("ASSEMBLY_API_KEY is not set; cannot transcribe")
            return TranscriptionResult.failed("transcription service not configured")
        logger.info("Sending %d bytes to AssemblyAI for transcription", len(audio))
        try:
            async with self._client() as client:
                return await self._transcribe(client, audio)
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.error("AssemblyAI transcription error: %s", e)
            return TranscriptionResult.failed(str(e))

    async def _transcribe(self, client: httpx.AsyncClient, audio: bytes) -> TranscriptionResult:
        # 1. Upload the container
        resp = await client.post(
            "/upload",
            content=audio,
            headers={"content-type": "application/octet-stream"},
        )
        resp.raise_for_status()
        upload_url = resp.json()["upload_url"]

        # 2. Request transcription
        resp = await client.post(
            "/transcript",
            json={
                "audio_url": upload_url,
                "language_code": self._language_code,
                "punctuate": True,
                "format_text": True,
            },
        )
        resp.raise_for_status()
        data = resp.json()
        transcript_id = data["id"]
        status = data.get("status")

        # 3. Poll for completion
        polls = 0
        while status not in ("completed", "error", "failed") and polls < self._max_polls:
            await self._sleep(self._poll_interval)
            resp = await client.get(f"/transcript/{transcript_id}")
            resp.raise_for_status()
            data = resp.json()
            status = data.get("status")
            polls += 1

        if status == "completed":
            text = (data.get("text") or "").strip()
            if not text:
                return TranscriptionResult.failed("empty transcript")
            logger.info("AssemblyAI transcription complete (%d polls): %s", polls, text)
            return TranscriptionResult.completed(text)
        if status in ("error", "failed"):
            return TranscriptionResult.failed(data.get("error") or "transcription failed")
        logger.warning("AssemblyAI transcript %s timed out after %d polls", transcript_id, polls)
        return TranscriptionResult.failed("transcription timed out")
