"""GeminiTextGenerator: Google Generative Language REST API (generateContent)."""
from __future__ import annotations

import httpx

from voicebot.config import get_settings
from voicebot.errors import CollaboratorError
from voicebot.llm.base import TextGenerator


class GeminiTextGenerator(TextGenerator):
    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self._model = model or settings.GEMINI_MODEL
        self._api_url = (api_url or settings.GEMINI_API_URL).rstrip("/")
        self._timeout = timeout or settings.HTTP_TIMEOUT_SEC
        self._transport = transport

    async def _complete(self, prompt: str) -> str:
        if not self._api_key:
            raise CollaboratorError("gemini", "GEMINI_API_KEY is required for text generation")
        url = f"{self._api_url}/models/{self._model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(
                url,
                json=payload,
                headers={"x-goog-api-key": self._api_key, "Content-Type": "application/json"},
            )
            resp.raise_for_status()
            data = resp.json()

        # { "candidates": [ { "content": { "parts": [ { "text": "..." } ] } } ] }
        candidates = data.get("candidates") or []
        if not candidates:
            raise CollaboratorError("gemini", "no candidates in response")
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict))
