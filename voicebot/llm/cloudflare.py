"""CloudflareTextGenerator: Cloudflare Workers AI text generation (REST, free tier)."""
from __future__ import annotations

import logging

import httpx

from voicebot.config import get_settings
from voicebot.errors import CollaboratorError
from voicebot.llm.base import TextGenerator

logger = logging.getLogger(__name__)


class CloudflareTextGenerator(TextGenerator):
    def __init__(
        self,
        account_id: str | None = None,
        api_token: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._account_id = (account_id if account_id is not None else settings.CLOUDFLARE_ACCOUNT_ID).strip()
        self._token = (api_token if api_token is not None else settings.CLOUDFLARE_API_TOKEN).strip()
        self._model = model or settings.CLOUDFLARE_LLM_MODEL
        self._max_tokens = max_tokens or settings.LLM_MAX_TOKENS
        self._timeout = timeout or settings.HTTP_TIMEOUT_SEC
        self._transport = transport

    async def _complete(self, prompt: str) -> str:
        if not self._account_id or not self._token:
            raise CollaboratorError("cloudflare", "CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN are required")
        url = f"https://api.cloudflare.com/client/v4/accounts/{self._account_id}/ai/run/{self._model}"
        payload = {
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self._max_tokens,
            "temperature": 0.4,
        }
        logger.debug("LLM request to Cloudflare: model=%s, max_tokens=%s", self._model, self._max_tokens)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            resp = await client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {self._token}", "Content-Type": "application/json"},
            )
            resp.raise_for_status()
            data = resp.json()

        # Workers AI returns { "result": { "response": "..." } } or direct { "response": "..." }
        result = data.get("result", data)
        if isinstance(result, dict):
            content = result.get("response", "") or ""
        elif isinstance(result, str):
            content = result
        else:
            content = ""
        return content.strip()
