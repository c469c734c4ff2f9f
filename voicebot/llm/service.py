"""Pick the text generator from config (gemini / cloudflare)."""
from __future__ import annotations

import logging

from voicebot.config import get_settings
from voicebot.llm.base import TextGenerator
from voicebot.llm.cloudflare import CloudflareTextGenerator
from voicebot.llm.gemini import GeminiTextGenerator

logger = logging.getLogger(__name__)


def get_text_generator() -> TextGenerator:
    backend = (get_settings().LLM_BACKEND or "gemini").strip().lower()
    if backend == "cloudflare":
        return CloudflareTextGenerator()
    if backend != "gemini":
        logger.warning("Unknown LLM_BACKEND=%s; using gemini", backend)
    return GeminiTextGenerator()
