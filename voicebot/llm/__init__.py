"""LLM: short conversational replies to transcribed speech."""
from __future__ import annotations

from voicebot.llm.base import FALLBACK_REPLY, TextGenerator, build_prompt
from voicebot.llm.cloudflare import CloudflareTextGenerator
from voicebot.llm.gemini import GeminiTextGenerator
from voicebot.llm.service import get_text_generator

__all__ = [
    "FALLBACK_REPLY",
    "TextGenerator",
    "build_prompt",
    "CloudflareTextGenerator",
    "GeminiTextGenerator",
    "get_text_generator",
]
