"""
Edge TTS engine (Microsoft Edge online TTS). Free, no API key.
On 403 from Microsoft: check network/region or set TTS_BACKEND=none.
"""
from __future__ import annotations

import logging
import re
from typing import List

from voicebot.tts.base import SpeechSynthesizer

logger = logging.getLogger(__name__)

DEFAULT_VOICE = "en-US-GuyNeural"

# Long replies are split to stay under request limits; MP3 pieces are concatenated
MAX_CHARS_PER_CHUNK = 800


def split_text_chunks(text: str, max_chars: int = MAX_CHARS_PER_CHUNK) -> List[str]:
    """Split text into pieces of at most max_chars, preferring sentence boundaries."""
    text = (text or "").strip()
    if not text or len(text) <= max_chars:
        return [text] if text else []
    chunks: List[str] = []
    parts = re.split(r"(?<=[.!?\n])\s+", text)
    current: List[str] = []
    current_len = 0
    for p in parts:
        if current_len + len(p) + 1 <= max_chars:
            current.append(p)
            current_len += len(p) + 1
            continue
        if current:
            chunks.append(" ".join(current))
        if len(p) > max_chars:
            chunks.extend(p[i : i + max_chars] for i in range(0, len(p), max_chars))
            current = []
            current_len = 0
        else:
            current = [p]
            current_len = len(p) + 1
    if current:
        chunks.append(" ".join(current))
    return chunks


class EdgeSynthesizer(SpeechSynthesizer):
    """TTS via edge-tts (Microsoft Edge). Output: MP3."""

    def __init__(self, voice: str | None = None) -> None:
        self._voice = (voice or DEFAULT_VOICE).strip() or DEFAULT_VOICE

    @property
    def mime_type(self) -> str:
        return "audio/mpeg"

    async def _synthesize_one(self, text: str) -> bytes:
        """One request to Edge TTS; raw MP3 bytes or b''."""
        import edge_tts

        communicate = edge_tts.Communicate(text, self._voice)
        chunks: List[bytes] = []
        try:
            async for chunk in communicate.stream():
                if chunk.get("type") == "audio" and chunk.get("data"):
                    chunks.append(chunk["data"])
        except Exception as e:
            logger.error("Edge TTS stream failed (403 = region/network?): %s", e)
            return b""
        return b"".join(chunks)

    async def synthesize(self, text: str) -> bytes | None:
        pieces = split_text_chunks(text)
        if not pieces:
            return None
        out: List[bytes] = []
        for piece in pieces:
            audio = await self._synthesize_one(piece)
            if not audio:
                # A missing middle piece would garble the reply; give up on the whole text
                logger.warning("Edge TTS returned no audio for %d chars", len(piece))
                return None
            out.append(audio)
        return b"".join(out)
