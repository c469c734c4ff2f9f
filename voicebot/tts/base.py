"""
TTS engine interface. Implementations: ElevenLabs (API key), Edge TTS (local, free).
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class SpeechSynthesizer(ABC):
    """Abstract TTS. synthesize(text) returns raw audio bytes, or None on failure."""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes | None:
        """
        Convert text to speech. Never raises for remote failures: returns None.
        Bytes are in the engine's output format (see mime_type).
        """
        ...

    @property
    @abstractmethod
    def mime_type(self) -> str:
        """MIME type of output, e.g. 'audio/mpeg'."""
        ...
