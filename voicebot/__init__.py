"""Streaming voice chat backend: PCM over WebSocket -> utterances -> STT -> LLM -> TTS."""

__version__ = "0.1.0"
