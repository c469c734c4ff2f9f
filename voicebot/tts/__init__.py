"""
TTS: text-to-speech for assistant replies.

- elevenlabs: ElevenLabs streaming endpoint.
- edge: Edge TTS (local / free, Microsoft).
"""
from __future__ import annotations

from voicebot.tts.base import SpeechSynthesizer
from voicebot.tts.edge_tts import EdgeSynthesizer
from voicebot.tts.elevenlabs import ElevenLabsSynthesizer
from voicebot.tts.service import DisabledSynthesizer, get_speech_synthesizer

__all__ = [
    "SpeechSynthesizer",
    "EdgeSynthesizer",
    "ElevenLabsSynthesizer",
    "DisabledSynthesizer",
    "get_speech_synthesizer",
]
