"""ASR: swappable remote transcription engines."""
from .base import Transcriber, TranscriptionResult, TranscriptionStatus
from .assemblyai import AssemblyAITranscriber

__all__ = [
    "Transcriber",
    "TranscriptionResult",
    "TranscriptionStatus",
    "AssemblyAITranscriber",
]
