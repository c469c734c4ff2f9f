"""Exception types shared across the audio pipeline and collaborators."""
from __future__ import annotations


class VoicebotError(Exception):
    """Base class for voicebot errors."""


class ClassificationError(VoicebotError):
    """A frame could not be classified (wrong length or rate for the VAD)."""


class CollaboratorError(VoicebotError):
    """A remote capability (transcription, generation, synthesis) failed."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
