"""
Transcriber: abstract interface for remote speech-to-text.

A transcription ends in one of two outcomes: completed(text) or failed.
Retry and polling cadence are internal to each implementation; callers only see
the outcome and the maximum time a call may take (max_wait_seconds).
"""
from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass


class TranscriptionStatus(str, enum.Enum):
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class TranscriptionResult:
    """Result of one transcribe call."""

    status: TranscriptionStatus
    text: str = ""
    error: str | None = None

    @classmethod
    def completed(cls, text: str) -> "TranscriptionResult":
        return cls(status=TranscriptionStatus.COMPLETED, text=text)

    @classmethod
    def failed(cls, error: str) -> "TranscriptionResult":
        return cls(status=TranscriptionStatus.FAILED, error=error)

    @property
    def ok(self) -> bool:
        """True only for a completed, non-empty transcript."""
        return self.status is TranscriptionStatus.COMPLETED and bool(self.text.strip())


class Transcriber(ABC):
    """Accepts a WAV container; never raises for remote failures."""

    @abstractmethod
    async def transcribe(self, audio: bytes) -> TranscriptionResult:
        """
        Transcribe one audio container (e.g. WAV bytes).
        Network errors, timeouts and service-side failures return a failed result.
        """
        ...

    @property
    @abstractmethod
    def max_wait_seconds(self) -> float:
        """Upper bound on how long transcribe() may take before giving up."""
        ...
