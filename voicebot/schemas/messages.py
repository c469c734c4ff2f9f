"""Schemas for the stateless HTTP routes (send-message, audio-message)."""
from __future__ import annotations

from pydantic import BaseModel, Field


class SendMessageRequest(BaseModel):
    """Request body for POST /api/send-message."""

    message: str | None = Field(None, description="User text; required")


class SendMessageResponse(BaseModel):
    """Response body for POST /api/send-message."""

    response: str = Field(..., description="Assistant reply text")
    role: str = Field("AI")
    audio: str = Field(..., description="TTS audio of the reply, base64")


class AudioMessageResponse(BaseModel):
    """Response body for POST /api/audio-message."""

    transcribedText: str = Field(..., description="Transcript of the uploaded audio")
    response: str = Field(..., description="Assistant reply text")
    audio: str = Field(..., description="TTS audio of the reply, base64")
    role: str = Field("AI")
