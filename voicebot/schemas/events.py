"""
Outbound WebSocket events (one JSON text frame per event).

- progress: { "event_type": "disappear", "message": "..." }   (ephemeral status)
- final:    { "event_type": "final_response", "userText", "aiResponse", "audio", "role": "AI" }
- error:    { "error": "...", "details"?: "..." }
"""
from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, Field


class ProgressEvent(BaseModel):
    event_type: Literal["disappear"] = "disappear"
    message: str = Field(..., description="Ephemeral status text; client shows it briefly")


class FinalResponseEvent(BaseModel):
    event_type: Literal["final_response"] = "final_response"
    userText: str = Field(..., description="Transcript of the user's utterance")
    aiResponse: str = Field(..., description="Generated reply text (trimmed)")
    audio: str = Field(..., description="Synthesized reply audio, base64")
    role: Literal["AI"] = "AI"


class ErrorEvent(BaseModel):
    error: str
    details: str | None = None


OutboundEvent = Union[ProgressEvent, FinalResponseEvent, ErrorEvent]


def event_to_json(event: OutboundEvent) -> str:
    """Serialize for the wire; absent optional fields (details) are omitted."""
    return event.model_dump_json(exclude_none=True)
