"""Pydantic schemas for WebSocket events and HTTP request/response bodies."""
from voicebot.schemas.events import ErrorEvent, FinalResponseEvent, OutboundEvent, ProgressEvent
from voicebot.schemas.messages import AudioMessageResponse, SendMessageRequest, SendMessageResponse

__all__ = [
    "ErrorEvent",
    "FinalResponseEvent",
    "OutboundEvent",
    "ProgressEvent",
    "AudioMessageResponse",
    "SendMessageRequest",
    "SendMessageResponse",
]
