"""
ConnectionSession: per-WebSocket mutable audio state.

One session per live stream. Only the owning connection's receive loop touches
it, so no locking is needed. Jobs already handed to the job queue hold their own
copy of the utterance and outlive the session.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field


def generate_session_id() -> str:
    """Generate a new session_id (UUID hex, 12 chars)."""
    return uuid.uuid4().hex[:12]


@dataclass
class ConnectionSession:
    session_id: str = field(default_factory=generate_session_id)
    # Accumulated utterance audio (whole 16-bit samples only)
    buffer: bytearray = field(default_factory=bytearray)
    # Monotonic ms when the current silence run started; None while speech is ongoing
    silence_started_at: float | None = None
    # Odd trailing byte carried to the next chunk (0 or 1 bytes)
    leftover: bytes = b""
    # Whole samples short of one VAD window, classified once later bytes complete it
    partial_window: bytes = b""
    closed: bool = False

    @property
    def is_accumulating(self) -> bool:
        return len(self.buffer) > 0

    def take_buffer(self) -> bytes:
        """Return the accumulated audio and reset buffer and silence timer."""
        data = bytes(self.buffer)
        self.buffer = bytearray()
        self.silence_started_at = None
        return data
