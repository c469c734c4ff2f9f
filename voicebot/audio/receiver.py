"""
Frame assembly: normalize arbitrary WebSocket chunks into whole 16-bit samples.

- Expects PCM 16-bit mono 16kHz; chunk boundaries are not sample-aligned.
- An odd trailing byte is withheld and prepended to the next chunk, so no
  sample is ever split across two processing calls.
- Lossless: all emitted frames plus the final leftover equal the input.
- Optionally, whole samples are further held back until they fill complete
  VAD windows; the short remainder waits on the session for the next chunk.
"""
from __future__ import annotations

from typing import Iterator

from voicebot.session import ConnectionSession

SAMPLE_WIDTH = 2


def ingest(previous_leftover: bytes, chunk: bytes) -> tuple[bytes, bytes]:
    """
    Prepend previous_leftover to chunk; if the result has odd length, strip the
    final byte and return it as the new leftover. Returns (frames, leftover).
    Empty frames means there is nothing to process for this call.
    """
    data = previous_leftover + chunk if previous_leftover else bytes(chunk)
    if len(data) % SAMPLE_WIDTH:
        return data[:-1], data[-1:]
    return data, b""


def frame_bytes(sample_rate: int, duration_ms: int, channels: int = 1) -> int:
    """Byte length of one frame: duration_ms * sample_rate / 1000 * 2 (per channel)."""
    return sample_rate * duration_ms // 1000 * SAMPLE_WIDTH * channels


def take_windows(previous_partial: bytes, frames: bytes, size: int) -> tuple[bytes, bytes]:
    """
    Prepend previous_partial to frames and cut at the last whole window of size
    bytes. Returns (windows, partial). Empty windows means no full window yet.
    """
    data = previous_partial + frames if previous_partial else bytes(frames)
    if size <= 0:
        return data, b""
    whole = len(data) - len(data) % size
    return data[:whole], data[whole:]


def split_frames(pcm: bytes, size: int) -> Iterator[bytes]:
    """Yield non-overlapping windows of exactly size bytes; a short tail is not yielded."""
    if size <= 0:
        return
    for start in range(0, len(pcm) - size + 1, size):
        yield pcm[start : start + size]


class FrameAssembler:
    """
    Applies ingest() against a session's leftover byte and, when window_size is
    set, take_windows() against its partial window.
    The session owns both remainders; the assembler itself is stateless.
    """

    def __init__(self, window_size: int = 0) -> None:
        self.window_size = window_size

    def feed(self, session: ConnectionSession, chunk: bytes) -> bytes:
        """Return the bytes ready for processing (may be empty); updates the session remainders."""
        frames, session.leftover = ingest(session.leftover, chunk)
        if not self.window_size:
            return frames
        windows, session.partial_window = take_windows(session.partial_window, frames, self.window_size)
        return windows
