"""
UtteranceSegmenter: turns a connection's PCM stream into utterances.

Per chunk:
1. Frame assembly: the odd trailing byte and any bytes short of a whole VAD
   window are carried on the session to the next chunk, so chunks of any size
   (smaller than a window, or not a multiple of it) lose nothing.
2. VAD over the whole windows (voice if any window is voiced).
3. State update on the session:
   - bytes are appended while an utterance is pending, or when the chunk is voice;
   - voice clears the silence timer;
   - silence starts the timer; once silence has lasted more than the threshold,
     the whole buffer is emitted as one Utterance and the session goes idle.

The threshold is checked once per incoming chunk, so at least two chunks are
needed to detect a crossing. Time comes from a monotonic clock (injectable).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from voicebot.audio.receiver import FrameAssembler, frame_bytes
from voicebot.audio.vad import VoiceActivity, VoiceClassifier, classify_chunk
from voicebot.config import get_settings
from voicebot.errors import ClassificationError
from voicebot.session import ConnectionSession

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class Utterance:
    """One detected speech segment: raw PCM plus its format."""

    pcm: bytes
    sample_rate: int = 16000
    channels: int = 1
    session_id: str = ""

    @property
    def duration_ms(self) -> float:
        return len(self.pcm) / (self.sample_rate * self.channels * 2) * 1000.0


class UtteranceSegmenter:
    """
    Stateless over sessions: all mutable state lives in the ConnectionSession
    passed to feed(), so one segmenter may serve one connection or many.
    """

    def __init__(
        self,
        classifier: VoiceClassifier,
        sample_rate: int | None = None,
        channels: int | None = None,
        frame_ms: int | None = None,
        silence_threshold_ms: int | None = None,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        settings = get_settings()
        self._classifier = classifier
        self._sample_rate = sample_rate or settings.SAMPLE_RATE
        self._channels = channels or settings.CHANNELS
        self._frame_ms = frame_ms or settings.VAD_FRAME_MS
        self._silence_threshold_ms = (
            silence_threshold_ms if silence_threshold_ms is not None else settings.SILENCE_THRESHOLD_MS
        )
        self._clock = clock
        self._assembler = FrameAssembler(frame_bytes(self._sample_rate, self._frame_ms))

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    async def feed(self, session: ConnectionSession, chunk: bytes) -> Utterance | None:
        """Process one inbound chunk. Returns an Utterance when a boundary is reached."""
        frames = self._assembler.feed(session, chunk)
        if not frames:
            logger.debug("[PCM] session=%s waiting for a full VAD window", session.session_id)
            return None

        try:
            activity = await classify_chunk(self._classifier, frames, self._sample_rate, self._frame_ms)
        except ClassificationError as err:
            # Inconclusive: silence timer untouched; audio kept if an utterance is open
            if session.buffer:
                session.buffer.extend(frames)
                logger.warning("[VAD] session=%s unclassified %d bytes kept: %s", session.session_id, len(frames), err)
            else:
                logger.warning("[VAD] session=%s skipped %d bytes: %s", session.session_id, len(frames), err)
            return None
        logger.debug("[VAD] session=%s chunk=%d bytes result=%s", session.session_id, len(frames), activity.value)

        if session.buffer or activity is VoiceActivity.VOICE:
            session.buffer.extend(frames)

        if activity is VoiceActivity.VOICE:
            session.silence_started_at = None
            return None

        now = self._clock()
        if session.silence_started_at is None:
            session.silence_started_at = now
        if now - session.silence_started_at <= self._silence_threshold_ms:
            return None

        if not session.buffer:
            # Silence with nothing pending: restart the timer, no boundary
            session.silence_started_at = None
            return None
        pcm = session.take_buffer()
        utterance = Utterance(
            pcm=pcm,
            sample_rate=self._sample_rate,
            channels=self._channels,
            session_id=session.session_id,
        )
        logger.info(
            "Utterance boundary: session=%s bytes=%d duration=%.0fms",
            session.session_id,
            len(pcm),
            utterance.duration_ms,
        )
        return utterance
