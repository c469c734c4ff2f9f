"""
Voice activity classification on short PCM frames, plus utterance verification.

Uses webrtcvad (aggressiveness 0–3). webrtcvad only accepts 10, 20 or 30 ms
frames at 8/16/32/48 kHz; anything else raises ClassificationError, which
callers log and skip instead of aborting the stream.
"""
from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod

import webrtcvad

from voicebot.audio.receiver import SAMPLE_WIDTH, frame_bytes, split_frames
from voicebot.config import get_settings
from voicebot.errors import ClassificationError

logger = logging.getLogger(__name__)


class VoiceActivity(str, enum.Enum):
    VOICE = "voice"
    SILENCE = "silence"


class VoiceClassifier(ABC):
    """Classifies one frame as voice or silence. Async so remote/offloaded VADs fit."""

    @abstractmethod
    async def classify(self, frame: bytes, sample_rate: int) -> VoiceActivity:
        """Raise ClassificationError when the frame is malformed for this classifier."""
        ...


class WebRTCVoiceClassifier(VoiceClassifier):
    """
    Wraps webrtcvad. One instance per connection (webrtcvad keeps smoothing state).
    """

    def __init__(self, aggressiveness: int | None = None) -> None:
        """
        aggressiveness: 0 (least aggressive) to 3 (most aggressive).
        Higher = more frames classified as silence.
        """
        if aggressiveness is None:
            aggressiveness = get_settings().VAD_AGGRESSIVENESS
        self._vad = webrtcvad.Vad(aggressiveness)

    async def classify(self, frame: bytes, sample_rate: int) -> VoiceActivity:
        if len(frame) % SAMPLE_WIDTH:
            raise ClassificationError(f"odd frame length {len(frame)}")
        n_samples = len(frame) // SAMPLE_WIDTH
        if not webrtcvad.valid_rate_and_frame_length(sample_rate, n_samples):
            raise ClassificationError(
                f"invalid frame: {n_samples} samples at {sample_rate} Hz (need 10/20/30 ms)"
            )
        try:
            speech = self._vad.is_speech(frame, sample_rate)
        except Exception as err:
            raise ClassificationError(str(err)) from err
        return VoiceActivity.VOICE if speech else VoiceActivity.SILENCE


async def classify_chunk(
    classifier: VoiceClassifier,
    chunk: bytes,
    sample_rate: int,
    frame_ms: int = 30,
) -> VoiceActivity:
    """
    Classify an arbitrary whole-sample chunk by scanning frame_ms windows.
    VOICE if any window is voice; SILENCE if some window classified and none was voice.
    Raises ClassificationError when no window could be classified at all.
    """
    size = frame_bytes(sample_rate, frame_ms)
    classified = 0
    last_error: ClassificationError | None = None
    for frame in split_frames(chunk, size):
        try:
            result = await classifier.classify(frame, sample_rate)
        except ClassificationError as err:
            last_error = err
            continue
        classified += 1
        if result is VoiceActivity.VOICE:
            return VoiceActivity.VOICE
    if classified:
        return VoiceActivity.SILENCE
    if last_error is not None:
        raise last_error
    raise ClassificationError(f"chunk of {len(chunk)} bytes is shorter than one {frame_ms} ms frame")


async def contains_speech(
    classifier: VoiceClassifier,
    buffer: bytes,
    sample_rate: int = 16000,
    frame_duration_ms: int = 30,
) -> bool:
    """
    Re-scan an utterance in non-overlapping frames; True on the first voiced frame.
    False if no frame is voiced or the buffer is shorter than one frame.
    Per-frame classification errors count as non-voice.
    """
    size = frame_bytes(sample_rate, frame_duration_ms)
    for index, frame in enumerate(split_frames(buffer, size)):
        try:
            result = await classifier.classify(frame, sample_rate)
        except ClassificationError as err:
            logger.warning("VAD error on frame %d: %s", index, err)
            continue
        logger.debug("VAD frame %d: %s", index, result.value)
        if result is VoiceActivity.VOICE:
            return True
    return False
