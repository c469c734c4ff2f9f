from __future__ import annotations

import asyncio
from typing import Any

import pytest

from voicebot.asr.base import Transcriber, TranscriptionResult
from voicebot.audio.segmenter import UtteranceSegmenter
from voicebot.audio.vad import VoiceActivity, VoiceClassifier
from voicebot.errors import ClassificationError
from voicebot.llm.base import TextGenerator
from voicebot.pipeline import VoicePipeline
from voicebot.tts.base import SpeechSynthesizer

SAMPLE_RATE = 16000
FRAME_20MS = SAMPLE_RATE * 20 // 1000 * 2  # 640 bytes


def voice_pcm(ms: int = 20) -> bytes:
    """Synthetic "voice": non-zero samples (the fake classifier only checks for energy)."""
    return b"\x10\x01" * (SAMPLE_RATE * ms // 1000)


def silence_pcm(ms: int = 20) -> bytes:
    return b"\x00\x00" * (SAMPLE_RATE * ms // 1000)


class SignalClassifier(VoiceClassifier):
    """Voice iff the frame has any non-zero byte. Enforces 10/20/30 ms frame sizes like webrtcvad."""

    def __init__(self) -> None:
        self.calls = 0

    async def classify(self, frame: bytes, sample_rate: int) -> VoiceActivity:
        self.calls += 1
        valid = {sample_rate * ms // 1000 * 2 for ms in (10, 20, 30)}
        if len(frame) not in valid:
            raise ClassificationError(f"bad frame length {len(frame)}")
        return VoiceActivity.VOICE if any(frame) else VoiceActivity.SILENCE


class TickClock:
    """Monotonic ms clock that advances by step on every read."""

    def __init__(self, step: float = 20.0, start: float = 0.0) -> None:
        self.step = step
        self.now = start - step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


class ManualClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeTranscriber(Transcriber):
    def __init__(self, result: TranscriptionResult | None = None) -> None:
        self.result = result or TranscriptionResult.completed("hello there")
        self.received: list[bytes] = []

    async def transcribe(self, audio: bytes) -> TranscriptionResult:
        self.received.append(audio)
        return self.result

    @property
    def max_wait_seconds(self) -> float:
        return 1.0


class FakeGenerator(TextGenerator):
    def __init__(self, reply: str = "  Hi! How can I help?  ", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def _complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeSynthesizer(SpeechSynthesizer):
    def __init__(self, audio: bytes | None = b"ID3-fake-mp3") -> None:
        self.audio = audio
        self.texts: list[str] = []

    @property
    def mime_type(self) -> str:
        return "audio/mpeg"

    async def synthesize(self, text: str) -> bytes | None:
        self.texts.append(text)
        return self.audio


class FakeWebSocket:
    """Feeds queued messages to receive(); then waits for release() before disconnecting."""

    def __init__(self, chunks: list[bytes], hold_open: bool = False, fail_send: bool = False) -> None:
        self._messages: list[dict[str, Any]] = [{"type": "websocket.receive", "bytes": c} for c in chunks]
        self._hold_open = hold_open
        self._fail_send = fail_send
        self.drained = asyncio.Event()
        self.released = asyncio.Event()
        self.sent: list[str] = []

    def push_text(self, text: str) -> None:
        self._messages.append({"type": "websocket.receive", "text": text})

    def release(self) -> None:
        self.released.set()

    async def receive(self) -> dict[str, Any]:
        if self._messages:
            return self._messages.pop(0)
        self.drained.set()
        if self._hold_open:
            await self.released.wait()
        return {"type": "websocket.disconnect", "code": 1000}

    async def send_text(self, data: str) -> None:
        if self._fail_send:
            raise RuntimeError("Cannot call send once a close message has been sent")
        self.sent.append(data)


@pytest.fixture
def classifier() -> SignalClassifier:
    return SignalClassifier()


@pytest.fixture
def segmenter(classifier: SignalClassifier) -> UtteranceSegmenter:
    return UtteranceSegmenter(
        classifier,
        sample_rate=SAMPLE_RATE,
        channels=1,
        frame_ms=20,
        silence_threshold_ms=300,
        clock=TickClock(step=20.0),
    )


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def synthesizer() -> FakeSynthesizer:
    return FakeSynthesizer()


@pytest.fixture
def pipeline(transcriber, generator, synthesizer, classifier) -> VoicePipeline:
    return VoicePipeline(transcriber, generator, synthesizer, classifier, frame_ms=20)
