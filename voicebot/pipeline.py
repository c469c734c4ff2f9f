"""
VoicePipeline: one utterance -> transcription -> reply text -> speech.

process() is an async generator of outbound events; it does not know about
sockets. deliver() consumes those events and hands them to a send callable,
which may report that the destination is gone (events are then dropped).

Failure policy per step:
- no speech in the utterance: nothing is emitted;
- transcription failed/empty: one ErrorEvent, stop;
- text generation never fails (fallback reply from the generator);
- synthesis failed: one ErrorEvent, stop;
- anything unexpected: ErrorEvent("Internal pipeline error").
"""
from __future__ import annotations

import base64
import logging
from typing import AsyncIterator, Awaitable, Callable

from voicebot.asr.base import Transcriber, TranscriptionResult
from voicebot.audio.segmenter import Utterance
from voicebot.audio.vad import VoiceClassifier, contains_speech
from voicebot.audio.wav import pcm_to_wav
from voicebot.config import get_settings
from voicebot.llm.base import TextGenerator
from voicebot.schemas.events import ErrorEvent, FinalResponseEvent, OutboundEvent, ProgressEvent
from voicebot.tts.base import SpeechSynthesizer

logger = logging.getLogger(__name__)

MSG_TRANSCRIBING = "Speech detected. Transcribing..."
MSG_GENERATING = "Transcribed text now sending to AI..."
MSG_SYNTHESIZING = "AI response now sending to client..."

ERR_TRANSCRIPTION = "Could not transcribe audio"
ERR_SYNTHESIS = "Failed to generate audio response"
ERR_INTERNAL = "Internal pipeline error"

SendEvent = Callable[[OutboundEvent], Awaitable[bool]]


class VoicePipeline:
    def __init__(
        self,
        transcriber: Transcriber,
        generator: TextGenerator,
        synthesizer: SpeechSynthesizer,
        classifier: VoiceClassifier,
        frame_ms: int | None = None,
    ) -> None:
        self._transcriber = transcriber
        self._generator = generator
        self._synthesizer = synthesizer
        # Only used by verification, which runs inside the job queue (one at a time)
        self._classifier = classifier
        self._frame_ms = frame_ms or get_settings().VAD_FRAME_MS

    async def process(self, utterance: Utterance) -> AsyncIterator[OutboundEvent]:
        """Yield events for one utterance, in step order."""
        try:
            async for event in self._steps(utterance):
                yield event
        except Exception as err:
            logger.exception("Error in voice pipeline (session=%s)", utterance.session_id)
            yield ErrorEvent(error=ERR_INTERNAL, details=str(err))

    async def _steps(self, utterance: Utterance) -> AsyncIterator[OutboundEvent]:
        has_speech = await contains_speech(
            self._classifier, utterance.pcm, utterance.sample_rate, self._frame_ms
        )
        if not has_speech:
            logger.info("No valid speech in utterance (session=%s); skipped", utterance.session_id)
            return
        logger.info("Speech detected in utterance (session=%s); running pipeline", utterance.session_id)

        wav = pcm_to_wav(utterance.pcm, utterance.sample_rate, utterance.channels)
        yield ProgressEvent(message=MSG_TRANSCRIBING)
        result = await self._transcriber.transcribe(wav)
        if not result.ok:
            logger.warning("Transcription failed (session=%s): %s", utterance.session_id, result.error)
            yield ErrorEvent(error=ERR_TRANSCRIPTION, details=result.error)
            return
        user_text = result.text.strip()
        logger.info("Transcribed text: %s", user_text)

        yield ProgressEvent(message=MSG_GENERATING)
        reply = (await self._generator.generate(user_text)).strip()

        yield ProgressEvent(message=MSG_SYNTHESIZING)
        audio = await self._synthesizer.synthesize(reply)
        if not audio:
            yield ErrorEvent(error=ERR_SYNTHESIS)
            return
        yield FinalResponseEvent(
            userText=user_text,
            aiResponse=reply,
            audio=base64.b64encode(audio).decode("ascii"),
        )

    # --- request/response helpers for the HTTP routes ---

    async def transcribe(self, container: bytes) -> TranscriptionResult:
        return await self._transcriber.transcribe(container)

    async def reply_to_text(self, message: str) -> tuple[str, bytes | None]:
        """Generate a reply and its speech. Audio is None when synthesis failed."""
        reply = (await self._generator.generate(message)).strip()
        audio = await self._synthesizer.synthesize(reply)
        return reply, audio


async def deliver(events: AsyncIterator[OutboundEvent], send: SendEvent) -> int:
    """
    Send every event in order. The sequence is always drained, even after the
    destination closes, so the pipeline runs to completion. Returns the number
    of events actually delivered.
    """
    delivered = 0
    async for event in events:
        if await send(event):
            delivered += 1
        else:
            logger.debug("Dropped %s for closed connection", type(event).__name__)
    return delivered
