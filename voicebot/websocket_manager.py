"""
WebSocketManager: one live audio stream = one ConnectionSession.

Receive loop: binary PCM chunk -> UtteranceSegmenter -> (on boundary) one job on
the shared SequentialJobQueue. The loop never waits for a job; jobs run in
global submission order and keep running after this connection closes, in
which case their events are dropped by _send_event().
"""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any

from fastapi import WebSocket

from voicebot.audio.segmenter import Utterance, UtteranceSegmenter
from voicebot.job_queue import SequentialJobQueue
from voicebot.pipeline import VoicePipeline, deliver
from voicebot.schemas.events import OutboundEvent, event_to_json
from voicebot.session import ConnectionSession

logger = logging.getLogger(__name__)


class WebSocketManager:
    def __init__(
        self,
        websocket: WebSocket,
        segmenter: UtteranceSegmenter,
        pipeline: VoicePipeline,
        job_queue: SequentialJobQueue,
        session: ConnectionSession | None = None,
    ) -> None:
        self._ws = websocket
        self._segmenter = segmenter
        self._pipeline = pipeline
        self._queue = job_queue
        self._session = session or ConnectionSession()
        self._jobs: list[asyncio.Future[Any]] = []

    @property
    def session(self) -> ConnectionSession:
        return self._session

    @property
    def jobs(self) -> list[asyncio.Future[Any]]:
        """Futures of this connection's jobs that have not settled yet."""
        return self._jobs

    async def _send_event(self, event: OutboundEvent) -> bool:
        """Send one event; False (and no error) when the peer is gone."""
        if self._session.closed:
            return False
        try:
            await self._ws.send_text(event_to_json(event))
        except Exception as e:
            logger.debug("Send failed on session=%s, marking closed: %s", self._session.session_id, e)
            self._session.closed = True
            return False
        return True

    async def _run_job(self, utterance: Utterance) -> int:
        return await deliver(self._pipeline.process(utterance), self._send_event)

    def _on_job_done(self, future: asyncio.Future[Any]) -> None:
        if future in self._jobs:
            self._jobs.remove(future)
        if future.cancelled():
            return
        err = future.exception()
        if err is not None:
            logger.error("Pipeline job failed for session=%s: %s", self._session.session_id, err)

    def _submit(self, utterance: Utterance) -> None:
        future = self._queue.enqueue(functools.partial(self._run_job, utterance))
        future.add_done_callback(self._on_job_done)
        self._jobs.append(future)
        logger.info(
            "Queued utterance from session=%s (%d bytes, pending=%d)",
            self._session.session_id,
            len(utterance.pcm),
            self._queue.pending,
        )

    async def run(self) -> None:
        """Main loop: receive binary chunks until the client disconnects."""
        logger.info("New WebSocket connection on /ws/audio (session=%s)", self._session.session_id)
        try:
            while not self._session.closed:
                try:
                    msg = await self._ws.receive()
                except Exception as e:
                    logger.error("WebSocket error on session=%s: %s", self._session.session_id, e)
                    break
                if msg.get("type") == "websocket.disconnect":
                    break
                data = msg.get("bytes")
                if data is None:
                    continue
                logger.debug("[WebSocket] Received PCM chunk: %d bytes", len(data))
                try:
                    utterance = await self._segmenter.feed(self._session, data)
                except Exception:
                    logger.exception("Error handling chunk on session=%s", self._session.session_id)
                    continue
                if utterance is not None:
                    self._submit(utterance)
        finally:
            self._session.closed = True
            logger.info("WebSocket connection closed on /ws/audio (session=%s)", self._session.session_id)
