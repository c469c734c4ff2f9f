"""
SequentialJobQueue: process-wide FIFO that runs one job at a time.

Utterances from every connection share this one execution slot. That bounds
resource use (one transcription/LLM/TTS chain in flight), at the cost that a
busy connection can delay another's reply.

- enqueue(job) returns a Future for that job's result or exception.
- A single worker task drains an asyncio.Queue; jobs complete in submission order.
- After each job settles the worker yields to the event loop before taking the next.
- A failing job only fails its own Future; later jobs still run.
- No cancellation: a job runs to completion even if its connection has closed.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class SequentialJobQueue:
    def __init__(self, name: str = "jobs") -> None:
        self._name = name
        self._channel: asyncio.Queue[tuple[int, Job, asyncio.Future[Any]]] = asyncio.Queue()
        self._worker: asyncio.Task[None] | None = None
        self._processing = False
        self._submitted = 0
        self._closed = False

    @property
    def pending(self) -> int:
        """Jobs waiting to start (excludes the one running)."""
        return self._channel.qsize()

    @property
    def is_processing(self) -> bool:
        return self._processing

    def start(self) -> None:
        """Start the worker task. Called lazily by enqueue(); needs a running loop."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(
                self._run(), name=f"{self._name}-worker"
            )

    def enqueue(self, job: Job) -> asyncio.Future[Any]:
        """Append job to the FIFO. Await the returned Future for its result."""
        if self._closed:
            raise RuntimeError(f"Job queue {self._name!r} is closed")
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        self._submitted += 1
        self._channel.put_nowait((self._submitted, job, future))
        logger.debug("Job #%d queued (pending=%d)", self._submitted, self.pending)
        self.start()
        return future

    async def _run(self) -> None:
        while True:
            job_id, job, future = await self._channel.get()
            self._processing = True
            try:
                result = await job()
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as err:
                logger.warning("Job #%d failed: %s", job_id, err)
                if not future.done():
                    future.set_exception(err)
            else:
                if not future.done():
                    future.set_result(result)
            finally:
                self._processing = False
                self._channel.task_done()
            # Fresh scheduler turn before the next job
            await asyncio.sleep(0)

    async def join(self) -> None:
        """Wait until every job enqueued so far has settled."""
        await self._channel.join()

    async def close(self) -> None:
        """Stop the worker. Jobs still waiting get their Futures cancelled."""
        self._closed = True
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        while not self._channel.empty():
            _, _, future = self._channel.get_nowait()
            self._channel.task_done()
            if not future.done():
                future.cancel()
