"""In-process outbound side-effect queue and its worker.

Single-process only: jobs live in an asyncio.Queue and are consumed by a
background task started from the FastAPI lifespan. Each job is retried with
exponential backoff (tenacity); a job that still fails is logged and dropped.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from tenacity import AsyncRetrying, RetryError, stop_after_attempt, wait_exponential

from application.ports.side_effects import SideEffectJob, SideEffectQueue
from core.config import SideEffectSettings
from core.logging_config import get_logger


logger = get_logger(__name__)

JobHandler = Callable[[SideEffectJob], Awaitable[None]]


class InMemorySideEffectQueue(SideEffectQueue):
    def __init__(self, max_size: int = 0) -> None:
        self._queue: asyncio.Queue[SideEffectJob] = asyncio.Queue(maxsize=max_size)

    def enqueue(self, job: SideEffectJob) -> bool:  # type: ignore[override]
        try:
            self._queue.put_nowait(job)
        except asyncio.QueueFull:
            logger.error("side_effect_queue_full", job_id=job.id, name=job.name)
            return False
        return True

    async def get(self) -> SideEffectJob:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()


class SideEffectWorker:
    def __init__(
        self,
        queue: InMemorySideEffectQueue,
        handler: JobHandler,
        config: Optional[SideEffectSettings] = None,
    ) -> None:
        self.queue = queue
        self.handler = handler
        self.config = config or SideEffectSettings()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="side-effect-worker")
        logger.info("side_effect_worker_started")

    async def _run(self) -> None:
        while True:
            job = await self.queue.get()
            try:
                await self._execute(job)
            finally:
                self.queue.task_done()

    async def _execute(self, job: SideEffectJob) -> None:
        attempts = max(1, self.config.max_attempts)
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(multiplier=self.config.backoff_base, max=self.config.backoff_max),
            ):
                with attempt:
                    await self.handler(job)
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            logger.error(
                "side_effect_failed",
                job_id=job.id,
                kind=job.kind.value,
                name=job.name,
                order_id=job.context.get("order_id"),
                attempts=attempts,
                error=str(cause),
                error_type=type(cause).__name__,
            )

    async def drain(self, timeout: Optional[float] = None) -> None:
        """等待队列中已有任务全部处理完"""
        await asyncio.wait_for(self.queue.join(), timeout=timeout)

    async def stop(self, drain_timeout: Optional[float] = 5.0) -> None:
        if self._task is None:
            return
        try:
            await self.drain(drain_timeout)
        except asyncio.TimeoutError:
            logger.warning("side_effect_worker_drain_timeout", pending=self.queue.qsize())
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("side_effect_worker_stopped")
