# medsearch/application/initializer.py
from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from medsearch.application.bulk_import import DEFAULT_BATCH_SIZE, BulkImporter, ImportReport
from medsearch.application.index_lifecycle import IndexLifecycleManager
from medsearch.domain.errors import CatalogError, EngineUnreachable, InitializationExhausted
from medsearch.domain.models import MEDICINE_SCHEMA, IndexSchema
from medsearch.domain.ports import DatasetPort, SearchEnginePort

logger = logging.getLogger("medsearch.init")


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay, bounded retry. Every retry redoes the whole sequence."""
    max_attempts: int = 3
    delay_sec: float = 5.0


class CatalogInitializer:
    """
    Health check → recreate index → full import, with bounded retry.

    Runs once at startup and lazily from the query path when the index is
    missing. Only one run is in flight at a time: concurrent callers await
    the running task instead of starting their own.
    """

    def __init__(
        self,
        engine: SearchEnginePort,
        dataset: DatasetPort,
        index: str,
        *,
        schema: IndexSchema = MEDICINE_SCHEMA,
        batch_size: int = DEFAULT_BATCH_SIZE,
        policy: RetryPolicy = RetryPolicy(),
        engine_url: str = "",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.engine = engine
        self.dataset = dataset
        self.index = index
        self.schema = schema
        self.batch_size = batch_size
        self.policy = policy
        self.engine_url = engine_url
        self._sleep = sleep
        self.lifecycle = IndexLifecycleManager(engine)
        self.importer = BulkImporter(engine, index)
        self._inflight: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    async def initialize(self) -> bool:
        try:
            await self.initialize_or_raise()
        except InitializationExhausted:
            return False
        return True

    async def initialize_or_raise(self) -> ImportReport:
        task = self._inflight
        if task is None or task.done():
            task = asyncio.ensure_future(self._run())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            logger.info("Initialization already in flight; waiting for it")
        # shield: a cancelled caller must not cancel the shared run
        return await asyncio.shield(task)

    async def aclose(self) -> None:
        """Cancel a running initialization and wait until it has stopped."""
        task = self._inflight
        if task is None or task.done():
            return
        logger.info("Cancelling in-flight initialization")
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled():
            task.exception()  # mark retrieved; awaiters already got it

    async def _run(self) -> ImportReport:
        attempts_left = self.policy.max_attempts
        attempt = 0
        last_error: Optional[CatalogError] = None

        while attempts_left > 0:
            attempt += 1
            try:
                report = await self._attempt(attempt)
            except CatalogError as e:
                last_error = e
                attempts_left -= 1
                logger.error(
                    "Database initialization failed. attempt=%d code=%s error=%r Retries left: %d",
                    attempt, e.code, e, attempts_left,
                )
                if attempts_left > 0:
                    logger.info("Retrying in %.1f seconds...", self.policy.delay_sec)
                    await self._sleep(self.policy.delay_sec)
                continue

            logger.info(
                "Database initialization completed successfully. attempt=%d batches=%d documents=%d",
                attempt, report.batches, report.documents,
            )
            return report

        raise InitializationExhausted(self.policy.max_attempts, last_error)

    async def _attempt(self, attempt: int) -> ImportReport:
        logger.info("Checking if Elasticsearch is accessible... attempt=%d", attempt)
        if not await self.engine.ping():
            raise EngineUnreachable(self.engine_url)

        # dataset is read before the index is dropped
        records = await asyncio.to_thread(self.dataset.load)

        logger.info("Creating index... index=%s", self.index)
        await self.lifecycle.ensure_index(self.index, self.schema)

        logger.info("Importing data from CSV... records=%d", len(records))
        return await self.importer.import_all(records, self.batch_size)
