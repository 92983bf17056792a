"""Periodic and on-demand ingestion of the telemetry feed."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from starlette.concurrency import run_in_threadpool

from app.schemas import Reading
from datastore.errors import PersistenceError
from datastore.reading_store import ReadingStore, build_default_reading_store
from feeds.thingspeak import FeedClient, FetchError, build_default_feed_client
from models.records import RawFeedRecord
from services.normalizer import normalize_record
from settings import get_settings

logger = logging.getLogger(__name__)

Normalizer = Callable[[RawFeedRecord], Reading]


class SchedulerState(str, Enum):
    idle = "idle"
    running = "running"


class CycleOutcome(str, Enum):
    succeeded = "succeeded"
    failed = "failed"
    skipped = "skipped"


@dataclass(frozen=True)
class CycleReport:
    """What a single trigger of the ingestion cycle did."""

    outcome: CycleOutcome
    trigger: str
    fetched_count: int = 0
    stored_count: int = 0
    error: Optional[str] = None
    duration_ms: int = 0


class IngestionScheduler:
    """Runs fetch, normalize and store cycles, never more than one at a time.

    Cycles start either from the interval job registered by :meth:`start` or
    from :meth:`trigger`. A trigger that arrives while a cycle is in flight is
    dropped, not queued.
    """

    JOB_ID = "ingest_feed"

    def __init__(
        self,
        feed_client: FeedClient,
        store: ReadingStore,
        interval_seconds: float = 60.0,
        normalizer: Normalizer = normalize_record,
    ) -> None:
        self.feed_client = feed_client
        self.store = store
        self.interval_seconds = interval_seconds
        self.normalizer = normalizer
        self._guard = asyncio.Lock()
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.running if self._guard.locked() else SchedulerState.idle

    @property
    def is_started(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    async def trigger(self) -> CycleReport:
        """Run one cycle now and report its outcome to the caller."""
        return await self.run_cycle(trigger="manual")

    async def run_cycle(self, trigger: str = "manual") -> CycleReport:
        # No await between the check and the acquire, so this is atomic on the loop.
        if self._guard.locked():
            logger.info(
                "Ingestion cycle already running; trigger ignored",
                extra={"trigger": trigger, "status": CycleOutcome.skipped.value},
            )
            return CycleReport(outcome=CycleOutcome.skipped, trigger=trigger)

        async with self._guard:
            return await self._ingest(trigger)

    def start(self) -> None:
        """Register the interval job on the running event loop."""
        if self.is_started:
            return
        scheduler = AsyncIOScheduler(timezone="UTC")
        scheduler.add_job(
            self._run_scheduled,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=self.JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(
            "Scheduled feed ingestion every %ss",
            self.interval_seconds,
            extra={"endpoint": self.feed_client.endpoint},
        )

    def shutdown(self) -> None:
        if self._scheduler is not None and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

    async def _run_scheduled(self) -> None:
        await self.run_cycle(trigger="timer")

    async def _ingest(self, trigger: str) -> CycleReport:
        start_time = time.perf_counter()
        fetched = 0
        stored = 0
        error: Optional[str] = None

        try:
            records = await self.feed_client.fetch()
            fetched = len(records)
            for record in records:
                reading = self.normalizer(record)
                await run_in_threadpool(self.store.append, reading)
                stored += 1
        except (FetchError, PersistenceError) as exc:
            error = str(exc)
            logger.error(
                "Error fetching feed data",
                extra={"trigger": trigger, "reason": error, "stored_count": stored},
            )
        except Exception as exc:  # pragma: no cover - keeps the timer alive on bugs
            error = repr(exc)
            logger.exception(
                "Unexpected failure during ingestion cycle",
                extra={"trigger": trigger, "stored_count": stored},
            )

        duration_ms = int((time.perf_counter() - start_time) * 1000)
        outcome = CycleOutcome.failed if error else CycleOutcome.succeeded
        if outcome is CycleOutcome.succeeded:
            logger.info(
                "Feed data fetched and stored",
                extra={
                    "trigger": trigger,
                    "status": outcome.value,
                    "fetched_count": fetched,
                    "stored_count": stored,
                    "duration_ms": duration_ms,
                },
            )
        return CycleReport(
            outcome=outcome,
            trigger=trigger,
            fetched_count=fetched,
            stored_count=stored,
            error=error,
            duration_ms=duration_ms,
        )


@lru_cache
def build_default_scheduler() -> IngestionScheduler:
    """Factory that wires the scheduler with the configured feed and store."""
    settings = get_settings()
    return IngestionScheduler(
        feed_client=build_default_feed_client(),
        store=build_default_reading_store(),
        interval_seconds=settings.poll_interval,
    )
