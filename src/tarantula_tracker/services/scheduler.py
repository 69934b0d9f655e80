"""Recurring clock that evaluates active owners once per tick."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from tarantula_tracker.domain.models import OwnerRecord
from tarantula_tracker.services.notifications import CareNotificationService
from tarantula_tracker.services.owners import OwnerService

logger = logging.getLogger(__name__)

DEFAULT_TICK_SECONDS = 60.0
DEFAULT_MAX_CONCURRENCY = 5


class ClockState(Enum):
    """Lifecycle of a schedule clock."""

    STOPPED = "stopped"
    RUNNING = "running"
    EVALUATING = "evaluating"


@dataclass(frozen=True)
class TickSummary:
    """Outcome counts for a single tick."""

    started_at: datetime
    owners: int = 0
    eligible: int = 0
    notified: int = 0
    failed: int = 0


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ScheduleClock:
    """Drive per-owner evaluation on a fixed period.

    A clock runs at most once: after ``stop`` a new instance has to be
    created. Nothing is carried over between ticks.
    """

    owner_service: OwnerService
    notification_service: CareNotificationService
    tick_seconds: float = DEFAULT_TICK_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    clock: Callable[[], datetime] = _utc_now
    state: ClockState = field(default=ClockState.STOPPED, init=False)
    _stop_event: asyncio.Event = field(default_factory=asyncio.Event, init=False)
    _task: asyncio.Task[None] | None = field(default=None, init=False)
    _finished: bool = field(default=False, init=False)

    def start(self) -> None:
        """Start the background loop on the running event loop."""
        if self._finished:
            raise RuntimeError("A stopped clock cannot be restarted")
        if self._task is not None:
            return
        self.state = ClockState.RUNNING
        self._task = asyncio.create_task(self._run())
        logger.info("Schedule clock started", extra={"tick_seconds": self.tick_seconds})

    async def stop(self) -> None:
        """Signal the loop to stop and wait for any in-flight tick."""
        self._finished = True
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None
        self.state = ClockState.STOPPED
        logger.info("Schedule clock stopped")

    async def tick(self) -> TickSummary:
        """Evaluate every active owner once."""
        now = self.clock()
        self.state = ClockState.EVALUATING
        try:
            owners = await asyncio.to_thread(self.owner_service.list_active_owners, now)
        except Exception:
            logger.exception("Failed to load active owners")
            self.state = ClockState.RUNNING
            return TickSummary(started_at=now, failed=1)

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def run_owner(owner: OwnerRecord) -> str:
            async with semaphore:
                try:
                    payload = await self.notification_service.process_owner(
                        owner, now, window_seconds=self.tick_seconds
                    )
                except Exception:
                    logger.exception(
                        "Failed to process owner", extra={"owner_id": str(owner.id)}
                    )
                    return "failed"
            if payload is None:
                return "skipped"
            return "eligible" if payload.is_empty else "notified"

        outcomes = await asyncio.gather(*(run_owner(owner) for owner in owners))
        self.state = ClockState.RUNNING
        return TickSummary(
            started_at=now,
            owners=len(owners),
            eligible=sum(outcome in {"eligible", "notified"} for outcome in outcomes),
            notified=outcomes.count("notified"),
            failed=outcomes.count("failed"),
        )

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while not self._stop_event.is_set():
            try:
                summary = await self.tick()
            except Exception:
                logger.exception("Schedule clock tick failed")
                self.state = ClockState.RUNNING
            else:
                self._log_summary(summary)
            # Fixed rate: the next tick is due one period after this one started.
            deadline += self.tick_seconds
            delay = deadline - loop.time()
            if delay < 0:
                logger.warning("Schedule clock tick overran its period")
                deadline = loop.time()
                delay = 0
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
            except TimeoutError:
                continue

    def _log_summary(self, summary: TickSummary) -> None:
        if summary.notified or summary.failed:
            logger.info(
                "Tick finished: %d owners, %d notified, %d failed",
                summary.owners,
                summary.notified,
                summary.failed,
            )
