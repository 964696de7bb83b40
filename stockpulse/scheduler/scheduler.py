"""Transition wake-ups and polling jobs using APScheduler 3.x."""

import inspect
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from stockpulse.market.models import SessionState, TransitionPlan
from stockpulse.utils.constants import ET, TRANSITION_JOB_KEY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancelHandle:
    """Identifies one armed wake. Only its owner should cancel it."""

    key: str
    job_id: str
    fires_at: datetime
    predicted_state: SessionState


class TransitionScheduler:
    """Arms one-shot wakes at session transitions and hosts recurring poll jobs.

    At most one wake is outstanding per key: arming again cancels the previous
    wake for that key before adding the new one. Callbacks always run on the
    event loop, whether they are plain functions or coroutine functions.
    """

    def __init__(self, tz: tzinfo = ET) -> None:
        self._tz = tz
        self._scheduler = AsyncIOScheduler(timezone=tz)
        self._armed: dict[str, str] = {}

    def arm_once(
        self,
        plan: TransitionPlan,
        on_fire: Callable[[], object],
        *,
        key: str = TRANSITION_JOB_KEY,
    ) -> CancelHandle:
        """Arrange exactly one call of *on_fire* after the plan's duration."""
        previous = self._armed.pop(key, None)
        if previous is not None:
            self._remove_job(previous)

        fires_at = datetime.now(timezone.utc) + timedelta(
            milliseconds=plan.milliseconds_until_change
        )
        handle = CancelHandle(
            key=key,
            job_id=f"{key}:{uuid.uuid4().hex[:12]}",
            fires_at=fires_at,
            predicted_state=plan.predicted_next_state,
        )
        self._scheduler.add_job(
            self._fire,
            DateTrigger(run_date=fires_at),
            args=(handle, on_fire),
            id=handle.job_id,
            misfire_grace_time=None,
            coalesce=True,
        )
        self._armed[key] = handle.job_id
        logger.info(
            "Armed %s in %d ms, expecting %s (%s)",
            key,
            plan.milliseconds_until_change,
            plan.predicted_next_state.name,
            plan.description,
        )
        return handle

    def cancel(self, handle: CancelHandle | None) -> None:
        """Cancel an armed wake. Safe to repeat, and a no-op once it has fired."""
        if handle is None:
            return
        if self._armed.get(handle.key) == handle.job_id:
            del self._armed[handle.key]
        if self._remove_job(handle.job_id):
            logger.info("Cancelled %s wake %s", handle.key, handle.job_id)

    def is_armed(self, key: str = TRANSITION_JOB_KEY) -> bool:
        return key in self._armed

    async def _fire(self, handle: CancelHandle, on_fire: Callable[[], object]) -> None:
        if self._armed.get(handle.key) == handle.job_id:
            del self._armed[handle.key]
        logger.info("Wake %s fired (expected %s)", handle.key, handle.predicted_state.name)
        result = on_fire()
        if inspect.isawaitable(result):
            await result

    def schedule_interval(self, job_id: str, func: Callable, interval_ms: int) -> None:
        """Run *func* every *interval_ms*, replacing any job with the same id."""
        self._remove_job(job_id)
        self._scheduler.add_job(
            func,
            IntervalTrigger(seconds=interval_ms / 1000, timezone=self._tz),
            id=job_id,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        logger.info("Registered job %s every %d ms", job_id, interval_ms)

    def remove(self, job_id: str) -> bool:
        """Remove a recurring job; returns False if it was not scheduled."""
        removed = self._remove_job(job_id)
        if removed:
            logger.info("Removed job %s", job_id)
        return removed

    def _remove_job(self, job_id: str) -> bool:
        try:
            self._scheduler.remove_job(job_id)
        except JobLookupError:
            return False
        return True

    def start(self) -> None:
        """Start the scheduler."""
        self._scheduler.start()
        logger.info("TransitionScheduler started")

    def shutdown(self) -> None:
        """Gracefully shutdown the scheduler."""
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._armed.clear()
        logger.info("TransitionScheduler shut down")

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def get_job(self, job_id: str):
        return self._scheduler.get_job(job_id)

    @property
    def jobs(self):
        """Return the list of scheduled jobs (for testing)."""
        return self._scheduler.get_jobs()
