import enum
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from config import REFRESH_INTERVAL_SECONDS
from errors import ValuationError
from models import Outcome, ValuationResult
from valuation import ValuationJob

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "valuation_refresh"


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    REFRESHING = "refreshing"


class RefreshScheduler:
    """
    Runs valuation jobs on a fixed period and hands the latest one to readers.

    - One worker thread executes jobs strictly in submission order.
    - An APScheduler interval job calls refresh() every interval_seconds.
    - The handle to the most recently submitted job is the only state shared
      with readers. It is swapped and read under self._lock; submission happens
      under the same lock so handles are published in submission order.
    - current_outcome() waits for that job outside the lock. A hung network
      call therefore blocks readers of that job, never the next refresh().
    """

    def __init__(
        self,
        job_factory: Callable[[], ValuationJob],
        interval_seconds: float = REFRESH_INTERVAL_SECONDS,
        scheduler: BackgroundScheduler | None = None,
        resources: tuple = (),
    ):
        self._job_factory = job_factory
        # Closed on shutdown(): clients shared by every job
        self.resources = tuple(resources)
        self.interval_seconds = interval_seconds
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="valuation")
        self._scheduler = scheduler or BackgroundScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )
        self._lock = threading.Lock()
        self._current: Future | None = None
        self._previous: Future | None = None
        self._submitted = 0

    def start(self) -> None:
        self.refresh()
        self._scheduler.add_job(
            self.refresh,
            trigger="interval",
            seconds=self.interval_seconds,
            id=REFRESH_JOB_ID,
            name="Valuation refresh",
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Valuation refresh scheduled every %s seconds", self.interval_seconds)

    def refresh(self) -> Future:
        job = self._job_factory()
        with self._lock:
            future = self._executor.submit(job.run)
            self._previous, self._current = self._current, future
            self._submitted += 1
            generation = self._submitted
        future.add_done_callback(lambda f: self._on_done(f, generation))
        logger.debug("Submitted valuation job #%d", generation)
        return future

    def _on_done(self, future: Future, generation: int) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if isinstance(exc, ValuationError):
            logger.warning("Valuation job #%d failed: %s", generation, exc)
        elif exc is not None:
            logger.error("Valuation job #%d crashed", generation, exc_info=exc)

    @property
    def state(self) -> SchedulerState:
        with self._lock:
            if self._current is None:
                return SchedulerState.IDLE
            if self._previous is not None and self._previous.done() and not self._current.done():
                return SchedulerState.REFRESHING
            return SchedulerState.RUNNING

    def current_outcome(self, timeout: float | None = None) -> Outcome[ValuationResult]:
        """
        Block until the most recently submitted job finishes and return its
        outcome. Never returns an older result while a newer job is pending.

        Raises RuntimeError before start()/refresh() and
        concurrent.futures.TimeoutError if timeout elapses.
        """
        with self._lock:
            future = self._current
        if future is None:
            raise RuntimeError("No valuation submitted yet; call start() first")
        try:
            return Outcome.success(future.result(timeout=timeout))
        except FutureTimeout:
            # Only the wait timed out if the job is still pending; otherwise the job raised it
            if not future.done():
                raise
            return Outcome.failure(future.exception())
        except Exception as exc:
            return Outcome.failure(exc)

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        # An in-flight job is abandoned, queued ones are cancelled
        self._executor.shutdown(wait=False, cancel_futures=True)
        for resource in self.resources:
            resource.close()
        logger.info("Valuation scheduler stopped")
