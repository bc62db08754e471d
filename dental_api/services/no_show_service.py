"""Background sweep that marks missed appointments as no-shows."""

import asyncio
import contextlib
from collections.abc import Callable
from datetime import datetime

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dental_api.services.appointment_service import AppointmentService

logger = structlog.get_logger(__name__)


class NoShowSweeper:
    """
    Periodically closes scheduled or confirmed appointments nobody attended.

    The first sweep runs after ``initial_delay`` seconds, then every
    ``interval`` seconds. A failed sweep is logged and the loop keeps going.
    ``stop()`` is honoured while sleeping; a sweep in flight is cancelled if
    it does not finish within ``shutdown_timeout``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        interval: float = 300.0,
        initial_delay: float = 30.0,
        grace_minutes: int = 15,
        clock: Callable[[], datetime] = datetime.now,
        shutdown_timeout: float = 5.0,
    ):
        """Initialize the sweeper; ``clock`` returns clinic-local wall-clock time."""
        self.session_factory = session_factory
        self.interval = interval
        self.initial_delay = initial_delay
        self.grace_minutes = grace_minutes
        self.clock = clock
        self.shutdown_timeout = shutdown_timeout
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        """Whether the sweep loop task is alive."""
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Launch the sweep loop on the running event loop."""
        self._stop_event.clear()
        self._task = asyncio.create_task(self.run(), name="no-show-sweeper")
        return self._task

    async def stop(self) -> None:
        """Signal the loop to stop and wait for it to exit."""
        self._stop_event.set()

        if self._task is None:
            return

        done, _ = await asyncio.wait({self._task}, timeout=self.shutdown_timeout)
        if not done:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

        self._task = None

    async def _sleep(self, seconds: float) -> bool:
        """Sleep unless stopped first; returns True when a stop was requested."""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except TimeoutError:
            return False
        return True

    async def run(self) -> None:
        """Sweep loop."""
        logger.info(
            "no_show_sweeper_started",
            interval=self.interval,
            initial_delay=self.initial_delay,
            grace_minutes=self.grace_minutes,
        )

        stopped = await self._sleep(self.initial_delay)
        while not stopped:
            await self.run_once()
            stopped = await self._sleep(self.interval)

        logger.info("no_show_sweeper_stopped")

    async def run_once(self) -> int:
        """Run a single sweep; returns the number of appointments marked."""
        try:
            async with self.session_factory() as session:
                count = await AppointmentService(session).mark_no_shows(
                    self.clock(), self.grace_minutes
                )
        except Exception as e:
            logger.error("no_show_sweep_failed", error=str(e), exc_info=True)
            return 0

        if count:
            logger.info("no_show_sweep_completed", marked=count)
        return count
