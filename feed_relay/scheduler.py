"""Fixed-period scheduler driving the polling job."""

import threading
import time
from collections.abc import Callable

from .logging_config import create_execution_logger

IDLE = "idle"
ARMED = "armed"
RUNNING = "running"
STOPPED = "stopped"


class Scheduler:
    """Runs one job repeatedly on a fixed period, never overlapping itself.

    Ticks execute on the calling thread. A tick that overruns its period
    pushes the next firing back to the moment it finishes; missed firings
    are dropped, not queued.
    """

    def __init__(
        self,
        job: Callable[[], object],
        interval_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        execution_id: str | None = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.job = job
        self.interval_seconds = interval_seconds
        self.clock = clock
        self.state = IDLE
        self.ticks = 0
        self._stop_event = threading.Event()
        self.logger = create_execution_logger("scheduler", execution_id)

    def sleep(self, seconds: float) -> None:
        """Wait for seconds, returning early if stop() is called."""
        self._stop_event.wait(seconds)

    def stop(self) -> None:
        self._stop_event.set()

    def run(self, max_ticks: int | None = None) -> None:
        """
        Arm the timer and fire the job until stopped.

        The first tick fires immediately.

        Args:
            max_ticks: Stop after this many ticks (None runs forever)
        """
        if self.state != IDLE:
            raise RuntimeError(f"Scheduler already started (state={self.state})")

        self.state = ARMED
        self.logger.info(
            "Scheduler armed", interval_seconds=self.interval_seconds
        )
        next_fire = self.clock()

        while not self._stop_event.is_set():
            delay = next_fire - self.clock()
            if delay > 0:
                self.sleep(delay)
                if self._stop_event.is_set():
                    break

            self.state = RUNNING
            started = self.clock()
            try:
                self.job()
            except Exception as e:
                self.logger.exception(
                    f"Unhandled error in scheduled job: {e}",
                    error_kind=type(e).__name__,
                )
            finally:
                self.ticks += 1
                self.state = ARMED

            if max_ticks is not None and self.ticks >= max_ticks:
                break

            next_fire = started + self.interval_seconds
            now = self.clock()
            if next_fire < now:
                self.logger.warning(
                    "Tick overran its period, firing again immediately",
                    overrun_seconds=now - next_fire,
                )
                next_fire = now

        self.state = STOPPED
        self.logger.info("Scheduler stopped", ticks=self.ticks)
