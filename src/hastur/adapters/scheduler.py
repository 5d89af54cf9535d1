"""Thread-based periodic scheduler."""

import logging
import threading
from collections.abc import Callable

from hastur.core.models import Interval

logger = logging.getLogger(__name__)


def _interval_seconds(interval: Interval | float) -> float:
    if isinstance(interval, Interval):
        return interval.seconds
    if isinstance(interval, bool) or not isinstance(interval, (int, float)):
        raise ValueError(f"every() called with bad interval: {interval!r}")
    if interval <= 0:
        raise ValueError(f"every() called with bad interval: {interval!r}")
    return float(interval)


class ThreadTask:
    """A callback repeating on its own daemon thread until cancelled."""

    def __init__(self, seconds: float, callback: Callable[[], object]) -> None:
        self.seconds = seconds
        self._callback = callback
        self._stopped = threading.Event()
        name = getattr(callback, "__name__", "callback")
        self._thread = threading.Thread(
            target=self._run, name=f"hastur-every-{name}", daemon=True
        )

    @property
    def active(self) -> bool:
        return not self._stopped.is_set()

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        """Stop the task and wait for an in-flight callback to finish."""
        self._stopped.set()
        if (
            self._thread.is_alive()
            and threading.current_thread() is not self._thread
        ):
            self._thread.join()

    def _run(self) -> None:
        while not self._stopped.wait(self.seconds):
            try:
                self._callback()
            except Exception:
                logger.exception("Periodic callback %r raised", self._callback)


class ThreadScheduler:
    """SchedulerPort implementation running each task on a daemon thread.

    Example:
        ```python
        scheduler = ThreadScheduler()
        task = scheduler.every(Interval.FIVE_SECS, report_queue_depth)
        ...
        task.cancel()
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tasks: list[ThreadTask] = []

    def every(
        self, interval: Interval | float, callback: Callable[[], object]
    ) -> ThreadTask:
        """Invoke ``callback`` repeatedly, first after one full interval.

        Args:
            interval: An Interval member or a positive number of seconds.
            callback: Zero-argument callable. Exceptions it raises are
                logged and do not stop the task.

        Returns:
            Handle that cancels the task.

        Raises:
            ValueError: If the interval is not an Interval or positive number.
        """
        task = ThreadTask(_interval_seconds(interval), callback)
        with self._lock:
            self._tasks = [t for t in self._tasks if t.active]
            self._tasks.append(task)
        task.start()
        return task

    def shutdown(self) -> None:
        with self._lock:
            tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
