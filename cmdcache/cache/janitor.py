"""Background thread that periodically runs cache maintenance."""

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Janitor:
    """Runs *task* every *interval_ms* on a daemon thread until stopped.

    Args:
        interval_ms: Delay between ticks.
        task: Maintenance callable; exceptions are logged and the loop continues.
        name: Thread name.
    """

    def __init__(
        self, interval_ms: int, task: Callable[[], object], name: str = "cmdcache-janitor"
    ) -> None:
        self.interval_ms = interval_ms
        self._task = task
        self._name = name
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug("Janitor started (every %d ms)", self.interval_ms)

    def stop(self, timeout: float = 5.0, *, wait: bool = True) -> None:
        """Signal the loop to exit; join it unless *wait* is False or called from a tick."""
        thread = self._thread
        if thread is None:
            return
        self._stop_event.set()
        self._thread = None
        if wait and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.debug("Janitor stopped")

    def tick(self) -> None:
        try:
            self._task()
        except Exception:
            logger.exception("Janitor tick failed")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_ms / 1000):
            self.tick()
