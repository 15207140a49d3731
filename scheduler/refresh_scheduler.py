"""Background ticker that refreshes the event cache at a fixed interval."""
import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """
    Runs a callback on a daemon thread every interval_seconds.

    The first run happens one full interval after start(), since the cache
    already loads itself at startup.
    """

    def __init__(self, callback: Callable[[], Any], interval_seconds: float = 3600):
        """
        Initialize the scheduler.

        Args:
            callback: Zero-argument callable, usually EventCache.refresh
            interval_seconds: Delay between runs (default: 1 hour)
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.callback = callback
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background thread. No-op if already running."""
        if self.is_running:
            logger.debug("Refresh scheduler already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="event-cache-refresh",
            daemon=True
        )
        self._thread.start()
        logger.info(
            f"Refresh scheduler started (every {self.interval_seconds} seconds)",
            extra={'interval_seconds': self.interval_seconds}
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Signal the thread to exit and wait for it.

        A callback already running is allowed to finish.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Refresh scheduler stopped")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            logger.info("Scheduled refresh triggered")
            try:
                self.callback()
            except Exception as e:
                # keep ticking; the next interval retries
                logger.error(
                    f"Scheduled refresh failed: {e}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
