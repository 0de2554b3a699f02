"""Shutdown signalling between the signal handlers and the server task."""
import asyncio

import structlog

logger = structlog.get_logger()


class GracefulShutdown:
    """One-shot shutdown signal shared by the serving tasks.

    Attributes:
        timeout: Seconds in-flight searches get to finish after the signal.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        """Initialize shutdown coordinator.

        Args:
            timeout: Seconds in-flight searches get to finish.
        """
        self.timeout = timeout
        self._event = asyncio.Event()

    @property
    def is_triggered(self) -> bool:
        """Whether the shutdown signal has been received."""
        return self._event.is_set()

    def trigger(self) -> None:
        """Signal shutdown; repeated calls have no further effect."""
        if self._event.is_set():
            return
        logger.info("shutdown_triggered", timeout_seconds=self.timeout)
        self._event.set()

    async def wait_for_trigger(self) -> None:
        """Block until trigger() is called from a signal handler."""
        await self._event.wait()
