"""Background rotation and purging of signing keys."""

import asyncio
import logging
import time
from typing import Callable, Optional

from ...errors import KeyGenerationFailure
from .manager import SigningKeyManager

logger = logging.getLogger(__name__)


class KeyRotationScheduler:
    """
    Periodically rotates the signing key and purges expired retained keys.

    A failed rotation is logged and retried on the next tick; the manager
    keeps serving its last good key in the meantime.
    """

    def __init__(
        self,
        manager: SigningKeyManager,
        rotation_interval: float = 0,
        purge_interval: float = 300,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            manager: Key manager to drive
            rotation_interval: Seconds between scheduled rotations, 0 disables
            purge_interval: Seconds between purge passes
            clock: Time source
        """
        self.manager = manager
        self.rotation_interval = rotation_interval
        self.purge_interval = purge_interval
        self._clock = clock
        self._task: Optional[asyncio.Task] = None

    @property
    def tick_interval(self) -> float:
        intervals = [i for i in (self.rotation_interval, self.purge_interval) if i > 0]
        return min(intervals) if intervals else 0

    def rotation_due(self) -> bool:
        if self.rotation_interval <= 0:
            return False
        age = self._clock() - self.manager.current().created_at
        return age >= self.rotation_interval

    async def tick(self) -> None:
        """Rotate if the current key is old enough, then purge expired keys."""
        if self.rotation_due():
            try:
                # RSA generation is CPU-bound
                await asyncio.to_thread(self.manager.rotate)
            except KeyGenerationFailure as e:
                logger.error(f"Scheduled key rotation failed: {e}")

        self.manager.purge_expired()

    async def _run(self) -> None:
        interval = self.tick_interval
        while True:
            await asyncio.sleep(interval)
            try:
                await self.tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Key maintenance tick failed: {e}")

    def start(self) -> None:
        """Start the background task on the running loop."""
        if self._task is not None:
            return
        if self.tick_interval <= 0:
            logger.info("Key maintenance disabled (no rotation or purge interval)")
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(
            f"Key maintenance started (rotation every {self.rotation_interval}s, "
            f"purge every {self.purge_interval}s)"
        )

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Key maintenance stopped")
