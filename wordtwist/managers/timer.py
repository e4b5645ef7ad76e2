from __future__ import annotations
import asyncio
import logging
import time
from typing import Optional

from ..constants import CLEANUP_INTERVAL_SECONDS, TIMER_DURATION, TIMER_GRACE
from .sessions import RoundSession

logger = logging.getLogger(__name__)

def is_expired_for_timer(session: RoundSession, now: Optional[float] = None,
                         duration: float = TIMER_DURATION, grace: float = TIMER_GRACE) -> bool:
    """True once a timed round has run past its duration plus the grace window."""
    if session.mode != 'timed':
        return False
    now = time.time() if now is None else now
    return now - session.created_at > duration + grace

class SessionReaper:
    """Periodically evicts expired in-memory sessions to bound memory.

    Housekeeping only: stores already treat expired entries as absent.
    """

    def __init__(self, *stores, interval: float = CLEANUP_INTERVAL_SECONDS):
        self.stores = stores
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def sweep(self) -> int:
        cleaned = 0
        for store in self.stores:
            cleaned += await store.purge_expired()
        if cleaned > 0:
            logger.info('Cleaned up %d expired game sessions', cleaned)
        return cleaned

    async def _run(self):
        try:
            while True:
                await asyncio.sleep(self.interval)
                await self.sweep()
        except asyncio.CancelledError:
            return
