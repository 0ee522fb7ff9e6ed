"""
Periodic purge of abandoned rooms.

A coarse sweep rather than one timer per room: a room outlives its TTL by at most one
tick. Members still waiting in an expired room get `uploader-disconnected` so their UI
can abort, then the group is released so the code can be handed out again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from .lifecycle import SessionLifecycle

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_INTERVAL_SECONDS = 60


class ExpiryReaper:
    def __init__(
        self,
        lifecycle: SessionLifecycle,
        ttl: float = DEFAULT_TTL_SECONDS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ):
        self.lifecycle = lifecycle
        self.ttl = ttl
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self, now: Optional[float] = None) -> List[str]:
        removed = self.lifecycle.registry.purge_expired(self.ttl, now=now)
        for removal in removed:
            await self.lifecycle.close_room(removal, exclude=removal.session.owner)
        if removed:
            logger.info("expired %d room(s): %s", len(removed), ", ".join(r.code for r in removed))
        return [r.code for r in removed]

    async def run(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.interval)
                await self.sweep()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("room expiry sweep failed")

    def ensure_started(self) -> None:
        """Start the background task on the running loop if it is not already running."""
        loop = asyncio.get_running_loop()
        if not self.running or self._task.get_loop() is not loop:
            self._task = loop.create_task(self.run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
