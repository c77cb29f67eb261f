"""
Background task that periodically deletes expired verification codes.

Runs inside the API process: started from the app lifespan and cancelled on
shutdown. A failing sweep is logged and retried on the next tick.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from services.verification_service import VerificationService
from shared.logging import get_logger

log = get_logger(__name__)


class CodeSweeper:
    def __init__(self, verification: VerificationService, interval_seconds: int = 3600) -> None:
        self._verification = verification
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        try:
            return await self._verification.cleanup_expired()
        except Exception as e:
            log.error("code_sweep_failed", error=str(e), error_type=type(e).__name__)
            return 0

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="code-sweeper")
        log.info("code_sweeper_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("code_sweeper_stopped")
