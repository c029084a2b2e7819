"""Periodic expiry sweep for the in-memory challenge and proof stores.

Owned by the application lifespan: ``start()`` on startup, ``stop()`` on
shutdown. A failing tick is logged and the loop keeps running; the sweep
never takes the process down.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from services.captcha_service import CaptchaLifecycleService
from shared.logging import get_logger

log = get_logger(__name__)


class ExpirySweeper:
    def __init__(self, service: CaptchaLifecycleService, interval_seconds: float = 600.0) -> None:
        self._service = service
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> tuple[int, int]:
        """Sweep both stores once. Returns (challenges, proofs) removed."""
        try:
            challenges, proofs = self._service.sweep()
        except Exception as e:
            log.error(
                "challenge_sweep_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=e,
            )
            return 0, 0
        if challenges or proofs:
            log.info("challenge_sweep", challenges_removed=challenges, proofs_removed=proofs)
        return challenges, proofs

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="captcha-expiry-sweeper")
        log.info("expiry_sweeper_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log.info("expiry_sweeper_stopped")
