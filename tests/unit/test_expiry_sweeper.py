"""Unit tests for the ExpirySweeper worker."""

import asyncio
from unittest.mock import MagicMock

from schemas.models.challenge import ChallengeRecord
from workers.expiry_sweeper import ExpirySweeper


class TestRunOnce:
    def test_sweeps_expired_entries(self, service, clock):
        service.challenges.put(
            "a" * 12,
            ChallengeRecord(expected_answer="x", provider_key="ABCDEFGHIJ", expires_at=clock() - 1),
        )
        service.proofs.put("b" * 12, clock() - 1)
        assert ExpirySweeper(service).run_once() == (1, 1)
        assert len(service.challenges) == 0
        assert len(service.proofs) == 0

    def test_never_raises(self):
        service = MagicMock()
        service.sweep.side_effect = RuntimeError("boom")
        assert ExpirySweeper(service).run_once() == (0, 0)


class TestLifecycle:
    async def test_start_and_stop(self, service):
        sweeper = ExpirySweeper(service, interval_seconds=60)
        assert sweeper.running is False
        sweeper.start()
        assert sweeper.running is True
        await sweeper.stop()
        assert sweeper.running is False

    async def test_start_is_idempotent(self, service):
        sweeper = ExpirySweeper(service, interval_seconds=60)
        sweeper.start()
        task = sweeper._task
        sweeper.start()
        assert sweeper._task is task
        await sweeper.stop()

    async def test_stop_without_start(self, service):
        await ExpirySweeper(service).stop()

    async def test_runs_on_interval_and_survives_errors(self):
        service = MagicMock()
        service.sweep.side_effect = [RuntimeError("boom"), (0, 0), (0, 0), (0, 0), (0, 0)]
        sweeper = ExpirySweeper(service, interval_seconds=0.01)
        sweeper.start()
        for _ in range(100):
            if service.sweep.call_count >= 3:
                break
            await asyncio.sleep(0.01)
        await sweeper.stop()
        assert service.sweep.call_count >= 3
