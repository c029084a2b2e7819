"""In-memory store of pending challenges.

Entries are single-use: ``take_if_valid`` looks up and removes in one
critical section, so two concurrent verifications of the same id can never
both see the record. An expired entry is removed the same way and reported
as absent, which makes "expired", "consumed" and "never issued" identical
to callers.

Abandoned challenges are reclaimed by ``sweep``, driven by the
ExpirySweeper worker rather than by request traffic.

The lock is a ``threading.Lock`` and no critical section awaits, so the
store is safe both on a single event loop and under threaded servers.
Per-process only; deployments with several workers must pin a challenge's
issue and verify to the same process.
"""

from __future__ import annotations

import threading
from typing import Optional

from schemas.models.challenge import ChallengeRecord
from shared.logging import get_logger

log = get_logger(__name__)


class ChallengeStore:
    def __init__(self) -> None:
        self._items: dict[str, ChallengeRecord] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, challenge_id: object) -> bool:
        with self._lock:
            return challenge_id in self._items

    def put(self, challenge_id: str, record: ChallengeRecord) -> None:
        with self._lock:
            self._items[challenge_id] = record

    def take_if_valid(self, challenge_id: str, now: float) -> Optional[ChallengeRecord]:
        """Remove and return the record, or None if absent or expired."""
        with self._lock:
            record = self._items.pop(challenge_id, None)
        if record is None or record.is_expired(now):
            return None
        return record

    def sweep(self, now: float) -> int:
        """Drop every entry that expired before *now*. Returns the number removed."""
        with self._lock:
            snapshot = list(self._items.items())
        removed = 0
        for challenge_id, record in snapshot:
            try:
                expired = record.expires_at < now
            except Exception as e:
                # Malformed record: drop it rather than abort the sweep
                log.warning(
                    "challenge_store_bad_entry",
                    challenge_id=challenge_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                expired = True
            if not expired:
                continue
            with self._lock:
                # Skip ids that were consumed or replaced since the snapshot
                if self._items.get(challenge_id) is record:
                    del self._items[challenge_id]
                    removed += 1
        return removed
