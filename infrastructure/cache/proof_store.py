"""In-memory store of verified proofs.

A proof reuses the id of the challenge it was earned on and maps it to an
expiry timestamp. Expired proofs are treated as absent and deleted lazily on
``exists``; ``sweep`` reclaims the ones nobody ever checks.
"""

from __future__ import annotations

import threading


class VerifiedProofStore:
    def __init__(self) -> None:
        self._items: dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def put(self, challenge_id: str, expires_at: float) -> None:
        with self._lock:
            self._items[challenge_id] = expires_at

    def exists(self, challenge_id: str, now: float) -> bool:
        with self._lock:
            expires_at = self._items.get(challenge_id)
            if expires_at is None:
                return False
            if now > expires_at:
                del self._items[challenge_id]
                return False
            return True

    def sweep(self, now: float) -> int:
        with self._lock:
            expired = [cid for cid, exp in self._items.items() if exp < now]
            for cid in expired:
                del self._items[cid]
        return len(expired)
