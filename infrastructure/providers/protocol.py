"""ProviderDirectory protocol: services depend on this, not the concrete implementation."""

from typing import Optional, Protocol

from schemas.models.provider import Outcome, ProviderConfig


class ProviderDirectory(Protocol):
    async def get(self, key: str) -> Optional[ProviderConfig]: ...

    async def increment_outcome(self, key: str, outcome: Outcome) -> None: ...

    async def ping(self) -> bool: ...
