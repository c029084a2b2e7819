"""In-process ProviderDirectory.

Used when Redis is not configured (self-hosting, development) and in tests.
Optionally seeded from a JSON file in the classic on-disk layout:

    {
      "ABCDEFGHIJ": {
        "method": "text",
        "override": {"example.com": "math"},
        "good": 0,
        "bad": 0
      }
    }

Counters live in this process only and are lost on restart.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Iterable, Optional, Union

from errors import ConfigurationError
from schemas.models.provider import Outcome, ProviderConfig
from shared.logging import get_logger

log = get_logger(__name__)


class InMemoryProviderDirectory:
    def __init__(self, providers: Iterable[ProviderConfig] = ()) -> None:
        self._providers: dict[str, ProviderConfig] = {p.key: p for p in providers}
        self._lock = asyncio.Lock()

    @classmethod
    def from_json_file(cls, path: Union[str, Path]) -> "InMemoryProviderDirectory":
        """Load providers from *path*. Raises ConfigurationError on bad content."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            providers = [
                ProviderConfig.model_validate({**record, "key": key})
                for key, record in raw.items()
            ]
        except (OSError, ValueError, AttributeError, TypeError) as e:
            # pydantic.ValidationError is a ValueError
            raise ConfigurationError(f"cannot load providers from {path}: {e}") from e
        log.info("providers_loaded", path=str(path), count=len(providers))
        return cls(providers)

    async def get(self, key: str) -> Optional[ProviderConfig]:
        async with self._lock:
            provider = self._providers.get(key)
            return provider.model_copy(deep=True) if provider else None

    async def increment_outcome(self, key: str, outcome: Outcome) -> None:
        field = Outcome(outcome).value
        async with self._lock:
            provider = self._providers.get(key)
            if provider is None:
                log.warning("provider_missing_on_increment", provider=key, outcome=field)
                return
            self._providers[key] = provider.model_copy(
                update={field: getattr(provider, field) + 1}
            )

    async def upsert(self, provider: ProviderConfig) -> None:
        """Provisioning and tests only."""
        async with self._lock:
            self._providers[provider.key] = provider

    async def ping(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._providers)


__all__ = ("InMemoryProviderDirectory",)
