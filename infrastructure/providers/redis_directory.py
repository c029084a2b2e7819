"""Redis-backed ProviderDirectory.

Each provider is one hash at ``<prefix>:<key>``:

    method              "text" | "arithmetic"
    override.<hostname> "text" | "arithmetic"
    good / bad          integer counters

Counters are bumped with HINCRBY, so concurrent workers sharing the store
never lose an increment. Every call is bounded by ``timeout`` seconds; a
timeout or connection error surfaces as UpstreamStoreError (HTTP 503) and is
never mistaken for "unknown provider".
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

import pydantic
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from errors import ConfigurationError, UpstreamStoreError
from schemas.models.provider import Outcome, ProviderConfig
from shared.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

OVERRIDE_PREFIX = "override."


def provider_from_hash(key: str, fields: dict[str, Any]) -> ProviderConfig:
    """Build a ProviderConfig from a flat Redis hash."""
    data: dict[str, Any] = {"key": key, "override": {}}
    for field, value in fields.items():
        if field.startswith(OVERRIDE_PREFIX):
            data["override"][field[len(OVERRIDE_PREFIX):]] = value
        elif field in ("method", "good", "bad"):
            data[field] = value
    return ProviderConfig.model_validate(data)


def provider_to_hash(provider: ProviderConfig) -> dict[str, str]:
    fields = {
        "method": provider.method.value,
        "good": str(provider.good),
        "bad": str(provider.bad),
    }
    for hostname, method in provider.overrides.items():
        fields[f"{OVERRIDE_PREFIX}{hostname}"] = method.value
    return fields


class RedisProviderDirectory:
    def __init__(
        self,
        redis_client: aioredis.Redis,
        timeout: float = 2.0,
        prefix: str = "provider",
    ) -> None:
        self._redis = redis_client
        self.timeout = timeout
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def _call(self, op: str, key: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError:
            log.error("provider_store_timeout", op=op, provider=key, timeout=self.timeout)
            raise UpstreamStoreError("provider store timed out") from None
        except RedisError as e:
            log.error(
                "provider_store_error",
                op=op,
                provider=key,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise UpstreamStoreError("provider store unavailable") from e

    async def get(self, key: str) -> Optional[ProviderConfig]:
        fields = await self._call("get", key, self._redis.hgetall(self._key(key)))
        if not fields:
            return None
        try:
            return provider_from_hash(key, fields)
        except pydantic.ValidationError as e:
            log.error("provider_record_invalid", provider=key, error=str(e))
            raise ConfigurationError("provider is misconfigured") from e

    async def increment_outcome(self, key: str, outcome: Outcome) -> None:
        await self._call(
            "increment",
            key,
            self._redis.hincrby(self._key(key), Outcome(outcome).value, 1),
        )

    async def upsert(self, provider: ProviderConfig) -> None:
        """Write a full provider record. Provisioning and tests only."""
        await self._call(
            "upsert",
            provider.key,
            self._redis.hset(self._key(provider.key), mapping=provider_to_hash(provider)),
        )

    async def ping(self) -> bool:
        try:
            return bool(await asyncio.wait_for(self._redis.ping(), timeout=self.timeout))
        except (asyncio.TimeoutError, RedisError):
            return False
