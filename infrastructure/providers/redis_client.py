"""Async Redis connection factory for the provider store.

The client is always returned, even when the startup ping fails: redis-py
reconnects lazily, and until it does every provider lookup fails with
UpstreamStoreError (503) instead of silently treating providers as unknown.
"""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from shared.logging import get_logger

log = get_logger(__name__)


async def create_redis_client(redis_uri: str, timeout: float = 2.0) -> aioredis.Redis:
    """Build a Redis client and probe it once."""
    client: aioredis.Redis = aioredis.from_url(
        redis_uri,
        decode_responses=True,
        socket_timeout=timeout,
        socket_connect_timeout=timeout,
    )
    masked_uri = redis_uri.split("@")[-1]  # mask credentials
    try:
        await client.ping()
        log.info("redis_connected", uri=masked_uri)
    except (RedisError, OSError) as e:
        log.warning(
            "redis_connection_failed",
            uri=masked_uri,
            error=str(e),
            error_type=type(e).__name__,
        )
    return client
