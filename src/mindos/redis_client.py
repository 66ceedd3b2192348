"""Redis connection pool and key naming.

Redis only backs the per-client rate limiter and the readiness probe; the
progression state itself lives in the relational datastore.
"""

import redis.asyncio as redis

KEY_PREFIX = "mindos"

_pool: redis.Redis | None = None


async def init_redis(url: str, max_connections: int = 50) -> None:
    """Create the shared client; no connection is opened until first use."""
    global _pool  # noqa: PLW0603
    _pool = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=max_connections,
    )


async def close_redis() -> None:
    global _pool  # noqa: PLW0603
    if _pool:
        await _pool.aclose()
        _pool = None


def get_redis() -> redis.Redis:
    """Get the Redis client; raises RuntimeError before ``init_redis``."""
    if _pool is None:
        msg = "Redis not initialized. Call init_redis() first."
        raise RuntimeError(msg)
    return _pool


def redis_key(*parts: object) -> str:
    """Namespaced key, e.g. ``redis_key("ratelimit", ip, window)`` -> ``mindos:ratelimit:<ip>:<window>``."""
    return ":".join([KEY_PREFIX, *(str(p) for p in parts)])
