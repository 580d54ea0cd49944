"""Optional Redis client.

Redis carries rate-limit counters and notification pushes. The sweep works
without either, so an empty ``RIGRENT_REDIS_URL`` leaves the client unset.
"""

import redis.asyncio as redis

_client: redis.Redis | None = None


async def init_redis(url: str) -> None:
    """Create the shared client; an empty URL disables Redis."""
    global _client  # noqa: PLW0603
    if not url:
        _client = None
        return
    _client = redis.from_url(  # type: ignore[no-untyped-call]
        url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=20,
    )


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    client, _client = _client, None
    if client is not None:
        await client.aclose()


def get_redis_or_none() -> redis.Redis | None:
    """The shared client, or None when Redis is disabled or not started."""
    return _client
