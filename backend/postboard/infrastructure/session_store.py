"""Redis Session Store — server-side storage for HTTP session data.

Invariants:
    - Session data is a JSON object stored under "<prefix><session id>" with a TTL
    - load() of an unknown or expired id returns None (caller starts a fresh session)
    - The client is created lazily by redis-py; no I/O happens in __init__

Design Decisions:
    - redis.asyncio over a sync client: keeps the event loop unblocked
    - SessionStore Protocol: the middleware depends on the contract, tests substitute
      an in-memory implementation
"""

import json
import logging
from typing import Protocol

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Contract consumed by the session middleware and the Lifecycle."""
    ttl_seconds: int

    async def load(self, session_id: str) -> dict | None: ...
    async def save(self, session_id: str, data: dict) -> None: ...
    async def touch(self, session_id: str) -> None: ...
    async def destroy(self, session_id: str) -> None: ...
    async def ping(self) -> bool: ...
    async def close(self) -> None: ...


class RedisSessionStore:
    """SessionStore backed by a Redis server."""

    def __init__(
        self, url: str, ttl_seconds: int = 86_400, prefix: str = "sess:",
    ):
        self.ttl_seconds = ttl_seconds
        self._prefix = prefix
        self._client = aioredis.from_url(url, decode_responses=True)

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    async def load(self, session_id: str) -> dict | None:
        raw = await self._client.get(self._key(session_id))
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding corrupt session {session_id[:8]}...")
            return None
        return data if isinstance(data, dict) else None

    async def save(self, session_id: str, data: dict) -> None:
        await self._client.set(
            self._key(session_id), json.dumps(data), ex=self.ttl_seconds,
        )

    async def touch(self, session_id: str) -> None:
        await self._client.expire(self._key(session_id), self.ttl_seconds)

    async def destroy(self, session_id: str) -> None:
        await self._client.delete(self._key(session_id))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except aioredis.RedisError as e:
            logger.error(f"Session store ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
