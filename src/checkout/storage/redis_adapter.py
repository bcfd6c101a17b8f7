"""Redis-backed key/value store with optional expiry."""

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from checkout.errors import RemoteReadError, RemoteWriteError
from checkout.storage.port import KeyValueStore
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class RedisKeyValueStore(KeyValueStore):
    """Stores entries under ``<prefix><key>``; every write refreshes the TTL."""

    def __init__(self, client, prefix: str = "checkout:", ttl_seconds: int | None = None) -> None:
        self._client = client
        self._prefix = prefix
        self._ttl = ttl_seconds

    @classmethod
    def from_url(cls, url: str, prefix: str = "checkout:", ttl_seconds: int | None = None) -> "RedisKeyValueStore":
        client = aioredis.from_url(url, decode_responses=True)
        return cls(client, prefix=prefix, ttl_seconds=ttl_seconds)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(self._key(key))
        except RedisError as exc:
            logger.warning("redis_read_failed", key=key, error=str(exc))
            raise RemoteReadError(f"Could not read {key}") from exc

    async def set(self, key: str, value: str) -> None:
        try:
            if self._ttl:
                await self._client.set(self._key(key), value, ex=self._ttl)
            else:
                await self._client.set(self._key(key), value)
        except RedisError as exc:
            logger.warning("redis_write_failed", key=key, error=str(exc))
            raise RemoteWriteError(f"Could not write {key}") from exc

    async def delete(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._client.delete(*(self._key(key) for key in keys))
        except RedisError as exc:
            logger.warning("redis_delete_failed", keys=list(keys), error=str(exc))
            raise RemoteWriteError(f"Could not delete {', '.join(keys)}") from exc

    async def close(self) -> None:
        await self._client.aclose()
