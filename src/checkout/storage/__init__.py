"""Key/value store factory.

Provides get_store() / set_store() to swap implementations:
- InMemoryKeyValueStore for development and testing
- RedisKeyValueStore when CHECKOUT_STORAGE=redis
"""

from checkout.config import load_settings
from checkout.storage.memory_adapter import InMemoryKeyValueStore
from checkout.storage.port import KeyValueStore

_current_store: KeyValueStore | None = None


def get_store() -> KeyValueStore:
    """Return the configured store (singleton). Defaults to in-memory."""
    global _current_store
    if _current_store is None:
        settings = load_settings()
        if settings.storage == "memory":
            _current_store = InMemoryKeyValueStore()
        elif settings.storage == "redis":
            if not settings.redis_url:
                raise ValueError("CHECKOUT_STORAGE=redis requires REDIS_URL")
            from checkout.storage.redis_adapter import RedisKeyValueStore

            _current_store = RedisKeyValueStore.from_url(
                settings.redis_url,
                ttl_seconds=settings.handoff_ttl_seconds,
            )
        else:
            raise ValueError(f"Unknown checkout storage: {settings.storage}")
    return _current_store


def set_store(store: KeyValueStore) -> None:
    """Override the active store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    global _current_store
    _current_store = None
