"""Key/value store port.

Guest carts and the durable payment handoff record are plain string entries
(JSON-encoded by their owners). Adapters raise ``RemoteReadError`` /
``RemoteWriteError`` when the underlying store fails.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract async key/value store."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value or None when the key is absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def delete(self, *keys: str) -> None: ...
