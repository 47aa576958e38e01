"""Key-value storage abstractions for small persisted client state."""
from __future__ import annotations

from typing import Dict, Optional, Protocol


class KeyValueStore(Protocol):
    """Durable byte storage keyed by a fixed namespace string."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class InMemoryKeyValueStore:
    """Simple in-memory store suitable for tests and local development."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._entries: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._entries.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._entries[key] = bytes(value)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def clear(self) -> None:
        self._entries.clear()
