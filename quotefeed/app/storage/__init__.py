"""Durable key-value storage used for favorites and preferences."""

from .base import InMemoryKeyValueStore, KeyValueStore
from .repository import PostgresKeyValueStore, connection_factory, managed_connection

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PostgresKeyValueStore",
    "connection_factory",
    "managed_connection",
]
