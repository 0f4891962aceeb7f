# src/tasksphere/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

Stores and services depend on Protocols instead of concrete implementations.
This keeps the storage backend swappable and makes testing easier.
"""

from typing import Protocol
from uuid import UUID


class Identified(Protocol):
    """Anything a collection store can hold: records keyed by a UUID."""

    @property
    def id(self) -> UUID: ...


class KeyValueStore(Protocol):
    """
    Local key-value persistence (string key -> encoded byte blob).

    get() returns None for a missing key. Implementations raise StorageError
    when the underlying medium fails.
    """

    def get(self, key: str) -> bytes | None: ...
    def set(self, key: str, value: bytes) -> None: ...
    def delete(self, key: str) -> None: ...
