# src/tasksphere/storage/collection_store.py

from __future__ import annotations

"""
Full-collection repository base.

Each store owns one in-memory list of records and persists the whole list
under a single key after every mutation. Records are copied on the way in
and on the way out, so reads are snapshots that callers may change freely.

Write path (under the store lock):
- build the new list,
- encode + write it to the key-value store,
- only then swap it in and notify subscribers.

A failed write raises StorageError and leaves the in-memory list untouched.
"""

import contextlib
import copy
import json
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar
from uuid import UUID

from ..core.ports import Identified, KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Identified)


class ChangeKind(StrEnum):
    ADDED = "added"
    UPDATED = "updated"
    DELETED = "deleted"
    RELOADED = "reloaded"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class StoreEvent:
    store: str
    kind: ChangeKind
    ids: tuple[UUID, ...] = ()


StoreListener = Callable[[StoreEvent], None]


class CollectionStore(Generic[T]):
    """Base class for the Task/Project/Team stores."""

    name: str = "collection"
    default_key: str = ""

    def __init__(self, kv: KeyValueStore, *, key: str | None = None, autoload: bool = True) -> None:
        self._kv = kv
        self._key = key or self.default_key
        if not self._key:
            raise ValueError("storage key is required")
        self._items: list[T] = []
        self._lock = threading.RLock()
        self._listeners: list[StoreListener] = []
        if autoload:
            self.load_all()
        logger.info("%s store ready key=%s total=%s", self.name, self._key, len(self._items))

    # ---- record codec (per entity) ----

    def _encode(self, item: T) -> dict[str, Any]:
        raise NotImplementedError

    def _decode(self, record: dict[str, Any]) -> T:
        raise NotImplementedError

    def encode_collection(self, items: Iterable[T]) -> bytes:
        records = [self._encode(i) for i in items]
        return json.dumps(records, ensure_ascii=False).encode("utf-8")

    def decode_collection(self, data: bytes) -> list[T]:
        """Decode a persisted collection. Any malformed part rejects the whole payload."""
        raw = json.loads(data.decode("utf-8"))
        if not isinstance(raw, list):
            raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
        out: list[T] = []
        for rec in raw:
            if not isinstance(rec, dict):
                raise ValueError(f"expected a JSON object, got {type(rec).__name__}")
            out.append(self._decode(rec))
        return out

    # ---- persistence ----

    @property
    def key(self) -> str:
        return self._key

    def load_all(self) -> None:
        """
        Replace the in-memory collection with the persisted one.

        Missing or undecodable data yields an empty collection.
        """
        data = self._kv.get(self._key)
        items: list[T] = []
        if data is not None:
            try:
                items = self.decode_collection(data)
            except Exception:
                logger.warning(
                    "Failed to decode %s collection key=%s; starting empty.",
                    self.name,
                    self._key,
                    exc_info=True,
                )
                items = []
        with self._lock:
            self._items = items
        self._notify(ChangeKind.RELOADED, tuple(i.id for i in items))

    def _save(self, items: list[T]) -> None:
        payload = self.encode_collection(items)
        self._kv.set(self._key, payload)
        self._items = items
        logger.debug("%s saved key=%s total=%d", self.name, self._key, len(items))

    # ---- reads ----

    def all(self) -> list[T]:
        with self._lock:
            return [copy.deepcopy(i) for i in self._items]

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def get(self, item_id: UUID) -> T | None:
        with self._lock:
            for item in self._items:
                if item.id == item_id:
                    return copy.deepcopy(item)
        return None

    def filter(self, predicate: Callable[[T], bool]) -> list[T]:
        return [i for i in self.all() if predicate(i)]

    # ---- mutations ----

    def add(self, item: T) -> None:
        with self._lock:
            self._save([*self._items, copy.deepcopy(item)])
        logger.debug("%s added id=%s", self.name, item.id)
        self._notify(ChangeKind.ADDED, (item.id,))

    def update(self, item: T) -> bool:
        """Replace the record with the same id. Unknown ids are a silent no-op."""
        with self._lock:
            items = list(self._items)
            for idx, existing in enumerate(items):
                if existing.id == item.id:
                    items[idx] = copy.deepcopy(item)
                    break
            else:
                logger.debug("%s update skipped: unknown id=%s", self.name, item.id)
                return False
            self._save(items)
        self._notify(ChangeKind.UPDATED, (item.id,))
        return True

    def update_many(self, updated: Iterable[T]) -> int:
        """Replace every record whose id matches, with a single save. Unknown ids are skipped."""
        by_id = {i.id: copy.deepcopy(i) for i in updated}
        if not by_id:
            return 0
        with self._lock:
            hits = tuple(i.id for i in self._items if i.id in by_id)
            if not hits:
                return 0
            self._save([by_id.get(i.id, i) for i in self._items])
        self._notify(ChangeKind.UPDATED, hits)
        return len(hits)

    def delete(self, item: T) -> bool:
        return self.delete_by_id(item.id)

    def delete_by_id(self, item_id: UUID) -> bool:
        return self.delete_many([item_id]) > 0

    def delete_many(self, item_ids: Iterable[UUID]) -> int:
        wanted = set(item_ids)
        if not wanted:
            return 0
        with self._lock:
            kept = [i for i in self._items if i.id not in wanted]
            removed = tuple(i.id for i in self._items if i.id in wanted)
            if not removed:
                logger.debug("%s delete skipped: unknown ids=%s", self.name, sorted(map(str, wanted)))
                return 0
            self._save(kept)
        self._notify(ChangeKind.DELETED, removed)
        return len(removed)

    def reset_all(self) -> None:
        with self._lock:
            self._save([])
        logger.info("%s reset key=%s", self.name, self._key)
        self._notify(ChangeKind.RESET)

    # ---- change notification ----

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock, contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, kind: ChangeKind, ids: tuple[UUID, ...] = ()) -> None:
        with self._lock:
            listeners = list(self._listeners)
        if not listeners:
            return
        event = StoreEvent(store=self.name, kind=kind, ids=ids)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("%s listener failed for event=%s", self.name, kind.value)
