"""
Keyed aggregate cache with single-writer-per-key updates.

Aggregates are immutable accumulators folded from events. The cache only
remembers the latest accumulator per key; it can always be rebuilt from the
authoritative event log and must then hold exactly what a from-scratch fold
would produce.
"""

import logging
import threading
from contextlib import ExitStack
from functools import reduce
from typing import Callable, Dict, Generic, Hashable, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
E = TypeVar("E")
A = TypeVar("A")


def fold(events: Iterable[E], key_fn: Callable[[E], K], empty: Callable[[K], A],
         add: Callable[[A, E], A]) -> Dict[K, A]:
    """Fold events into one accumulator per key."""
    grouped: Dict[K, list] = {}
    for event in events:
        grouped.setdefault(key_fn(event), []).append(event)
    return {key: reduce(add, items, empty(key)) for key, items in grouped.items()}


class AggregateCache(Generic[K, E, A]):
    """
    Incrementally maintained aggregates.

    Writes to one key are serialized by a per-key lock; reads and writes of
    different keys do not block each other. Whole-cache replacement waits for
    every in-flight write, so a write that started before a rebuild can never
    land on top of the rebuilt values.
    """

    def __init__(
        self,
        key_fn: Callable[[E], K],
        empty: Callable[[K], A],
        add: Callable[[A, E], A],
    ):
        self._key_fn = key_fn
        self._empty = empty
        self._add = add
        self._values: Dict[K, A] = {}
        self._locks: Dict[K, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: K) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def apply(self, event: E) -> A:
        """Fold one new event into its key's accumulator."""
        key = self._key_fn(event)
        with self._lock_for(key):
            current = self._values.get(key)
            if current is None:
                current = self._empty(key)
            updated = self._add(current, event)
            self._values[key] = updated
        return updated

    def apply_all(self, events: Iterable[E]) -> None:
        for event in events:
            self.apply(event)

    def _replace(self, values: Dict[K, A]) -> None:
        # Holding the guard stops new per-key locks being handed out; taking
        # every existing one waits out writes already in progress.
        with self._locks_guard, ExitStack() as stack:
            for lock in self._locks.values():
                stack.enter_context(lock)
            self._values = values

    def rebuild(self, events: Iterable[E]) -> None:
        """Discard everything and recompute from the full event set."""
        rebuilt = fold(events, self._key_fn, self._empty, self._add)
        self._replace(rebuilt)
        logger.debug(f"Aggregate cache rebuilt with {len(rebuilt)} keys")

    def invalidate(self, key: Optional[K] = None) -> None:
        """Drop one key, or everything when no key is given."""
        if key is None:
            self._replace({})
            return
        with self._lock_for(key):
            self._values.pop(key, None)

    def get(self, key: K) -> Optional[A]:
        return self._values.get(key)

    def snapshot(self) -> Dict[K, A]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)
