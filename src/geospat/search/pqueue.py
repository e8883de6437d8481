# search/pqueue.py

import heapq
import itertools
from collections.abc import Hashable
from typing import Generic, TypeVar

T = TypeVar("T", bound=Hashable)

_REMOVED = object()


class PriorityQueue(Generic[T]):
    """
    Min-heap keyed by float score. Equal keys pop in insertion order.

    Each item has at most one live entry: inserting an item that is already
    queued invalidates the old entry in place (lazy deletion), so a stale,
    worse key is never returned.
    """

    def __init__(self):
        self._q: list[list] = []  # [key, seq, item]
        self._live: dict[T, list] = {}
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._live)

    def __contains__(self, item) -> bool:
        return item in self._live

    def is_empty(self) -> bool:
        return not self._live

    def insert(self, key: float, item: T) -> None:
        old = self._live.pop(item, None)
        if old is not None:
            old[2] = _REMOVED
        entry = [key, next(self._seq), item]
        self._live[item] = entry
        heapq.heappush(self._q, entry)

    def discard(self, item: T) -> bool:
        entry = self._live.pop(item, None)
        if entry is None:
            return False
        entry[2] = _REMOVED
        return True

    def _prune(self) -> None:
        while self._q and self._q[0][2] is _REMOVED:
            heapq.heappop(self._q)

    def peek_key(self) -> float:
        self._prune()
        if not self._q:
            raise IndexError("peek from empty PriorityQueue")
        return self._q[0][0]

    def extract_min(self) -> T:
        return self.extract_min_with_key()[1]

    def extract_min_with_key(self) -> tuple[float, T]:
        self._prune()
        if not self._q:
            raise IndexError("extract from empty PriorityQueue")
        key, _, item = heapq.heappop(self._q)
        del self._live[item]
        return key, item
