"""A bounded queue of pending items."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class FixedQueue(Generic[T]):
    """A queue holding at most ``limit`` items."""

    def __init__(self, limit: int) -> None:
        self._items: deque[T] = deque()
        self._limit = limit

    def push(self, value: T) -> bool:
        """Append ``value`` if there is room; return whether it was added."""
        if len(self._items) < self._limit:
            self._items.append(value)
            return True
        return False

    def count_free(self) -> int:
        """Number of free slots."""
        return self._limit - len(self._items)

    def push_replace(self, value: T) -> bool:
        """Append ``value``, dropping the oldest item if the queue is full."""
        if self.count_free() <= 0 and self._items:
            self._items.popleft()
        return self.push(value)

    def take_if(self, predicate: Callable[[T], bool]) -> Optional[T]:
        """Remove and return the first item matching ``predicate``.

        The last item takes the place of the removed one.
        """
        for pos, item in enumerate(self._items):
            if predicate(item):
                self._items[pos] = self._items[-1]
                self._items.pop()
                return item
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)