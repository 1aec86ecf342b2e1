"""FIFO queue over a growable list with a read cursor."""

from __future__ import annotations

from typing import Generic, List, Optional, TypeVar

T = TypeVar("T")


class SimpleQueue(Generic[T]):
    """First-in first-out queue that never shifts its backing list.

    Items are appended behind a read cursor; ``pop`` only advances the cursor.
    ``clear`` rewinds both ends but keeps the list, so a queue reused once per
    BFS phase overwrites the slots of the previous phase instead of growing
    a fresh list.

    Example:
        >>> que = SimpleQueue()
        >>> que.push(1)
        >>> que.push(2)
        >>> que.pop()
        1
        >>> len(que)
        1
    """

    def __init__(self, capacity: int = 0) -> None:
        """Create an empty queue.

        Args:
            capacity: Number of slots to preallocate.

        Raises:
            ValueError: If ``capacity`` is negative.
        """
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        self._payload: List[Optional[T]] = [None] * capacity
        self._pos = 0
        self._end = 0

    def __len__(self) -> int:
        return self._end - self._pos

    def size(self) -> int:
        """Number of items pushed but not yet popped."""
        return self._end - self._pos

    def empty(self) -> bool:
        return self._pos == self._end

    def push(self, item: T) -> None:
        if self._end < len(self._payload):
            self._payload[self._end] = item
        else:
            self._payload.append(item)
        self._end += 1

    def front(self) -> Optional[T]:
        """Return the next item without removing it, or None if empty."""
        if self._pos < self._end:
            return self._payload[self._pos]
        return None

    def pop(self) -> Optional[T]:
        """Remove and return the next item, or None if empty."""
        if self._pos < self._end:
            item = self._payload[self._pos]
            self._pos += 1
            return item
        return None

    def clear(self) -> None:
        """Empty the queue, keeping the backing list for reuse."""
        self._pos = 0
        self._end = 0

    def clear_and_free(self) -> None:
        """Empty the queue and release the backing list."""
        self._payload = []
        self._pos = 0
        self._end = 0
