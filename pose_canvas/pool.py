"""Fixed-capacity object pool with ring-buffer allocation."""

import logging
from typing import Callable, Generic, Iterator, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RingPool(Generic[T]):
    """Preallocated slots handed out by a rotating cursor.

    ``acquire`` returns the next slot whether or not it is still in use, so
    under saturation the oldest allocation is overwritten. The pool never
    grows past ``capacity``.
    """

    def __init__(self, factory: Callable[[], T], capacity: int):
        if capacity < 1:
            raise ValueError("pool capacity must be >= 1")
        self._items: List[T] = [factory() for _ in range(capacity)]
        self._cursor = 0
        self.allocations = 0

    @property
    def capacity(self) -> int:
        return len(self._items)

    @property
    def cursor(self) -> int:
        return self._cursor

    def acquire(self) -> T:
        item = self._items[self._cursor]
        self._cursor = (self._cursor + 1) % len(self._items)
        self.allocations += 1
        if self._cursor == 0 and self.allocations > len(self._items):
            logger.debug("Pool of %d wrapped (%d allocations)", len(self._items), self.allocations)
        return item

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
