from __future__ import annotations


class HeapError(Exception):
    """Base class for every error raised by an ``IndexedHeap``."""


class CapacityExceeded(HeapError, OverflowError):
    def __init__(self, capacity: int) -> None:
        super().__init__(f"Heap is full: capacity={capacity}")
        self.capacity = capacity


class EmptyHeap(HeapError, IndexError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} from empty heap")
        self.operation = operation


class IndexOutOfRange(HeapError, IndexError):
    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Heap index out of range: index={index}, size={size}")
        self.index = index
        self.size = size


class StaleHandle(HeapError, LookupError):
    """The element behind a handle was popped, removed or cleared."""


class HeapInvariantError(HeapError, AssertionError):
    pass
