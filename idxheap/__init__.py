from .comparators import Comparator, by_key, natural_order, reverse_order, reversed_comparator
from .errors import (
    CapacityExceeded,
    EmptyHeap,
    HeapError,
    HeapInvariantError,
    IndexOutOfRange,
    StaleHandle,
)
from .heap import IndexedHeap, Node

__all__ = [
    "CapacityExceeded",
    "Comparator",
    "EmptyHeap",
    "HeapError",
    "HeapInvariantError",
    "IndexOutOfRange",
    "IndexedHeap",
    "Node",
    "StaleHandle",
    "by_key",
    "natural_order",
    "reverse_order",
    "reversed_comparator",
]
