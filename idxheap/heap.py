from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import numpy as np

from .comparators import Comparator, natural_order, reversed_comparator
from .errors import (
    CapacityExceeded,
    EmptyHeap,
    HeapInvariantError,
    IndexOutOfRange,
    StaleHandle,
)

if TYPE_CHECKING:
    from lib.heap_config import HeapConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FREE = -1


class Node(Generic[T]):
    """Handle to one element of an ``IndexedHeap``.

    The handle stores a stable id, not a slot: ``position`` and ``value`` are
    read through the heap's id -> slot table, so they follow the element as it
    moves. After the element is polled, removed or cleared, both raise
    ``StaleHandle``.
    """

    __slots__ = ("_heap", "_id", "_generation")

    def __init__(self, heap: IndexedHeap[T], handle_id: int, generation: int) -> None:
        self._heap = heap
        self._id = handle_id
        self._generation = generation

    @property
    def position(self) -> int:
        return self._heap._resolve(self)

    @property
    def value(self) -> T:
        return self._heap._values[self._heap._resolve(self)]

    @property
    def alive(self) -> bool:
        return self._heap._is_live(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self._heap is other._heap
            and self._id == other._id
            and self._generation == other._generation
        )

    def __hash__(self) -> int:
        return hash((id(self._heap), self._id, self._generation))

    def __repr__(self) -> str:
        if not self.alive:
            return f"Node(id={self._id}, stale)"
        return f"Node(value={self.value!r}, position={self.position})"


class IndexedHeap(Generic[T]):
    """Fixed-capacity max-heap that can remove any element in O(log n).

    Elements are ordered by ``compare(a, b)``, which returns a negative number,
    zero or a positive number; the element that compares greatest sits at
    index 0. ``push`` hands back a ``Node`` so the caller can later remove or
    re-prioritize that element without searching for it.

    Storage is struct-of-arrays: values live in a list of ``capacity`` slots,
    while two numpy tables map slot -> handle id and handle id -> slot. Every
    element move goes through ``_swap``, which updates all three together.
    """

    def __init__(
        self,
        capacity: int,
        compare: Comparator[T] | None = None,
        *,
        check_invariants: bool = False,
    ) -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, (int, np.integer)):
            raise TypeError(f"capacity must be an int, got {type(capacity).__name__}")
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        if compare is None:
            compare = natural_order
        if not callable(compare):
            raise TypeError(f"compare must be callable, got {type(compare).__name__}")

        capacity = int(capacity)
        self._capacity = capacity
        self._compare = compare
        self._check_invariants = check_invariants
        self._size = 0
        self._values: list[Any] = [None] * capacity
        self._slot_ids = np.full(capacity, _FREE, dtype=np.int64)      # slot -> handle id
        self._id_slots = np.full(capacity, _FREE, dtype=np.int64)      # handle id -> slot
        self._generations = np.zeros(capacity, dtype=np.int64)         # handle id -> reuse count
        self._free_ids: list[int] = list(range(capacity - 1, -1, -1))
        logger.debug("Created IndexedHeap(capacity=%d)", capacity)

    @classmethod
    def from_config(
        cls, config: HeapConfig, compare: Comparator[T] | None = None
    ) -> IndexedHeap[T]:
        config.validate()
        compare = natural_order if compare is None else compare
        if config.order == "min":
            compare = reversed_comparator(compare)
        return cls(config.capacity, compare, check_invariants=config.check_invariants)

    # ---------- size ----------

    @property
    def size(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def is_empty(self) -> bool:
        return self._size == 0

    def is_full(self) -> bool:
        return self._size == self._capacity

    # ---------- internal helpers ----------

    def _rank(self, i: int, j: int) -> int:
        return self._compare(self._values[i], self._values[j])

    def _swap(self, i: int, j: int) -> None:
        values = self._values
        values[i], values[j] = values[j], values[i]
        id_i = int(self._slot_ids[j])
        id_j = int(self._slot_ids[i])
        self._slot_ids[i] = id_i
        self._slot_ids[j] = id_j
        self._id_slots[id_i] = i
        self._id_slots[id_j] = j

    def _sift_up(self, idx: int) -> int:
        """Move the element at ``idx`` toward the root; return where it stops."""
        while idx > 0:
            parent = (idx - 1) // 2
            if self._rank(idx, parent) > 0:
                self._swap(idx, parent)
                idx = parent
            else:
                break
        return idx

    def _sift_down(self, idx: int) -> int:
        """Move the element at ``idx`` toward the leaves; return where it stops."""
        size = self._size
        while True:
            left = 2 * idx + 1
            if left >= size:
                break
            right = left + 1
            largest = left
            if right < size and self._rank(right, left) > 0:
                largest = right

            if self._rank(largest, idx) > 0:
                self._swap(idx, largest)
                idx = largest
            else:
                break
        return idx

    def _settle(self, idx: int) -> None:
        # At most one direction can move the element.
        if self._sift_up(idx) == idx:
            self._sift_down(idx)

    def _release_last(self) -> T:
        """Shrink by one and free the vacated slot and its handle id."""
        self._size -= 1
        last = self._size
        value = self._values[last]
        handle_id = int(self._slot_ids[last])
        self._values[last] = None
        self._slot_ids[last] = _FREE
        self._id_slots[handle_id] = _FREE
        self._generations[handle_id] += 1
        self._free_ids.append(handle_id)
        return value

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise TypeError(f"heap index must be an int, got {type(index).__name__}")
        if not 0 <= index < self._size:
            raise IndexOutOfRange(int(index), self._size)
        return int(index)

    def _is_live(self, node: Node[T]) -> bool:
        return (
            node._heap is self
            and int(self._generations[node._id]) == node._generation
            and int(self._id_slots[node._id]) != _FREE
        )

    def _resolve(self, node: Node[T]) -> int:
        if not self._is_live(node):
            logger.debug("Rejected stale handle id=%d", node._id)
            if node._heap is not self:
                raise StaleHandle("handle belongs to a different heap")
            raise StaleHandle(f"handle {node._id} no longer refers to a heap element")
        return int(self._id_slots[node._id])

    def _after_mutation(self) -> None:
        if self._check_invariants:
            self.check_invariants()

    # ---------- public API ----------

    def push(self, value: T) -> Node[T]:
        """Insert ``value`` and return its handle.

        The element is stored before it is sifted, so a comparator that raises
        leaves it in the heap without a handle.
        """
        if self._size == self._capacity:
            logger.debug("Push refused, heap is full (capacity=%d)", self._capacity)
            raise CapacityExceeded(self._capacity)

        slot = self._size
        handle_id = self._free_ids.pop()
        self._values[slot] = value
        self._slot_ids[slot] = handle_id
        self._id_slots[handle_id] = slot
        self._size += 1
        node = Node(self, handle_id, int(self._generations[handle_id]))

        self._sift_up(slot)
        self._after_mutation()
        return node

    def peek(self) -> T:
        if self._size == 0:
            raise EmptyHeap("peek")
        return self._values[0]

    def poll(self) -> T:
        if self._size == 0:
            raise EmptyHeap("poll")

        self._swap(0, self._size - 1)
        value = self._release_last()
        self._sift_down(0)
        self._after_mutation()
        return value

    def remove(self, index: int) -> T:
        """Remove the element at array slot ``index`` and return its value."""
        index = self._check_index(index)

        self._swap(index, self._size - 1)
        value = self._release_last()
        if index < self._size:
            self._settle(index)
        self._after_mutation()
        return value

    def remove_node(self, node: Node[T]) -> T:
        return self.remove(self._resolve(node))

    def update(self, node: Node[T], value: T) -> Node[T]:
        """Replace the value behind ``node`` and move it to its new rank."""
        slot = self._resolve(node)
        self._values[slot] = value
        self._settle(slot)
        self._after_mutation()
        return node

    def get_node_at(self, index: int) -> Node[T]:
        index = self._check_index(index)
        handle_id = int(self._slot_ids[index])
        return Node(self, handle_id, int(self._generations[handle_id]))

    def __getitem__(self, index: int) -> T:
        return self._values[self._check_index(index)]

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and self._is_live(node)

    def __iter__(self) -> Iterator[T]:
        for i in range(self._size):
            yield self._values[i]

    def nodes(self) -> Iterator[Node[T]]:
        for i in range(self._size):
            yield self.get_node_at(i)

    def drain(self) -> Iterator[T]:
        """Poll until empty, yielding values from greatest to least."""
        while self._size:
            yield self.poll()

    def to_list(self) -> list[T]:
        return list(self)

    def clear(self) -> None:
        live_ids = self._slot_ids[: self._size]
        self._generations[live_ids] += 1
        self._id_slots[live_ids] = _FREE
        self._slot_ids[:] = _FREE
        self._values = [None] * self._capacity
        self._free_ids = list(range(self._capacity - 1, -1, -1))
        logger.debug("Cleared %d element(s)", self._size)
        self._size = 0

    def check_invariants(self) -> None:
        """Raise ``HeapInvariantError`` on the first heap-order or index violation."""
        size = self._size
        for i in range(size):
            handle_id = int(self._slot_ids[i])
            if handle_id == _FREE or int(self._id_slots[handle_id]) != i:
                raise HeapInvariantError(f"slot {i} is not index-coherent (id={handle_id})")
            for child in (2 * i + 1, 2 * i + 2):
                if child < size and self._rank(i, child) < 0:
                    raise HeapInvariantError(f"slot {i} ranks below its child at slot {child}")

        for i in range(size, self._capacity):
            if self._values[i] is not None or int(self._slot_ids[i]) != _FREE:
                raise HeapInvariantError(f"slot {i} is past size={size} but holds data")
        if len(self._free_ids) != self._capacity - size:
            raise HeapInvariantError(
                f"{len(self._free_ids)} free handle ids for {self._capacity - size} free slots"
            )

    def __repr__(self) -> str:
        return f"IndexedHeap(size={self._size}, capacity={self._capacity})"
