from __future__ import annotations

import pytest

from idxheap import IndexedHeap, StaleHandle, natural_order


def build(values: list[int], capacity: int | None = None) -> tuple[IndexedHeap[int], dict]:
    heap = IndexedHeap(capacity or len(values), natural_order)
    handles = {v: heap.push(v) for v in values}
    return heap, handles


def test_handle_tracks_position_as_heap_moves() -> None:
    heap, handles = build([1, 2, 3, 4, 5])
    for value, node in handles.items():
        assert heap[node.position] == value
        assert node.value == value

    heap.poll()
    for value, node in handles.items():
        if value == 5:
            continue
        assert heap[node.position] == value
        assert heap.get_node_at(node.position) == node


def test_remove_by_handle_matches_never_pushed() -> None:
    values = [2, 5, 1, 4, 6, 7, 8, 3, 9, 10]
    heap, handles = build(values)

    heap.remove(handles[6].position)
    heap.check_invariants()
    assert heap.size == len(values) - 1
    assert list(heap.drain()) == sorted((v for v in values if v != 6), reverse=True)


def test_remove_node_returns_value() -> None:
    heap, handles = build([10, 20, 30])
    assert heap.remove_node(handles[20]) == 20
    assert sorted(heap) == [10, 30]


def test_popped_handle_goes_stale() -> None:
    heap, handles = build([1, 2, 3])
    top = handles[3]
    assert heap.poll() == 3

    assert not top.alive
    assert top not in heap
    with pytest.raises(StaleHandle):
        top.position
    with pytest.raises(StaleHandle):
        heap.remove_node(top)
    assert heap.size == 2


def test_reused_slot_does_not_revive_old_handle() -> None:
    heap, handles = build([1, 2], capacity=2)
    old = handles[2]
    heap.poll()
    fresh = heap.push(7)

    assert fresh.alive and fresh.value == 7
    assert old != fresh
    with pytest.raises(StaleHandle):
        old.value


def test_handle_from_other_heap_is_rejected() -> None:
    heap_a, handles_a = build([1, 2])
    heap_b, _ = build([1, 2])
    assert handles_a[1] not in heap_b
    with pytest.raises(StaleHandle):
        heap_b.remove_node(handles_a[1])
    assert heap_b.size == 2


def test_clear_invalidates_all_handles() -> None:
    heap, handles = build([1, 2, 3])
    heap.clear()
    assert not any(node.alive for node in handles.values())


def test_get_node_at_returns_equal_handles() -> None:
    heap, handles = build([4, 9, 1])
    root = heap.get_node_at(0)
    assert root == handles[9]
    assert hash(root) == hash(handles[9])
    assert root in heap


def test_update_increase_key_moves_to_root() -> None:
    heap, handles = build([10, 20, 30, 40, 50])
    node = heap.update(handles[10], 100)
    assert node.position == 0
    assert heap.peek() == 100
    heap.check_invariants()


def test_update_decrease_key_sinks() -> None:
    heap, handles = build([10, 20, 30, 40, 50])
    heap.update(handles[50], 0)
    assert heap.peek() == 40
    heap.check_invariants()
    assert list(heap.drain()) == [40, 30, 20, 10, 0]


def test_cancel_scheduled_entries() -> None:
    # Event-queue usage: min-heap on deadline, cancel entries by handle.
    heap: IndexedHeap[tuple[float, str]] = IndexedHeap(
        8, lambda a, b: natural_order(b[0], a[0]), check_invariants=True
    )
    timers = {name: heap.push((deadline, name)) for deadline, name in
              [(3.0, "c"), (1.0, "a"), (5.0, "e"), (2.0, "b"), (4.0, "d")]}

    heap.remove_node(timers["b"])
    heap.remove_node(timers["d"])
    assert [name for _, name in heap.drain()] == ["a", "c", "e"]
