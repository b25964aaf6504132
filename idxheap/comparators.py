from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")
K = TypeVar("K")

Comparator = Callable[[T, T], int]


def natural_order(a: Any, b: Any) -> int:
    """Three-way comparison using ``<`` and ``>``: -1, 0 or 1."""
    return (a > b) - (a < b)


def reverse_order(a: Any, b: Any) -> int:
    return natural_order(b, a)


def reversed_comparator(compare: Comparator[T]) -> Comparator[T]:
    def _reversed(a: T, b: T) -> int:
        return compare(b, a)

    return _reversed


def by_key(key: Callable[[T], K], compare: Comparator[K] = natural_order) -> Comparator[T]:
    """Compare values by ``key(value)``, e.g. ``by_key(lambda e: e.deadline, reverse_order)``."""

    def _by_key(a: T, b: T) -> int:
        return compare(key(a), key(b))

    return _by_key
