from __future__ import annotations

import random
from bisect import bisect_right
from typing import Generic, Iterable, Iterator, List, TypeVar

T = TypeVar("T")


class EmptySelectionError(ValueError):
    """Weighted draw over an empty pool or a pool whose weights are all zero."""


class WeightedItem(Generic[T]):
    """Read-only value with a mutable, non-negative weight."""

    __slots__ = ("_value", "weight")

    def __init__(self, value: T, weight: float):
        self._value = value
        self.weight = float(weight)

    @property
    def value(self) -> T:
        return self._value

    def __repr__(self) -> str:
        v = f"{self._value:.4f}" if isinstance(self._value, float) else repr(self._value)
        return f"{{value: {v}, weight: {self.weight:.4f}}}"


def select_weighted(items: Iterable[WeightedItem[T]], rng: random.Random) -> T:
    """
    Draw one value with probability weight / total weight.

    Builds the running prefix sums, draws u in [0, total) and returns the
    value of the smallest prefix sum strictly greater than u. Items with
    zero weight share the prefix sum of the item before them and can never
    be drawn.
    """
    values: List[T] = []
    cumulative: List[float] = []
    total = 0.0
    for item in items:
        if item.weight < 0:
            raise ValueError(f"Negative weight {item.weight} for {item.value!r}")
        total += item.weight
        values.append(item.value)
        cumulative.append(total)

    if not values:
        raise EmptySelectionError("Cannot select from an empty pool")
    if total <= 0.0:
        raise EmptySelectionError("Cannot select when every weight is zero")

    u = rng.random() * total
    k = bisect_right(cumulative, u)
    if k >= len(values):
        # u rounded up to total: the first item reaching total carries weight
        k = cumulative.index(total)
    return values[k]


class WeightedSelector(Generic[T]):
    """Ordered collection of weighted items supporting weighted random draw."""

    def __init__(self, items: Iterable[WeightedItem[T]] = ()):
        self._items: List[WeightedItem[T]] = list(items)

    def add(self, value: T, weight: float) -> WeightedItem[T]:
        item = WeightedItem(value, weight)
        self._items.append(item)
        return item

    def clear(self) -> None:
        self._items.clear()

    def total_weight(self) -> float:
        return sum(item.weight for item in self._items)

    def select(self, rng: random.Random) -> T:
        return select_weighted(self._items, rng)

    def __iter__(self) -> Iterator[WeightedItem[T]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._items!r})"
