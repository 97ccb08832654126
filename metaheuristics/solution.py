from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, Set

Idx = int


@dataclass
class Solution:
    """
    Set of selected elements plus the cost cached by the last evaluation.

    The cost is never recomputed on mutation: callers refresh it through
    `Evaluator.evaluate`.
    """
    elements: Set[Idx] = field(default_factory=set)
    cost: float = float("inf")

    @staticmethod
    def of(elements: Iterable[Idx], cost: float = float("inf")) -> "Solution":
        return Solution(set(elements), cost)

    def copy(self) -> "Solution":
        return Solution(set(self.elements), self.cost)

    def size(self) -> int:
        return len(self.elements)

    def add(self, e: Idx) -> None:
        if e in self.elements:
            raise ValueError(f"Element {e} already in solution")
        self.elements.add(e)

    def remove(self, e: Idx) -> None:
        self.elements.remove(e)

    def __contains__(self, e: object) -> bool:
        return e in self.elements

    def __iter__(self) -> Iterator[Idx]:
        return iter(sorted(self.elements))

    def __len__(self) -> int:
        return len(self.elements)

    def __str__(self) -> str:
        return f"Solution: cost=[{self.cost}], size=[{self.size()}], elements={sorted(self.elements)}"
