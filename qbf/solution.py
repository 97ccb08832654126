from __future__ import annotations

from typing import Iterable, List, Set

from metaheuristics.solution import Idx, Solution

from .triples import Triple


def blocked_elements(triples: Iterable[Triple], sol: Solution) -> Set[Idx]:
    """Elements that would complete a triple whose two other members are already in sol."""
    s = sol.elements
    blocked: Set[Idx] = set()
    for e1, e2, e3 in triples:
        if e1 in s and e2 in s:
            blocked.add(e3)
        elif e1 in s and e3 in s:
            blocked.add(e2)
        elif e2 in s and e3 in s:
            blocked.add(e1)
    return blocked


def violated_triples(triples: Iterable[Triple], sol: Solution) -> List[Triple]:
    s = sol.elements
    return [t for t in triples if t[0] in s and t[1] in s and t[2] in s]


def is_feasible(triples: Iterable[Triple], sol: Solution) -> bool:
    """Checks that no prohibited triple is fully contained in sol."""
    return not violated_triples(triples, sol)
