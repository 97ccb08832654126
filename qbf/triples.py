from __future__ import annotations

from typing import List, Tuple

Triple = Tuple[int, int, int]

PI1, PI2 = 131, 1031
PI3, PI4 = 193, 1093


def _g(u: int, n: int) -> int:
    lg = 1 + (PI1 * u + PI2) % n
    return lg if lg != u else 1 + lg % n


def _h(u: int, g: int, n: int) -> int:
    lh = 1 + (PI3 * u + PI4) % n
    if lh != u and lh != g:
        return lh
    alt = 1 + lh % n
    if alt != u and alt != g:
        return alt
    return 1 + (lh + 1) % n


def generate_prohibited_triples(n: int) -> List[Triple]:
    """
    Deterministic prohibited triples for an n-variable QBFPT instance.

    For every u in 1..n the triple {u, g(u), h(u)} is prohibited, with g
    and h the linear congruential maps of the MO824 QBFPT benchmark.
    Returned triples are sorted, 0-based and unique.
    """
    if n < 3:
        return []
    seen = set()
    triples: List[Triple] = []
    for u in range(1, n + 1):
        g = _g(u, n)
        h = _h(u, g, n)
        t = tuple(sorted((u - 1, g - 1, h - 1)))
        if len(set(t)) < 3 or t in seen:
            continue
        seen.add(t)
        triples.append(t)
    return triples
