from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from metaheuristics.grasp import Evaluator
from metaheuristics.solution import Idx, Solution

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 1e-9

CandidateFn = Callable[[Solution], List[Idx]]


@dataclass
class Move:
    delta: float
    cand_in: Optional[Idx] = None
    cand_out: Optional[Idx] = None

    @property
    def kind(self) -> str:
        if self.cand_in is not None and self.cand_out is not None:
            return "exchange"
        if self.cand_in is not None:
            return "insertion"
        if self.cand_out is not None:
            return "removal"
        return "none"


def best_move(evaluator: Evaluator, sol: Solution, candidates: List[Idx]) -> Move:
    """Lowest-delta move among insertions, removals and exchanges (first found wins ties)."""
    best = Move(float("inf"))
    inside = sorted(sol.elements)

    for c in candidates:
        d = evaluator.insertion_cost(c, sol)
        if d < best.delta:
            best = Move(d, cand_in=c)

    for e in inside:
        d = evaluator.removal_cost(e, sol)
        if d < best.delta:
            best = Move(d, cand_out=e)

    for c in candidates:
        for e in inside:
            d = evaluator.exchange_cost(c, e, sol)
            if d < best.delta:
                best = Move(d, cand_in=c, cand_out=e)

    return best


def apply_move(sol: Solution, move: Move) -> None:
    if move.cand_out is not None:
        sol.remove(move.cand_out)
    if move.cand_in is not None:
        sol.add(move.cand_in)


def local_search_best_improvement(evaluator: Evaluator,
                                  sol: Solution,
                                  candidates: CandidateFn,
                                  tolerance: float = DEFAULT_TOLERANCE) -> Solution:
    """
    Descent over insertion / removal / exchange with best improvement.
    The candidate list is refreshed before every pass; stops at a local optimum.
    Modifies sol in place and returns it.
    """
    evaluator.evaluate(sol)
    passes = 0
    while True:
        cl = candidates(sol)
        move = best_move(evaluator, sol, cl)
        if move.delta >= -tolerance:
            break
        apply_move(sol, move)
        evaluator.evaluate(sol)
        passes += 1

    logger.debug("Local search: %d moves, cost=%.4f", passes, sol.cost)
    return sol
