from __future__ import annotations

from typing import List, Sequence

from metaheuristics.solution import Idx, Solution

from .evaluator import QBFInverse
from .instance import QBFInstance
from .local_search import DEFAULT_TOLERANCE, local_search_best_improvement
from .solution import blocked_elements
from .triples import Triple, generate_prohibited_triples

PROBLEMS = ("qbf", "qbfpt")


class QBFBinding:
    """
    GRASP hooks for the (inverse) QBF.

    Without triples every element outside the solution is a viable
    candidate. With prohibited triples an element also leaves the candidate
    list whenever the two other members of one of its triples are in the
    solution; this filter is recomputed from scratch on every refresh.
    """

    def __init__(self, evaluator: QBFInverse, triples: Sequence[Triple] = (),
                 tolerance: float = DEFAULT_TOLERANCE):
        self.evaluator = evaluator
        self.triples = tuple(triples)
        self.tolerance = tolerance

    def make_candidates(self) -> List[Idx]:
        return list(range(self.evaluator.domain_size))

    def update_candidates(self, sol: Solution, candidates: List[Idx]) -> List[Idx]:
        blocked = blocked_elements(self.triples, sol) if self.triples else set()
        return [e for e in range(self.evaluator.domain_size)
                if e not in sol.elements and e not in blocked]

    def empty_solution(self) -> Solution:
        """All variables set to zero: a QBF solution of cost 0."""
        return Solution(set(), 0.0)

    def local_search(self, sol: Solution) -> Solution:
        """Best improvement over insertion, removal and exchange moves."""
        return local_search_best_improvement(
            self.evaluator,
            sol,
            candidates=lambda s: self.update_candidates(s, []),
            tolerance=self.tolerance,
        )


def make_binding(inst: QBFInstance, problem: str = "qbf", tolerance: float = DEFAULT_TOLERANCE) -> QBFBinding:
    problem = problem.lower()
    if problem == "qbf":
        return QBFBinding(QBFInverse(inst), tolerance=tolerance)
    if problem == "qbfpt":
        return QBFBinding(QBFInverse(inst), generate_prohibited_triples(inst.n), tolerance=tolerance)
    raise ValueError(f"Unknown problem: {problem}")
