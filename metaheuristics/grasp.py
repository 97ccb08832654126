from __future__ import annotations

import math
import random
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Union

from .bias import Bias, BiasedCandidatePool, resolve_bias
from .reactive import AlphaPool
from .solution import Idx, Solution

logger = logging.getLogger(__name__)


class Evaluator(Protocol):
    """Objective function of a minimization problem over element sets."""

    @property
    def domain_size(self) -> int: ...

    def evaluate(self, sol: Solution) -> float: ...

    def insertion_cost(self, elem: Idx, sol: Solution) -> float: ...

    def removal_cost(self, elem: Idx, sol: Solution) -> float: ...

    def exchange_cost(self, elem_in: Idx, elem_out: Idx, sol: Solution) -> float: ...


class ProblemBinding(Protocol):
    """Problem-specific hooks the engine calls."""

    evaluator: Evaluator

    def make_candidates(self) -> List[Idx]: ...

    def update_candidates(self, sol: Solution, candidates: List[Idx]) -> List[Idx]: ...

    def empty_solution(self) -> Solution: ...

    def local_search(self, sol: Solution) -> Solution: ...


@dataclass
class GraspConfig:
    """
    Exactly one of `alpha` (plain / biased GRASP) or `n_alphas`
    (Reactive GRASP) must be given. `bias` switches construction to the
    rank-weighted candidate pool.
    """
    iterations: int = 1000
    alpha: Optional[float] = None
    n_alphas: Optional[int] = None
    bias: Union[str, Bias, None] = None
    update_every: Optional[int] = None
    seed: int = 0

    def __post_init__(self) -> None:
        if self.iterations < 1:
            raise ValueError(f"iterations should be >= 1, got {self.iterations}")
        if (self.alpha is None) == (self.n_alphas is None):
            raise ValueError("Provide exactly one of alpha (plain GRASP) or n_alphas (Reactive GRASP)")
        if self.alpha is not None and not 0.0 <= self.alpha <= 1.0:
            raise ValueError(f"alpha should be in [0, 1], got {self.alpha}")
        if self.n_alphas is not None and self.n_alphas < 2:
            raise ValueError(f"n_alphas should be an integer greater than 1, got {self.n_alphas}")
        if self.update_every is not None and self.update_every < 1:
            raise ValueError(f"update_every should be >= 1, got {self.update_every}")
        self.bias = resolve_bias(self.bias)

    @property
    def reactive(self) -> bool:
        return self.n_alphas is not None

    @property
    def biased(self) -> bool:
        return self.bias is not None

    def pool_update_every(self) -> int:
        if self.update_every is not None:
            return self.update_every
        return math.ceil(math.sqrt(self.n_alphas or 1))


@dataclass
class IterationRecord:
    iteration: int
    alpha: float
    cost: float
    incumbent_cost: float


def insertion_deltas(evaluator: Evaluator, candidates: List[Idx], sol: Solution) -> Dict[Idx, float]:
    return {c: evaluator.insertion_cost(c, sol) for c in candidates}


def admission_threshold(deltas: Dict[Idx, float], alpha: float) -> float:
    lo = min(deltas.values())
    hi = max(deltas.values())
    return lo + alpha * (hi - lo)


def restricted_candidates(deltas: Dict[Idx, float], alpha: float) -> List[Idx]:
    """Candidates whose delta is within min + alpha * (max - min), in CL order."""
    threshold = admission_threshold(deltas, alpha)
    return [c for c, d in deltas.items() if d <= threshold]


class GRASP:
    """
    GRASP for minimization:
      repeat `iterations` times:
        - (reactive) draw alpha from the alpha pool
        - greedy randomized construction (RCL, or biased RCM)
        - local search supplied by the problem binding
      keep best solution.
    """

    def __init__(self, binding: ProblemBinding, config: GraspConfig, rng: Optional[random.Random] = None):
        self.binding = binding
        self.evaluator = binding.evaluator
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)

        self.alpha: Optional[float] = config.alpha
        self.alpha_pool: Optional[AlphaPool] = None
        self.incumbent: Optional[Solution] = None
        self.history: List[IterationRecord] = []

        # Per-step listener, called with (solution, candidates, deltas, admitted)
        self.on_step: Optional[Callable[[Solution, List[Idx], Dict[Idx, float], List[Idx]], None]] = None

    def constructive_heuristic(self, alpha: float) -> Solution:
        """Builds a solution by repeatedly inserting a random admissible candidate until CL is empty."""
        cl = self.binding.make_candidates()
        sol = self.binding.empty_solution()
        bias = self.config.bias
        rcm = BiasedCandidatePool() if bias is not None else None

        while True:
            self.evaluator.evaluate(sol)
            cl = self.binding.update_candidates(sol, cl)
            if not cl:
                break

            deltas = insertion_deltas(self.evaluator, cl, sol)
            admitted = restricted_candidates(deltas, alpha)
            if self.on_step is not None:
                self.on_step(sol, cl, deltas, admitted)

            if rcm is None:
                chosen = self.rng.choice(admitted)
            else:
                for c in admitted:
                    rcm.put(c, deltas[c])
                rcm.update_weights(bias)
                chosen = rcm.select(self.rng)
                rcm.clear()

            cl.remove(chosen)
            sol.add(chosen)

        return sol

    def solve(self) -> Solution:
        """Runs the main loop and returns the best solution found."""
        cfg = self.config
        self.history = []
        self.incumbent = self.binding.empty_solution()
        self.evaluator.evaluate(self.incumbent)

        if cfg.reactive:
            self.alpha_pool = AlphaPool(cfg.n_alphas)
        update_every = cfg.pool_update_every()

        for i in range(cfg.iterations):
            if self.alpha_pool is not None:
                self.alpha = self.alpha_pool.select(self.rng)

            sol = self.constructive_heuristic(self.alpha)
            sol = self.binding.local_search(sol)

            if sol.cost < self.incumbent.cost:
                self.incumbent = sol.copy()
                logger.info("(Iter. %d) BestSol cost=%.4f size=%d, alpha=%.4f",
                            i, self.incumbent.cost, self.incumbent.size(), self.alpha)

            if self.alpha_pool is not None and i < cfg.iterations - 1:
                self.alpha_pool.update_a(self.alpha, sol.cost)
                if (i + 1) % update_every == 0:
                    self.alpha_pool.update_weights(self.incumbent.cost)

            self.history.append(IterationRecord(i, self.alpha, sol.cost, self.incumbent.cost))

        return self.incumbent
