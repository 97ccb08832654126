from __future__ import annotations

import logging
import random
from typing import Dict, Iterator, Optional, Sequence

from .weighted import WeightedItem, select_weighted

logger = logging.getLogger(__name__)


class Alpha(WeightedItem[float]):
    """
    Candidate greediness value for Reactive GRASP.

    Its weight is the probability of being drawn; `a` is the mean cost of
    the solutions built while it was active.
    """

    __slots__ = ("a", "uses", "acc_cost")

    def __init__(self, value: float, weight: float):
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Alpha value should be in [0, 1], got {value}")
        super().__init__(value, weight)
        self.a = 0.0
        self.uses = 0
        self.acc_cost = 0.0

    def update_a(self, cost: float) -> None:
        self.uses += 1
        self.acc_cost += cost
        self.a = self.acc_cost / self.uses

    def q(self, incumbent_cost: float) -> float:
        """
        Score against the incumbent; grows as the mean cost `a` improves.

        incumbent_cost / a for positive costs, a / incumbent_cost for negative
        ones. 0 while the alpha has no history or when the signs differ.
        """
        if self.a == 0.0 or incumbent_cost == 0.0:
            return 0.0
        if (self.a > 0.0) != (incumbent_cost > 0.0):
            return 0.0
        if incumbent_cost > 0.0:
            return incumbent_cost / self.a
        return self.a / incumbent_cost


class AlphaPool:
    """
    m alphas with values i/m (i = 1..m), each drawn with probability 1/m
    until the first weight update. Explicit `values` replace the i/m grid.
    """

    def __init__(self, m: int, values: Optional[Sequence[float]] = None):
        if m < 1:
            raise ValueError(f"Alpha pool needs at least 1 alpha, got {m}")
        if values is None:
            values = [i / m for i in range(1, m + 1)]
        elif len(values) != m:
            raise ValueError(f"Expected {m} alpha values, got {len(values)}")

        self.m = m
        self._alphas: Dict[float, Alpha] = {}
        for val in values:
            val = float(val)
            if val in self._alphas:
                raise ValueError(f"Duplicate alpha value {val}")
            self._alphas[val] = Alpha(val, 1.0 / m)

    def select(self, rng: random.Random) -> float:
        return select_weighted(self._alphas.values(), rng)

    def update_a(self, value: float, cost: float) -> None:
        self._alphas[value].update_a(cost)

    def update_weights(self, incumbent_cost: float) -> None:
        """
        p_i = Q_i / sum(Q), then prune alphas whose probability is exactly 0.

        Negative Q values count as 0. When every Q is 0 the weights are kept
        as they are.
        """
        qs = {v: max(0.0, a.q(incumbent_cost)) for v, a in self._alphas.items()}
        total = sum(qs.values())
        if total <= 0.0:
            logger.debug("Alpha pool update skipped: no alpha has a positive score")
            return

        for v, a in self._alphas.items():
            a.weight = qs[v] / total

        pruned = [v for v, a in self._alphas.items() if a.weight == 0.0]
        for v in pruned:
            del self._alphas[v]
        if pruned:
            logger.debug("Pruned alphas %s", [round(v, 4) for v in pruned])
        logger.debug("Alpha probabilities: %s", self.probabilities())

    def probabilities(self) -> Dict[float, float]:
        return {v: a.weight for v, a in self._alphas.items()}

    def __getitem__(self, value: float) -> Alpha:
        return self._alphas[value]

    def __contains__(self, value: object) -> bool:
        return value in self._alphas

    def __iter__(self) -> Iterator[Alpha]:
        return iter(self._alphas.values())

    def __len__(self) -> int:
        return len(self._alphas)
