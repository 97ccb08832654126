from __future__ import annotations

import math
import sys
from typing import Callable, Dict, List, Tuple, Union

from .weighted import WeightedSelector

Bias = Callable[[int], float]


def random_bias(r: int) -> float:
    return 1.0


def linear_bias(r: int) -> float:
    return 1.0 / r


def log_bias(r: int) -> float:
    return 1.0 / math.log(r + 1)


def exponential_bias(r: int) -> float:
    # exp(-r) reaches 0.0 past rank 745
    return max(math.exp(-r), sys.float_info.min)


def polynomial_bias(r: int) -> float:
    return r ** -2.0


BIAS_FUNCTIONS: Dict[str, Bias] = {
    "random": random_bias,
    "linear": linear_bias,
    "log": log_bias,
    "exponential": exponential_bias,
    "polynomial": polynomial_bias,
}


def resolve_bias(bias: Union[str, Bias, None]) -> Union[Bias, None]:
    """Map a bias name to its function; callables and None pass through."""
    if bias is None or callable(bias):
        return bias
    try:
        return BIAS_FUNCTIONS[bias]
    except KeyError:
        raise ValueError(f"Unknown bias '{bias}', expected one of {sorted(BIAS_FUNCTIONS)}") from None


class BiasedCandidatePool(WeightedSelector[int]):
    """
    Restricted candidates of one constructive step (Biased GRASP).

    Candidates are ranked 1..k by ascending insertion delta and weighted by
    bias(rank). Must be cleared before the next step.
    """

    def __init__(self) -> None:
        super().__init__()
        self._pending: List[Tuple[float, int]] = []

    def put(self, candidate: int, delta: float) -> None:
        self._pending.append((delta, candidate))

    def update_weights(self, bias: Bias) -> None:
        WeightedSelector.clear(self)
        for rank, (_, cand) in enumerate(sorted(self._pending), start=1):
            w = bias(rank)
            if w < 0:
                raise ValueError(f"Bias returned negative weight {w} for rank {rank}")
            self.add(cand, w)

    def candidates(self) -> List[int]:
        return [cand for _, cand in self._pending]

    def clear(self) -> None:
        super().clear()
        self._pending.clear()
