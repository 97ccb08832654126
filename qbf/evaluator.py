from __future__ import annotations

from metaheuristics.solution import Idx, Solution

from .instance import QBFInstance


class QBFInverse:
    """
    Inverse QBF, -x'Ax, so that maximizing the QBF becomes a minimization.
    """

    def __init__(self, inst: QBFInstance):
        self.inst = inst

    @property
    def domain_size(self) -> int:
        return self.inst.n

    def contribution(self, elem: Idx, sol: Solution) -> float:
        """A[e][e] + sum of pair weights between e and the other elements of sol (max form)."""
        pair = self.inst.pair[elem]
        total = self.inst.a[elem][elem]
        for j in sol.elements:
            if j != elem:
                total += pair[j]
        return total

    def evaluate(self, sol: Solution) -> float:
        a = self.inst.a
        elems = sorted(sol.elements)
        total = 0.0
        for i in elems:
            row = a[i]
            for j in elems:
                total += row[j]
        sol.cost = -total
        return sol.cost

    def insertion_cost(self, elem: Idx, sol: Solution) -> float:
        if elem in sol.elements:
            return 0.0
        return -self.contribution(elem, sol)

    def removal_cost(self, elem: Idx, sol: Solution) -> float:
        if elem not in sol.elements:
            return 0.0
        return self.contribution(elem, sol)

    def exchange_cost(self, elem_in: Idx, elem_out: Idx, sol: Solution) -> float:
        if elem_in == elem_out:
            return 0.0
        if elem_in in sol.elements:
            return self.removal_cost(elem_out, sol)
        if elem_out not in sol.elements:
            return self.insertion_cost(elem_in, sol)
        gain = self.contribution(elem_in, sol) - self.contribution(elem_out, sol) - self.inst.pair[elem_in][elem_out]
        return -gain
