from __future__ import annotations

import random
import unittest

from metaheuristics.solution import Solution
from qbf.binding import make_binding
from qbf.evaluator import QBFInverse
from qbf.instance import QBFInstance
from qbf.local_search import DEFAULT_TOLERANCE, Move, apply_move, best_move, local_search_best_improvement


class TestBestMove(unittest.TestCase):
    def test_move_kinds(self):
        self.assertEqual(Move(-1.0, cand_in=3).kind, "insertion")
        self.assertEqual(Move(-1.0, cand_out=3).kind, "removal")
        self.assertEqual(Move(-1.0, cand_in=2, cand_out=3).kind, "exchange")
        self.assertEqual(Move(0.0).kind, "none")

    def test_picks_lowest_delta_across_families(self):
        # A = diag(5, -3, 1): inserting 0 is the best move from {1}
        inst = QBFInstance.build([[5, 0, 0], [0, -3, 0], [0, 0, 1]])
        ev = QBFInverse(inst)
        sol = Solution({1})
        ev.evaluate(sol)
        move = best_move(ev, sol, [0, 2])
        # insert 0: -5, remove 1: -3, exchange 0 for 1: -8
        self.assertEqual(move.kind, "exchange")
        self.assertEqual((move.cand_in, move.cand_out, move.delta), (0, 1, -8.0))

        apply_move(sol, move)
        self.assertEqual(sol.elements, {0})

    def test_empty_neighbourhood(self):
        ev = QBFInverse(QBFInstance.build([[1]]))
        self.assertEqual(best_move(ev, Solution(), []).delta, float("inf"))


class TestLocalSearch(unittest.TestCase):
    def _assert_local_optimum(self, binding, sol):
        ev = binding.evaluator
        cl = binding.update_candidates(sol, [])
        for c in cl:
            self.assertGreaterEqual(ev.insertion_cost(c, sol), -DEFAULT_TOLERANCE)
            for e in sol.elements:
                self.assertGreaterEqual(ev.exchange_cost(c, e, sol), -DEFAULT_TOLERANCE)
        for e in sol.elements:
            self.assertGreaterEqual(ev.removal_cost(e, sol), -DEFAULT_TOLERANCE)

    def test_returns_local_optimum(self):
        rng = random.Random(13)
        for problem in ("qbf", "qbfpt"):
            for _ in range(5):
                inst = QBFInstance.random(14, rng)
                binding = make_binding(inst, problem)
                start = set(rng.sample(range(inst.n), 3)) if problem == "qbf" else set()
                sol = Solution(start)
                before = binding.evaluator.evaluate(sol.copy())
                out = binding.local_search(sol)
                self.assertIs(out, sol)
                self.assertLessEqual(out.cost, before)
                self.assertAlmostEqual(out.cost, binding.evaluator.evaluate(out.copy()))
                self._assert_local_optimum(binding, out)

    def test_binding_uses_default_tolerance(self):
        inst = QBFInstance.build([[1.0]])
        self.assertEqual(make_binding(inst, "qbf").tolerance, DEFAULT_TOLERANCE)
        self.assertEqual(make_binding(inst, "qbfpt", tolerance=0.5).tolerance, 0.5)

    def test_tolerance_ignores_tiny_improvements(self):
        inst = QBFInstance.build([[1e-12, 0.0], [0.0, 0.0]])
        ev = QBFInverse(inst)
        sol = local_search_best_improvement(ev, Solution(), candidates=lambda s: [0, 1])
        self.assertEqual(sol.elements, set())
        sol = local_search_best_improvement(ev, Solution(), candidates=lambda s: [0, 1], tolerance=0.0)
        self.assertEqual(sol.elements, {0})


if __name__ == "__main__":
    unittest.main()
