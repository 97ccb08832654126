from __future__ import annotations

import os
import random
import tempfile
import unittest
from itertools import combinations

from metaheuristics.grasp import GRASP, GraspConfig
from metaheuristics.solution import Solution
from qbf.binding import QBFBinding, make_binding
from qbf.evaluator import QBFInverse
from qbf.instance import QBFInstance
from qbf.io_instances import iter_instance_files, load_qbf
from qbf.solution import blocked_elements, is_feasible, violated_triples
from qbf.triples import generate_prohibited_triples


class TestQBFInverse(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.inst = QBFInstance.random(9, random.Random(17))
        cls.ev = QBFInverse(cls.inst)

    def _cost(self, elements):
        return self.ev.evaluate(Solution(set(elements)))

    def test_evaluate_matches_quadratic_form(self):
        inst = QBFInstance.from_upper_triangle(3, [[1, 2, 3], [4, 5], [6]])
        ev = QBFInverse(inst)
        sol = Solution({0, 2})
        # x'Ax with x = (1, 0, 1): 1 + 3 + 6
        self.assertEqual(ev.evaluate(sol), -10.0)
        self.assertEqual(sol.cost, -10.0)
        self.assertEqual(ev.evaluate(Solution()), 0.0)

    def test_deltas_match_full_evaluation(self):
        rng = random.Random(5)
        for _ in range(20):
            elements = set(rng.sample(range(self.inst.n), rng.randint(0, self.inst.n)))
            sol = Solution(set(elements))
            base = self._cost(elements)
            for e in range(self.inst.n):
                if e in elements:
                    self.assertAlmostEqual(self.ev.removal_cost(e, sol), self._cost(elements - {e}) - base)
                    self.assertEqual(self.ev.insertion_cost(e, sol), 0.0)
                else:
                    self.assertAlmostEqual(self.ev.insertion_cost(e, sol), self._cost(elements | {e}) - base)
                    self.assertEqual(self.ev.removal_cost(e, sol), 0.0)
            for e_in in range(self.inst.n):
                for e_out in elements:
                    if e_in in elements:
                        continue
                    expected = self._cost((elements - {e_out}) | {e_in}) - base
                    self.assertAlmostEqual(self.ev.exchange_cost(e_in, e_out, sol), expected)

    def test_exchange_degenerate_cases(self):
        sol = Solution({1, 2})
        self.assertEqual(self.ev.exchange_cost(1, 1, sol), 0.0)
        self.assertEqual(self.ev.exchange_cost(2, 1, sol), self.ev.removal_cost(1, sol))
        self.assertEqual(self.ev.exchange_cost(4, 5, sol), self.ev.insertion_cost(4, sol))


class TestInstanceIO(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name, text):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        return path

    def test_load_upper_triangle(self):
        inst = load_qbf(self._write("qbf003", "3\n1 2 3\n4 5\n6\n"))
        self.assertEqual(inst.n, 3)
        self.assertEqual(inst.a, [[1.0, 2.0, 3.0], [0.0, 4.0, 5.0], [0.0, 0.0, 6.0]])
        self.assertEqual(inst.pair[2][0], 3.0)
        self.assertEqual(inst.pair[1][1], 0.0)

    def test_load_accepts_free_layout(self):
        inst = load_qbf(self._write("qbf002", "2   -1\n 7 \n\n 4"))
        self.assertEqual(inst.a, [[-1.0, 7.0], [0.0, 4.0]])

    def test_load_errors(self):
        with self.assertRaises(ValueError):
            load_qbf(self._write("empty", ""))
        with self.assertRaises(ValueError):
            load_qbf(self._write("short", "3\n1 2 3\n4\n"))
        with self.assertRaises(ValueError):
            load_qbf(self._write("long", "2\n1 2\n3\n99 98 97\n"))
        with self.assertRaises(ValueError):
            load_qbf(self._write("bad", "2\n1 x\n3\n"))
        with self.assertRaises(ValueError):
            load_qbf(self._write("size", "n\n1\n"))

    def test_iter_instance_files(self):
        self._write("qbf020", "1\n1\n")
        os.makedirs(os.path.join(self.tmp.name, "sub"))
        self._write(os.path.join("sub", "qbf040"), "1\n1\n")
        self._write(".hidden", "x")
        names = [os.path.basename(p) for p in iter_instance_files(self.tmp.name)]
        self.assertEqual(names, ["qbf020", "qbf040"])


class TestTriples(unittest.TestCase):
    def test_triples_are_valid(self):
        for n in (3, 10, 20, 40):
            triples = generate_prohibited_triples(n)
            self.assertTrue(triples)
            self.assertLessEqual(len(triples), n)
            self.assertEqual(len(set(triples)), len(triples))
            for t in triples:
                self.assertEqual(list(t), sorted(t))
                self.assertEqual(len(set(t)), 3)
                self.assertTrue(all(0 <= e < n for e in t))

    def test_deterministic(self):
        self.assertEqual(generate_prohibited_triples(25), generate_prohibited_triples(25))

    def test_small_domains_have_no_triples(self):
        self.assertEqual(generate_prohibited_triples(2), [])


class TestTripleFilter(unittest.TestCase):
    def test_blocked_elements(self):
        triples = [(0, 1, 2), (1, 3, 4), (2, 4, 5)]
        sol = Solution({0, 1, 4})
        self.assertEqual(blocked_elements(triples, sol), {2, 3})
        self.assertEqual(blocked_elements(triples, Solution({0})), set())

    def test_violations(self):
        triples = [(0, 1, 2), (1, 3, 4)]
        self.assertEqual(violated_triples(triples, Solution({0, 1, 2, 3})), [(0, 1, 2)])
        self.assertFalse(is_feasible(triples, Solution({0, 1, 2})))
        self.assertTrue(is_feasible(triples, Solution({0, 1, 3})))

    def test_candidate_list_recomputed_on_each_refresh(self):
        inst = QBFInstance.random(6, random.Random(1))
        binding = QBFBinding(QBFInverse(inst), triples=[(0, 1, 2)])
        sol = Solution({0, 1})
        self.assertEqual(binding.update_candidates(sol, [2, 3]), [3, 4, 5])
        sol.remove(1)
        self.assertEqual(binding.update_candidates(sol, [3]), [1, 2, 3, 4, 5])

    def test_qbfpt_runs_never_violate_triples(self):
        inst = QBFInstance.random(15, random.Random(2), low=0, high=10)
        binding = make_binding(inst, "qbfpt")
        triples = binding.triples
        for cfg in (GraspConfig(iterations=10, alpha=0.2, seed=3),
                    GraspConfig(iterations=10, n_alphas=4, seed=3),
                    GraspConfig(iterations=10, alpha=0.2, bias="polynomial", seed=3)):
            engine = GRASP(binding, cfg)

            def check(sol, cl, deltas, admitted):
                for c in cl:
                    trial = Solution(sol.elements | {c})
                    self.assertTrue(is_feasible(triples, trial))

            engine.on_step = check
            best = engine.solve()
            self.assertTrue(is_feasible(triples, best))

    def test_unconstrained_binding_has_no_triples(self):
        binding = make_binding(QBFInstance.random(5, random.Random(0)), "QBF")
        self.assertEqual(binding.triples, ())
        with self.assertRaises(ValueError):
            make_binding(QBFInstance.random(5, random.Random(0)), "tsp")


if __name__ == "__main__":
    unittest.main()
