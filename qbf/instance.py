from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Sequence

Idx = int
Matrix = List[List[float]]


@dataclass(frozen=True)
class QBFInstance:
    """
    Coefficient matrix A of f(x) = x'Ax over binary x.
    """
    a: Matrix

    # Precomputed pair weights
    pair: Matrix     # pair[i][j] = A[i][j] + A[j][i] for i != j, 0 on the diagonal

    @property
    def n(self) -> int:
        return len(self.a)

    @staticmethod
    def build(a: Sequence[Sequence[float]]) -> "QBFInstance":
        n = len(a)
        mat: Matrix = [[float(v) for v in row] for row in a]
        for i, row in enumerate(mat):
            if len(row) != n:
                raise ValueError(f"Row {i} has {len(row)} coefficients, expected {n}")

        pair: Matrix = [[0.0] * n for _ in range(n)]
        for i in range(n):
            for j in range(n):
                if i != j:
                    pair[i][j] = mat[i][j] + mat[j][i]

        return QBFInstance(a=mat, pair=pair)

    @staticmethod
    def from_upper_triangle(n: int, rows: Sequence[Sequence[float]]) -> "QBFInstance":
        """rows[i] holds A[i][i..n-1]; the lower triangle is zero."""
        if len(rows) != n:
            raise ValueError(f"Expected {n} rows, got {len(rows)}")
        a: Matrix = [[0.0] * n for _ in range(n)]
        for i, row in enumerate(rows):
            if len(row) != n - i:
                raise ValueError(f"Row {i} has {len(row)} coefficients, expected {n - i}")
            for k, v in enumerate(row):
                a[i][i + k] = float(v)
        return QBFInstance.build(a)

    @staticmethod
    def random(n: int, rng: random.Random, low: int = -10, high: int = 10) -> "QBFInstance":
        """Upper-triangular instance with integer coefficients in [low, high]."""
        rows = [[rng.randint(low, high) for _ in range(n - i)] for i in range(n)]
        return QBFInstance.from_upper_triangle(n, rows)
