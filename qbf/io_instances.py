from __future__ import annotations

import os
import glob
from typing import List

from .instance import QBFInstance


def _read_tokens(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        return f.read().split()


def load_qbf(path: str) -> QBFInstance:
    """
    Reads a QBF instance file:
      - first token: n
      - then the upper triangle of A, row by row (row i holds n - i values)
    """
    tokens = _read_tokens(path)
    if not tokens:
        raise ValueError(f"Empty instance file: {path}")

    try:
        n = int(tokens[0])
    except ValueError:
        raise ValueError(f"Cannot read instance size in {path}: {tokens[0]!r}") from None
    if n < 1:
        raise ValueError(f"Invalid instance size {n} in {path}")

    expected = n * (n + 1) // 2
    values = tokens[1:]
    if len(values) != expected:
        raise ValueError(f"{path}: expected {expected} coefficients, found {len(values)}")

    rows: List[List[float]] = []
    pos = 0
    for i in range(n):
        row: List[float] = []
        for tok in values[pos:pos + n - i]:
            try:
                row.append(float(tok))
            except ValueError:
                raise ValueError(f"{path}: non-numeric coefficient {tok!r} on row {i}") from None
        rows.append(row)
        pos += n - i

    return QBFInstance.from_upper_triangle(n, rows)


def iter_instance_files(folder: str) -> List[str]:
    """Every regular file under folder, recursively, sorted."""
    paths = glob.glob(os.path.join(folder, "**", "*"), recursive=True)
    return sorted(p for p in paths if os.path.isfile(p) and not os.path.basename(p).startswith("."))
