from __future__ import annotations

from typing import Iterable

MAX_SUGGESTION_DISTANCE = 2


def edit_distance(a: str, b: str) -> int:
    """Optimal string alignment distance: insert, delete, substitute, swap adjacent (each costs 1)."""
    rows = len(a) + 1
    cols = len(b) + 1
    d = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        d[i][0] = i
    for j in range(cols):
        d[0][j] = j

    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if a[i - 1] == b[j - 1] else 1
            d[i][j] = min(
                d[i - 1][j] + 1,
                d[i][j - 1] + 1,
                d[i - 1][j - 1] + cost,
            )
            if i > 1 and j > 1 and a[i - 1] == b[j - 2] and a[i - 2] == b[j - 1]:
                d[i][j] = min(d[i][j], d[i - 2][j - 2] + 1)
    return d[-1][-1]


def suggest(word: str, candidates: Iterable[str], *, max_distance: int = MAX_SUGGESTION_DISTANCE) -> list[str]:
    """Candidates closest to ``word``, all at the same (smallest) distance, if within ``max_distance``."""
    best: list[str] = []
    best_d = max_distance + 1
    for c in sorted(set(candidates)):
        dist = edit_distance(word, c)
        if dist < best_d:
            best, best_d = [c], dist
        elif dist == best_d:
            best.append(c)
    return best if best_d <= max_distance else []
