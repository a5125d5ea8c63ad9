"""Edit distance for character-level word matching."""
from __future__ import annotations

from typing import Sequence


def levenshtein(a: Sequence[str], b: Sequence[str]) -> int:
    """Classic Levenshtein distance (insert, delete, substitute all cost 1).

    Works on strings or any token sequences.

    Args:
        a: First sequence
        b: Second sequence

    Returns:
        Minimum number of edits turning ``a`` into ``b``
    """
    n, m = len(a), len(b)
    if n == 0:
        return m
    if m == 0:
        return n

    # single rolling row of the dp table
    prev = list(range(m + 1))
    for i in range(1, n + 1):
        curr = [i] + [0] * m
        for j in range(1, m + 1):
            cost_sub = 0 if a[i - 1] == b[j - 1] else 1
            curr[j] = min(
                prev[j] + 1,  # del
                curr[j - 1] + 1,  # ins
                prev[j - 1] + cost_sub,  # match / sub
            )
        prev = curr
    return prev[m]
