# src/comparison/similarity.py - v1
"""String normalization and edit-distance similarity.

``levenshtein`` uses the bit-parallel algorithm of Myers (1999) in Hyyro's
formulation, with Python ints as arbitrary-width bit vectors, so rendered
HTML documents of several thousand characters compare in O(n) big-int
operations instead of an O(n*m) table.
"""

from __future__ import annotations

import re
from typing import Sequence

import numpy as np

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_value(value: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return _WHITESPACE_RE.sub(" ", value.lower().strip())


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (unit insert/delete/substitute)."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    m = len(b)
    if m == 0:
        return len(a)

    peq: dict[str, int] = {}
    for i, ch in enumerate(b):
        peq[ch] = peq.get(ch, 0) | (1 << i)

    mask = (1 << m) - 1
    high = 1 << (m - 1)
    pv, mv, score = mask, 0, m

    for ch in a:
        eq = peq.get(ch, 0)
        xv = eq | mv
        xh = (((eq & pv) + pv) ^ pv) | eq
        ph = mv | ~(xh | pv)
        mh = pv & xh
        if ph & high:
            score += 1
        elif mh & high:
            score -= 1
        ph = (ph << 1) | 1
        mh <<= 1
        pv = (mh | ~(xv | ph)) & mask
        mv = ph & xv & mask

    return score


def normalized_similarity(a: str, b: str) -> float:
    """``1 - distance / max(len)``; 1.0 for equal strings, 0.0 if one is empty."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def pairwise_similarity_matrix(values: Sequence[str]) -> np.ndarray:
    """Symmetric matrix of normalized similarities with a unit diagonal."""
    n = len(values)
    matrix = np.eye(n, dtype=np.float64)
    for i in range(n):
        for j in range(i + 1, n):
            matrix[i, j] = matrix[j, i] = normalized_similarity(values[i], values[j])
    return matrix
