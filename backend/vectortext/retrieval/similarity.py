"""Vector similarity helpers."""

from __future__ import annotations

import math
from typing import Sequence

_UNIT_TOLERANCE = 1e-9


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between ``a`` and ``b`` clamped to ``[0, 1]``.

    A zero-norm operand yields ``0.0``.
    """
    if len(a) != len(b):
        raise ValueError("Embeddings must have the same dimension")
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator <= 0.0:
        return 0.0
    score = dot / denominator
    # Absorb rounding from the text storage form so duplicates score exactly 1.
    if score >= 1.0 - _UNIT_TOLERANCE:
        return 1.0
    return max(0.0, score)


__all__ = ["cosine_similarity"]
