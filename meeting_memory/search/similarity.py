"""Cosine similarity between embedding vectors."""

from collections.abc import Sequence
import math


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    A zero-magnitude input makes the denominator 1, so the raw dot product
    (normally 0.0) is returned instead of NaN.
    """
    dot = math.fsum(x * y for x, y in zip(a, b))
    denominator = math.hypot(*a) * math.hypot(*b)
    return dot / (denominator or 1.0)
