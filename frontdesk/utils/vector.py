"""Vector utility functions."""

import numpy as np


def cosine_similarity(vec_a: list[float], vec_b: list[float]) -> float:
    """Cosine similarity between two vectors, in [-1, 1].

    Zero vectors score 0.0.

    Raises:
        ValueError: If vectors have different lengths or are empty
    """
    if len(vec_a) != len(vec_b):
        raise ValueError(f"Vectors must have same length: got {len(vec_a)} and {len(vec_b)}")
    if len(vec_a) == 0:
        raise ValueError("Vectors cannot be empty")

    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b) / norm)
