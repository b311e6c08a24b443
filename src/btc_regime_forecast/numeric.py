from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def population_std(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def finite(values: Sequence[float | None]) -> list[float]:
    return [float(v) for v in values if v is not None and math.isfinite(v)]


def nearest_rank(sorted_values: Sequence[float], q: float) -> float:
    """Value at index floor(n * q) of an ascending sequence, without interpolation."""
    idx = min(int(math.floor(len(sorted_values) * q)), len(sorted_values) - 1)
    return float(sorted_values[idx])


def normalize_rows(concentration: np.ndarray) -> np.ndarray:
    params = np.asarray(concentration, dtype=float)
    return params / params.sum(axis=1, keepdims=True)


def advance_distribution(dist: np.ndarray, matrix: np.ndarray, steps: int) -> list[np.ndarray]:
    """Left-multiply ``dist`` by ``matrix`` ``steps`` times, keeping every intermediate vector.

    Element 0 is the starting distribution itself.
    """
    current = np.asarray(dist, dtype=float).copy()
    out = [current]
    for _ in range(max(steps, 0)):
        current = current @ matrix
        out.append(current)
    return out


def matrix_power(matrix: np.ndarray, power: int) -> np.ndarray:
    if power < 0:
        raise ValueError("power must be non-negative")
    result = np.eye(matrix.shape[0])
    base = np.asarray(matrix, dtype=float)
    while power:
        if power & 1:
            result = result @ base
        base = base @ base
        power >>= 1
    return result


def sample_categorical(probabilities: np.ndarray, u: float) -> int:
    """Cumulative-sum draw of an index using a uniform sample ``u`` in [0, 1)."""
    probs = np.asarray(probabilities, dtype=float)
    total = probs.sum()
    if total <= 0:
        return 0
    cumulative = np.cumsum(probs / total)
    hits = np.nonzero(u < cumulative)[0]
    return int(hits[0]) if hits.size else len(probs) - 1
