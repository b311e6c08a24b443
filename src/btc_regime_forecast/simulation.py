from __future__ import annotations

import math

import numpy as np

from .types import SimulationStep

PERCENTILES = {"lower5": 0.05, "lower25": 0.25, "upper75": 0.75, "upper95": 0.95}


def _cumulative(probabilities: np.ndarray) -> np.ndarray:
    probs = np.asarray(probabilities, dtype=float)
    totals = probs.sum(axis=-1, keepdims=True)
    safe = np.where(totals > 0, totals, 1.0)
    return np.cumsum(probs / safe, axis=-1)


def _draw(cumulative: np.ndarray, u: np.ndarray) -> np.ndarray:
    # index of the first bucket whose cumulative mass exceeds u
    picks = (u[:, None] >= cumulative).sum(axis=1)
    return np.minimum(picks, cumulative.shape[-1] - 1)


def generate_state_paths(
    initial_distribution: np.ndarray,
    transition_matrix: np.ndarray,
    steps: int,
    num_paths: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """Sample ``num_paths`` Markov chains of ``steps`` transitions.

    Returns an integer array of shape ``(num_paths, steps + 1)`` whose first
    column holds the sampled starting states.
    """
    paths = np.empty((num_paths, steps + 1), dtype=int)
    start = _cumulative(initial_distribution)
    if start[-1] <= 0:
        paths[:, 0] = 0
    else:
        paths[:, 0] = _draw(np.broadcast_to(start, (num_paths, start.size)), rng.random(num_paths))

    rows = _cumulative(transition_matrix)
    for t in range(steps):
        paths[:, t + 1] = _draw(rows[paths[:, t]], rng.random(num_paths))
    return paths


def standard_normal(shape: tuple[int, ...], rng: np.random.Generator) -> np.ndarray:
    """Box-Muller transform of two independent uniform draws."""
    u1 = 1.0 - rng.random(shape)
    u2 = rng.random(shape)
    return np.sqrt(-2.0 * np.log(u1)) * np.cos(2.0 * math.pi * u2)


def states_to_price_paths(
    state_paths: np.ndarray,
    current_price: float,
    state_returns: np.ndarray,
    state_volatility: np.ndarray,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """Compound per-state log returns from ``current_price``; no noise without an ``rng``."""
    visited = state_paths[:, 1:]
    log_returns = np.asarray(state_returns, dtype=float)[visited]
    if rng is not None:
        log_returns = log_returns + standard_normal(visited.shape, rng) * np.asarray(state_volatility)[visited]

    prices = np.empty(state_paths.shape, dtype=float)
    prices[:, 0] = current_price
    prices[:, 1:] = current_price * np.exp(np.cumsum(log_returns, axis=1))
    return prices


def summarize_paths(price_paths: np.ndarray) -> list[SimulationStep]:
    """Nearest-rank percentiles and mean of the cross-path prices at every step."""
    ordered = np.sort(price_paths, axis=0)
    n = ordered.shape[0]

    def at(q: float) -> np.ndarray:
        return ordered[min(int(math.floor(n * q)), n - 1)]

    median = ordered[n // 2]
    bands = {name: at(q) for name, q in PERCENTILES.items()}
    means = ordered.mean(axis=0)

    return [
        SimulationStep(
            time_step=t,
            mean=float(means[t]),
            median=float(median[t]),
            lower5=float(bands["lower5"][t]),
            lower25=float(bands["lower25"][t]),
            upper75=float(bands["upper75"][t]),
            upper95=float(bands["upper95"][t]),
        )
        for t in range(ordered.shape[1])
    ]
