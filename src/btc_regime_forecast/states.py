from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace

import numpy as np

from .numeric import nearest_rank, population_std
from .settings import settings
from .types import STATES, MonthlyStats, PricePoint, ReturnState

logger = logging.getLogger(__name__)

STATE_INDEX: dict[ReturnState, int] = {name: i for i, name in enumerate(STATES)}


def epoch_thresholds(
    history: Sequence[PricePoint],
    crash_percentile: float | None = None,
    pump_percentile: float | None = None,
    default_crash: float | None = None,
    default_pump: float | None = None,
) -> dict[int, tuple[float, float]]:
    """Nearest-rank crash / pump log-return cut-offs per halving epoch."""
    crash_q = settings.crash_percentile if crash_percentile is None else crash_percentile
    pump_q = settings.pump_percentile if pump_percentile is None else pump_percentile
    fallback = (
        settings.default_crash_threshold if default_crash is None else default_crash,
        settings.default_pump_threshold if default_pump is None else default_pump,
    )

    by_epoch: dict[int, list[float]] = {}
    for point in history:
        returns = by_epoch.setdefault(point.halving_epoch, [])
        if math.isfinite(point.log_return):
            returns.append(point.log_return)

    out: dict[int, tuple[float, float]] = {}
    for epoch, returns in by_epoch.items():
        if not returns:
            logger.warning("No valid returns in epoch %d; using fallback thresholds %s", epoch, fallback)
            out[epoch] = fallback
            continue
        ordered = sorted(returns)
        out[epoch] = (nearest_rank(ordered, crash_q), nearest_rank(ordered, pump_q))
    return out


def tail_sizes(n: int, crash_percentile: float, pump_percentile: float) -> tuple[int, int]:
    """Days ranked strictly below the crash cut and strictly above the pump cut."""
    if n == 0:
        return 0, 0
    crash_rank = min(int(math.floor(n * crash_percentile)), n - 1)
    pump_rank = min(int(math.floor(n * pump_percentile)), n - 1)
    return crash_rank, n - 1 - pump_rank


def _label_tail(
    labels: list[ReturnState],
    members: Sequence[int],
    returns: Sequence[float],
    cut: float,
    target: int,
    state: ReturnState,
    below: bool,
    fill_ties: bool,
) -> None:
    count = 0
    for i, r in zip(members, returns):
        if labels[i] == "normal" and ((r < cut) if below else (r > cut)):
            labels[i] = state
            count += 1

    if not fill_ties:
        return
    # returns tied with the cut fill the tail up to its rank size, earliest first
    for i, r in zip(members, returns):
        if count >= target:
            break
        if r == cut and labels[i] == "normal":
            labels[i] = state
            count += 1


def classify_states(
    history: Sequence[PricePoint] | None,
    crash_percentile: float | None = None,
    pump_percentile: float | None = None,
) -> list[PricePoint]:
    """Label every day Crash / Normal / Pump relative to its own halving epoch.

    Each tail holds as many days as the nearest-rank cut has ranks beyond it.
    When several days tie with a cut the strict comparison leaves the tail
    short, so tied days are added in date order until it is full. Ties are
    not used when the two cuts coincide (a flat epoch stays Normal).

    Returns new points; the input is left untouched.
    """
    if not history:
        logger.error("No data provided for state classification")
        return []

    crash_q = settings.crash_percentile if crash_percentile is None else crash_percentile
    pump_q = settings.pump_percentile if pump_percentile is None else pump_percentile
    thresholds = epoch_thresholds(history, crash_q, pump_q)

    members_by_epoch: dict[int, list[int]] = {}
    for i in sorted(range(len(history)), key=lambda j: history[j].date):
        members_by_epoch.setdefault(history[i].halving_epoch, []).append(i)

    labels: list[ReturnState] = ["normal"] * len(history)
    for epoch, members in members_by_epoch.items():
        crash_cut, pump_cut = thresholds[epoch]
        returns = [history[i].log_return for i in members]
        crash_target, pump_target = tail_sizes(sum(1 for r in returns if math.isfinite(r)), crash_q, pump_q)
        fill_ties = crash_cut < pump_cut
        _label_tail(labels, members, returns, crash_cut, crash_target, "crash", True, fill_ties)
        _label_tail(labels, members, returns, pump_cut, pump_target, "pump", False, fill_ties)

    return [replace(point, return_state=state) for point, state in zip(history, labels)]


def state_indices(classified: Sequence[PricePoint]) -> np.ndarray:
    return np.array(
        [STATE_INDEX[p.return_state] for p in classified if p.return_state is not None],
        dtype=int,
    )


def count_transitions(states: np.ndarray) -> np.ndarray:
    counts = np.zeros((len(STATES), len(STATES)))
    if len(states) > 1:
        np.add.at(counts, (states[:-1], states[1:]), 1)
    return counts


def state_frequencies(states: np.ndarray) -> np.ndarray:
    if len(states) == 0:
        return np.full(len(STATES), 1.0 / len(STATES))
    return np.bincount(states, minlength=len(STATES)) / len(states)


def monthly_statistics(classified: Sequence[PricePoint]) -> tuple[np.ndarray, dict[int, MonthlyStats]]:
    """Global state frequencies plus per-calendar-month counts, seasonal factors and transitions."""
    labelled = [p for p in classified if p.return_state is not None]
    global_freqs = state_frequencies(state_indices(labelled))

    stats: dict[int, MonthlyStats] = {}
    for month in range(1, 13):
        month_points = [p for p in labelled if p.date.month == month]
        if not month_points:
            continue

        states = state_indices(month_points)
        counts = np.bincount(states, minlength=len(STATES))
        freqs = counts / len(month_points)
        seasonal = {
            name: float(freqs[i] / global_freqs[i]) if global_freqs[i] > 0 else 1.0
            for i, name in enumerate(STATES)
        }
        returns = [p.log_return for p in month_points if math.isfinite(p.log_return)]

        stats[month] = MonthlyStats(
            total_days=len(month_points),
            state_counts={name: int(counts[i]) for i, name in enumerate(STATES)},
            frequencies={name: float(freqs[i]) for i, name in enumerate(STATES)},
            seasonal_factors=seasonal,
            transition_counts=count_transitions(states),
            mean_return=float(np.mean(returns)) if returns else 0.0,
            volatility=population_std(returns),
        )
    return global_freqs, stats
