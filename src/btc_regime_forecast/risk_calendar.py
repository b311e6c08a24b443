from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from scipy import stats

from .states import classify_states, monthly_statistics
from .types import MonthlyRisk, PricePoint

logger = logging.getLogger(__name__)

# Gamma(A0 * seasonal factor, B0) prior on the daily crash rate
A0 = 1.0
B0 = 1.0
CREDIBLE_LOWER = 0.025
CREDIBLE_UPPER = 0.975


def crash_probability(alpha: float, beta: float, horizon_days: float) -> float:
    """P(at least one crash day in ``horizon_days``) under the Gamma(alpha, beta) rate posterior."""
    if alpha <= 0 or horizon_days <= 0:
        return 0.0
    return 1.0 - (beta / (beta + horizon_days)) ** alpha


def credible_interval(alpha: float, beta: float, horizon_days: float) -> tuple[float, float]:
    if alpha <= 0 or horizon_days <= 0:
        return 0.0, 0.0
    scale = 1.0 / beta
    lam_lo = float(stats.gamma.ppf(CREDIBLE_LOWER, alpha, scale=scale))
    lam_hi = float(stats.gamma.ppf(CREDIBLE_UPPER, alpha, scale=scale))
    return 1.0 - math.exp(-lam_lo * horizon_days), 1.0 - math.exp(-lam_hi * horizon_days)


def monthly_crash_risk(
    history: Sequence[PricePoint] | None,
    horizon_days: int,
    crash_percentile: float | None = None,
) -> dict[int, MonthlyRisk]:
    """Poisson-Gamma crash risk for each calendar month over the next ``horizon_days``.

    A crash day is a day labelled crash by the epoch-relative classification.
    Month m gets the posterior Gamma(A0 * S_m + N_m, B0 + T_m), where N_m and
    T_m are the crash days and total days seen in that month and S_m is its
    crash seasonal factor. The risk is the posterior predictive chance of at
    least one crash, with a 95% credible interval from the rate quantiles.
    Months with no data get zero risk.
    """
    if horizon_days < 0:
        logger.error("Risk horizon must be non-negative, got %r", horizon_days)
        return {}
    classified = classify_states(history, crash_percentile)
    if not classified:
        return {}

    _, month_stats = monthly_statistics(classified)
    out: dict[int, MonthlyRisk] = {}
    for month in range(1, 13):
        ms = month_stats.get(month)
        if ms is None:
            out[month] = MonthlyRisk(month=month, risk=0.0, lower=0.0, upper=0.0)
            continue

        n_events = ms.state_counts["crash"]
        seasonal = ms.seasonal_factors["crash"]
        alpha = A0 * seasonal + n_events
        beta = B0 + ms.total_days

        risk = crash_probability(alpha, beta, horizon_days)
        lower, upper = credible_interval(alpha, beta, horizon_days)
        out[month] = MonthlyRisk(
            month=month,
            risk=risk,
            lower=min(lower, risk),
            upper=max(upper, risk),
            extreme_events=n_events,
            total_days=ms.total_days,
            seasonal_factor=seasonal,
        )

    logger.info(
        "%d-day crash risk by month: %s",
        horizon_days,
        {m: round(r.risk, 4) for m, r in out.items()},
    )
    return out
