"""Multiplicative context factors applied to the transition prior.

Each factor is neutral at 1.0. Values above 1 lean toward Crash, values below
1 lean toward Pump.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .numeric import clamp
from .types import BitcoinFundamentals, MonthlyStats, OnChainMetrics

HALVING_CYCLE_DAYS = 1461
DEFAULT_VOLATILITY = 0.02

# Calendar seasonality applied on top of the headline sentiment.
MONTH_SENTIMENT_BIAS: dict[int, float] = {
    1: 0.9,
    3: 1.1,
    5: 1.15,
    6: 1.05,
    8: 1.1,
    9: 1.2,
    10: 1.15,
    11: 0.95,
    12: 0.9,
}

EARLY_CYCLE_MONTHS = (11, 12, 1, 2)
LATE_CYCLE_MONTHS = (7, 8, 9, 10)
HALVING_MONTHS = (5, 7, 11)
POST_HALVING_MONTHS = (6, 8, 12, 1)

RISK_LEVEL_FACTORS = {
    "Extreme": 1.5,
    "High": 1.3,
    "Moderate": 1.0,
    "Low": 0.8,
    "Very Low": 0.6,
}


@dataclass(frozen=True)
class FundamentalFactors:
    inflation: float = 1.0
    halving_phase: float = 1.0
    scarcity: float = 1.0


@dataclass(frozen=True)
class ContextFactors:
    seasonal: float = 1.0
    volatility: float = 1.0
    on_chain: float = 1.0
    sentiment: float = 1.0
    cycle: float = 1.0
    fundamentals: FundamentalFactors = field(default_factory=FundamentalFactors)


def base_seasonal_factor(month_stats: MonthlyStats | None) -> float:
    """Crash frequency of the month relative to the whole history."""
    if month_stats is None:
        return 1.0
    return month_stats.seasonal_factors.get("crash", 1.0)


def volatility_ratios(recent: float, month_historical: float, historical: float) -> tuple[float, float]:
    if not historical:
        return 1.0, 1.0
    return recent / historical, month_historical / historical


def volatility_adjustment(short_term_ratio: float, month_ratio: float) -> float:
    return math.sqrt(max(0.5 * short_term_ratio + 0.5 * month_ratio, 0.0))


def _mvrv_factor(z: float) -> float:
    if z > 1.5:
        return 1.2 + min(0.6, (z - 1.5) * 0.2)
    if z < -0.5:
        return 0.8 + max(-0.4, (z + 0.5) * 0.2)
    return 1.0 + (z - 0.5) * 0.2


def _nvt_factor(z: float) -> float:
    if z > 1.5:
        return 1.2 + min(0.5, (z - 1.5) * 0.2)
    if z < -0.5:
        return 0.8 + max(-0.3, (z + 0.5) * 0.2)
    return 1.0 + (z - 0.5) * 0.15


def _supply_shock_factor(ratio: float) -> float:
    if ratio < 0.05:
        return 0.7
    if ratio < 0.1:
        return 0.85
    if ratio > 0.2:
        return 1.3
    if ratio > 0.15:
        return 1.15
    return 1.0


def _whale_factor(change: float) -> float:
    # change is in fractional points of supply
    scaled = change * 100
    if scaled > 0.5:
        return 1.1
    if scaled < -0.5:
        return 1.2
    if scaled > 0.1:
        return 1.05
    if scaled < -0.1:
        return 1.1
    return 1.0


def _puell_factor(multiple: float) -> float:
    if multiple > 2.5:
        return 1.4
    if multiple > 1.5:
        return 1.2
    if multiple < 0.5:
        return 0.7
    if multiple < 0.8:
        return 0.85
    return 1.0


def onchain_factor(metrics: OnChainMetrics | None) -> float:
    if metrics is None:
        return 1.0

    components: list[float] = []
    if metrics.mvrv_z_score is not None:
        components.append(_mvrv_factor(metrics.mvrv_z_score))
    if metrics.nvt_z_score is not None:
        components.append(_nvt_factor(metrics.nvt_z_score))
    if metrics.supply_shock_ratio is not None:
        components.append(_supply_shock_factor(metrics.supply_shock_ratio))
    if metrics.whale_dominance_change is not None:
        components.append(_whale_factor(metrics.whale_dominance_change))
    if metrics.puell_multiple is not None:
        components.append(_puell_factor(metrics.puell_multiple))
    if metrics.risk_level is not None:
        components.append(RISK_LEVEL_FACTORS.get(metrics.risk_level, 1.0))

    if not components:
        return 1.0
    return clamp(math.prod(components), 0.5, 2.5)


def sentiment_factor(sentiment_value: float, month: int, month_mean_return: float | None = None) -> float:
    if sentiment_value <= 25:
        factor = 1.5
    elif sentiment_value <= 40:
        factor = 1.25
    elif sentiment_value <= 60:
        factor = 1.0
    elif sentiment_value <= 75:
        factor = 0.85
    else:
        factor = 0.7

    if month_mean_return is not None:
        if month_mean_return < -0.001:
            factor *= 1.1
        elif month_mean_return > 0.001:
            factor *= 0.9

    factor *= MONTH_SENTIMENT_BIAS.get(month, 1.0)
    return clamp(factor, 0.5, 2.0)


def _inflation_factor(rate: float) -> float:
    if rate < 0.005:
        return 0.7
    if rate < 0.01:
        return 0.8
    if rate < 0.02:
        return 0.9
    if rate < 0.03:
        return 1.0
    if rate < 0.04:
        return 1.1
    return 1.2


def _halving_phase_factor(days_since_halving: float, epoch: int) -> float:
    progress = days_since_halving / HALVING_CYCLE_DAYS
    if progress < 0.15:
        factor = 0.9
    elif progress < 0.3:
        factor = 0.8
    elif progress < 0.6:
        factor = 0.7
    elif progress < 0.8:
        factor = 1.1
    elif progress < 0.9:
        factor = 1.2
    else:
        factor = 1.0

    # later halvings move the market less
    if epoch >= 4:
        factor = 1.0 + (factor - 1.0) * 0.8
    return factor


def _scarcity_factor(issued_share: float) -> float:
    if issued_share > 0.99:
        return 0.7
    if issued_share > 0.95:
        return 0.8
    if issued_share > 0.9:
        return 0.85
    if issued_share > 0.85:
        return 0.9
    if issued_share > 0.8:
        return 0.95
    return 1.0


def fundamental_factors(fundamentals: BitcoinFundamentals | None) -> FundamentalFactors:
    if fundamentals is None:
        return FundamentalFactors()
    return FundamentalFactors(
        inflation=_inflation_factor(fundamentals.inflation_rate),
        halving_phase=_halving_phase_factor(fundamentals.days_since_last_halving, fundamentals.current_epoch),
        scarcity=_scarcity_factor(fundamentals.percentage_of_max_supply_issued),
    )


def cycle_factor(
    month: int,
    cycle_position: float,
    month_extreme_rate: float | None = None,
    halving_phase: float | None = None,
) -> float:
    if cycle_position > 0.8:
        factor = 1.3 + (cycle_position - 0.8)
    elif cycle_position > 0.6:
        factor = 1.1 + (cycle_position - 0.6)
    elif cycle_position < 0.2:
        factor = 0.8 - (0.2 - cycle_position) * 0.5
    elif cycle_position < 0.4:
        factor = 0.9 - (0.4 - cycle_position) * 0.5
    else:
        factor = 1.0

    if month in EARLY_CYCLE_MONTHS:
        factor *= 0.9
    elif month in LATE_CYCLE_MONTHS:
        factor *= 1.15

    if month in HALVING_MONTHS:
        factor *= 1.1
    elif month in POST_HALVING_MONTHS:
        factor *= 0.95

    if month_extreme_rate is not None:
        if month_extreme_rate > 0.015:
            factor *= 1.1
        elif month_extreme_rate < 0.005:
            factor *= 0.9

    if halving_phase is not None:
        if halving_phase < 0.9 and cycle_position < 0.4:
            factor *= 0.8
        elif halving_phase > 1.1 and cycle_position > 0.7:
            factor *= 1.3
        else:
            factor *= halving_phase

    return clamp(factor, 0.5, 2.0)


def target_modifiers(factors: ContextFactors) -> tuple[float, float, float]:
    """Crash / normal / pump multipliers for every row of the prior."""
    crash = 1.0
    pump = 1.0

    if factors.seasonal > 1.2:
        crash *= factors.seasonal
    elif 0 < factors.seasonal < 0.8:
        pump *= 1 / factors.seasonal

    if factors.volatility > 1.1:
        crash *= factors.volatility
        pump *= factors.volatility

    for factor in (factors.on_chain, factors.sentiment, factors.cycle):
        if factor > 1.1:
            crash *= factor
        elif factor < 0.9:
            pump *= 1 / factor

    inflation = factors.fundamentals.inflation
    if inflation < 0.9:
        pump *= 1 / inflation
        crash *= inflation
    elif inflation > 1.1:
        crash *= inflation

    if factors.fundamentals.scarcity < 0.9:
        pump *= 1 / factors.fundamentals.scarcity

    normal = clamp(1 / (math.sqrt(crash * pump) or 1.0), 0.5, 1.5)
    return crash, normal, pump
