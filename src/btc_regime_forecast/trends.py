from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import timedelta

from .numeric import population_std
from .types import PricePoint, PriceTrendSummary

logger = logging.getLogger(__name__)

# Within this fraction of a high/low the price counts as "at" it.
PROXIMITY = 0.01


def _closest_index_by_days(newest_first: Sequence[PricePoint], days: int) -> int:
    target = newest_first[0].date - timedelta(days=days)
    return min(range(len(newest_first)), key=lambda i: abs((newest_first[i].date - target).days))


def summarize_price_trend(history: Sequence[PricePoint] | None) -> PriceTrendSummary:
    if not history:
        return PriceTrendSummary()

    try:
        newest_first = sorted(history, key=lambda p: p.date, reverse=True)
        prices = [float(p.price) for p in newest_first]
        current = prices[0]

        def change(days: int) -> float:
            idx = _closest_index_by_days(newest_first, days)
            return (current / prices[idx] - 1.0) * 100.0

        one_day, seven_day, thirty_day, ninety_day = change(1), change(7), change(30), change(90)

        volatility = recent_volatility = 0.0
        if len(prices) > 5:
            daily = [(prices[i] / prices[i + 1] - 1.0) * 100.0 for i in range(min(30, len(prices) - 1))]
            volatility = population_std(daily)
            recent_volatility = population_std(daily[:5])

        recent = prices[:30]
        ath = max(prices)
        local_high, local_low = max(recent), min(recent)

        uptrend = one_day > 0 and seven_day > 0 and thirty_day > 0
        downtrend = one_day < 0 and seven_day < 0 and thirty_day < 0

        return PriceTrendSummary(
            short_term=one_day,
            medium_term=seven_day,
            long_term=thirty_day,
            quarter_term=ninety_day,
            volatility=volatility,
            recent_volatility=recent_volatility,
            trend_direction="bullish" if uptrend else "bearish" if downtrend else "neutral",
            is_all_time_high=abs(current - ath) / ath < PROXIMITY,
            is_local_high=abs(current - local_high) / local_high < PROXIMITY,
            is_local_low=abs(current - local_low) / local_low < PROXIMITY,
            is_in_uptrend=uptrend,
            is_in_downtrend=downtrend,
        )
    except (ArithmeticError, TypeError, ValueError):
        logger.exception("Could not summarize price trend; using neutral defaults")
        return PriceTrendSummary()
