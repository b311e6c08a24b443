from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import replace
from datetime import date

import numpy as np

from .fundamentals import calculate_fundamentals
from .markov import BayesianMarkovModel
from .numeric import matrix_power
from .onchain import latest_onchain_metrics, volatility_metrics
from .types import (
    CRASH,
    NORMAL,
    PUMP,
    ForecastContext,
    ForecastResult,
    ForecastSnapshot,
    OnChainMetrics,
    PricePoint,
    SentimentResult,
    StateOutlook,
    VolatilityMetrics,
)

logger = logging.getLogger(__name__)

DEFAULT_CRASH_IMPACT_PCT = -5.0
DEFAULT_PUMP_IMPACT_PCT = 5.0


def build_forecast_context(
    history: Sequence[PricePoint],
    sentiment: SentimentResult | None = None,
    as_of: date | None = None,
) -> ForecastContext:
    """Collect everything the prior adjustment reads into one explicit record."""
    if not history:
        return ForecastContext(sentiment_value=sentiment.value if sentiment else None)

    as_of = as_of or history[-1].date
    on_chain = latest_onchain_metrics(history)
    volatility = volatility_metrics(history)
    return ForecastContext(
        cycle_position=on_chain.cycle_position if on_chain else None,
        on_chain=on_chain,
        volatility_ratio=volatility.recent_30_day / volatility.historical if volatility.historical else None,
        volatility=volatility,
        fundamentals=calculate_fundamentals(history, as_of),
        sentiment_value=sentiment.value if sentiment else None,
        current_month=as_of.month,
    )


def calculate_forecast(
    history: Sequence[PricePoint] | None,
    days: int,
    context: ForecastContext | None = None,
    rng: np.random.Generator | None = None,
) -> ForecastResult | None:
    """Train a fresh model on ``history`` and forecast ``days`` ahead from the last price.

    Returns ``None`` (after logging) instead of raising.
    """
    if not history:
        logger.error("Invalid data for forecast: empty price history")
        return None

    try:
        model = BayesianMarkovModel(rng=rng).train(history)
        return model.generate_forecast(days, history[-1].price, context)
    except Exception:
        logger.exception("Forecast for %s days failed", days)
        return None


def apply_sentiment_adjustment(forecast: ForecastResult, sentiment: SentimentResult | None) -> ForecastResult:
    """Scale the expected return by 0.8-1.2 depending on sentiment and rescale the bounds to match."""
    if sentiment is None:
        return forecast

    factor = 0.8 + (sentiment.value / 100) * 0.4
    expected_return = forecast.expected_return * factor
    forecast_price = forecast.current_price * math.exp(expected_return)
    lower_ratio = forecast.lower_bound / forecast.forecast_price
    upper_ratio = forecast.upper_bound / forecast.forecast_price
    logger.info("Sentiment adjustment factor %.3f from sentiment %d/100", factor, sentiment.value)

    return replace(
        forecast,
        forecast_price=forecast_price,
        lower_bound=forecast_price * lower_ratio,
        upper_bound=forecast_price * upper_ratio,
        expected_return=expected_return,
        sentiment_factor=factor,
        original=ForecastSnapshot(
            forecast_price=forecast.forecast_price,
            expected_return=forecast.expected_return,
            lower_bound=forecast.lower_bound,
            upper_bound=forecast.upper_bound,
        ),
    )


def imminent_outlook(forecast: ForecastResult | None, days_ahead: int) -> StateOutlook:
    if forecast is None or forecast.current_state_dist is None or days_ahead < 0:
        logger.error("Invalid forecast data for imminent outlook (days_ahead=%r)", days_ahead)
        return StateOutlook(crash=0.0, normal=0.0, pump=0.0)

    future = forecast.current_state_dist @ matrix_power(forecast.transition_matrix, days_ahead)
    return StateOutlook(crash=float(future[CRASH]), normal=float(future[NORMAL]), pump=float(future[PUMP]))


def average_state_impacts(forecast: ForecastResult | None) -> tuple[float, float]:
    """Mean crash / pump day as a percentage price move."""
    if forecast is None or not forecast.state_returns:
        logger.error("Invalid forecast data for state impacts")
        return DEFAULT_CRASH_IMPACT_PCT, DEFAULT_PUMP_IMPACT_PCT
    return (
        (math.exp(forecast.state_returns["crash"]) - 1) * 100,
        (math.exp(forecast.state_returns["pump"]) - 1) * 100,
    )


def near_term_drivers(
    on_chain: OnChainMetrics | None,
    volatility: VolatilityMetrics | None = None,
    sentiment_value: float | None = None,
) -> list[str]:
    drivers: list[str] = []
    if on_chain is not None and on_chain.mvrv_z_score is not None:
        if on_chain.mvrv_z_score > 1.5:
            drivers.append("High MVRV Z-Score increasing downside caution.")
        elif on_chain.mvrv_z_score < -0.5:
            drivers.append("Low MVRV Z-Score suggesting potential undervaluation.")

    if on_chain is not None and on_chain.cycle_position is not None:
        if on_chain.cycle_position > 0.8:
            drivers.append("Late cycle position suggesting increased distribution risk.")
        elif on_chain.cycle_position < 0.2:
            drivers.append("Early cycle position favoring accumulation.")

    if volatility is not None and volatility.historical:
        ratio = volatility.recent_30_day / volatility.historical
        if ratio > 1.3:
            drivers.append("Elevated recent volatility increasing short-term uncertainty.")
        elif ratio < 0.7:
            drivers.append("Reduced volatility suggesting market stability.")

    if sentiment_value is not None:
        if sentiment_value > 70:
            drivers.append("Strong positive sentiment potentially supporting upward momentum.")
        elif sentiment_value < 30:
            drivers.append("Strong negative sentiment indicating market fear.")

    return drivers[:3] or ["No significant driving factors identified."]
