import math

import numpy as np
import pytest

from btc_regime_forecast.forecast import (
    DEFAULT_CRASH_IMPACT_PCT,
    DEFAULT_PUMP_IMPACT_PCT,
    apply_sentiment_adjustment,
    average_state_impacts,
    build_forecast_context,
    calculate_forecast,
    imminent_outlook,
    near_term_drivers,
)
from btc_regime_forecast.types import (
    ForecastResult,
    OnChainMetrics,
    PricePoint,
    SentimentResult,
    VolatilityMetrics,
)


@pytest.fixture
def forecast(random_walk_history: list[PricePoint], rng: np.random.Generator) -> ForecastResult:
    result = calculate_forecast(random_walk_history, 30, rng=rng)
    assert result is not None
    return result


def test_forecast_from_last_price(forecast: ForecastResult, random_walk_history: list[PricePoint]) -> None:
    assert forecast.current_price == random_walk_history[-1].price
    assert forecast.timeframe_days == 30
    assert forecast.forecast_price == pytest.approx(forecast.current_price * math.exp(forecast.expected_return))
    assert forecast.sentiment_factor is None
    assert forecast.original is None


def test_invalid_inputs_return_none(random_walk_history: list[PricePoint]) -> None:
    assert calculate_forecast([], 7) is None
    assert calculate_forecast(None, 7) is None
    assert calculate_forecast(random_walk_history, -3) is None


def test_seeded_forecasts_are_reproducible(random_walk_history: list[PricePoint]) -> None:
    a = calculate_forecast(random_walk_history, 14, rng=np.random.default_rng(3))
    b = calculate_forecast(random_walk_history, 14, rng=np.random.default_rng(3))
    assert a is not None and b is not None
    assert a.lower_bound == b.lower_bound
    assert a.upper_bound == b.upper_bound


def test_sentiment_adjustment_scales_expected_return(forecast: ForecastResult) -> None:
    bullish = SentimentResult(raw_score=0.8, value=100, label="Very Positive")
    adjusted = apply_sentiment_adjustment(forecast, bullish)

    assert adjusted.sentiment_factor == pytest.approx(1.2)
    assert adjusted.expected_return == pytest.approx(forecast.expected_return * 1.2)
    assert adjusted.forecast_price == pytest.approx(forecast.current_price * math.exp(adjusted.expected_return))
    assert adjusted.lower_bound / adjusted.forecast_price == pytest.approx(
        forecast.lower_bound / forecast.forecast_price
    )
    assert adjusted.upper_bound / adjusted.forecast_price == pytest.approx(
        forecast.upper_bound / forecast.forecast_price
    )

    assert adjusted.original is not None
    assert adjusted.original.forecast_price == forecast.forecast_price
    assert adjusted.original.expected_return == forecast.expected_return
    assert forecast.original is None


def test_neutral_and_missing_sentiment(forecast: ForecastResult) -> None:
    neutral = apply_sentiment_adjustment(forecast, SentimentResult(raw_score=0.0, value=50, label="Neutral"))
    assert neutral.sentiment_factor == pytest.approx(1.0)
    assert neutral.forecast_price == pytest.approx(forecast.forecast_price)

    bearish = apply_sentiment_adjustment(forecast, SentimentResult(raw_score=-1.0, value=0, label="Very Negative"))
    assert bearish.sentiment_factor == pytest.approx(0.8)

    assert apply_sentiment_adjustment(forecast, None) is forecast


def test_imminent_outlook_matches_propagation(forecast: ForecastResult) -> None:
    dist = forecast.current_state_dist
    for _ in range(3):
        dist = dist @ forecast.transition_matrix
    outlook = imminent_outlook(forecast, 3)
    np.testing.assert_allclose([outlook.crash, outlook.normal, outlook.pump], dist, atol=1e-12)
    assert outlook.crash + outlook.normal + outlook.pump == pytest.approx(1.0)

    today = imminent_outlook(forecast, 0)
    np.testing.assert_allclose([today.crash, today.normal, today.pump], forecast.current_state_dist)


def test_imminent_outlook_invalid_input(forecast: ForecastResult) -> None:
    for outlook in (imminent_outlook(None, 1), imminent_outlook(forecast, -1)):
        assert (outlook.crash, outlook.normal, outlook.pump) == (0.0, 0.0, 0.0)


def test_average_state_impacts(forecast: ForecastResult) -> None:
    crash_pct, pump_pct = average_state_impacts(forecast)
    assert crash_pct < 0 < pump_pct
    assert crash_pct == pytest.approx((math.exp(forecast.state_returns["crash"]) - 1) * 100)
    assert average_state_impacts(None) == (DEFAULT_CRASH_IMPACT_PCT, DEFAULT_PUMP_IMPACT_PCT)


def test_build_forecast_context(onchain_history: list[PricePoint]) -> None:
    sentiment = SentimentResult(raw_score=-0.3, value=35, label="Negative")
    ctx = build_forecast_context(onchain_history, sentiment)

    assert ctx.sentiment_value == 35
    assert ctx.current_month == onchain_history[-1].date.month
    assert ctx.on_chain is not None
    assert ctx.cycle_position == ctx.on_chain.cycle_position
    assert ctx.volatility is not None
    assert ctx.volatility_ratio == pytest.approx(ctx.volatility.recent_30_day / ctx.volatility.historical)
    assert ctx.fundamentals is not None
    assert ctx.fundamentals.current_circulating_supply == onchain_history[-1].current_supply


def test_build_forecast_context_without_history() -> None:
    ctx = build_forecast_context([], None)
    assert ctx.on_chain is None
    assert ctx.sentiment_value is None


def test_context_flows_into_forecast(onchain_history: list[PricePoint]) -> None:
    ctx = build_forecast_context(onchain_history, SentimentResult(raw_score=0.0, value=50, label="Neutral"))
    result = calculate_forecast(onchain_history, 7, ctx, rng=np.random.default_rng(2))
    assert result is not None
    assert result.lower_bound <= result.upper_bound
    assert 0.0 <= result.crash_probability <= 1.0


def test_near_term_drivers() -> None:
    drivers = near_term_drivers(
        OnChainMetrics(mvrv_z_score=2.0, cycle_position=0.9),
        VolatilityMetrics(recent_30_day=0.05, historical=0.03),
        sentiment_value=20,
    )
    assert len(drivers) == 3
    assert drivers[0].startswith("High MVRV")
    assert "Late cycle" in drivers[1]
    assert "volatility" in drivers[2]

    assert near_term_drivers(None) == ["No significant driving factors identified."]
    assert near_term_drivers(None, sentiment_value=85) == [
        "Strong positive sentiment potentially supporting upward momentum."
    ]
