from datetime import date

import pytest

from btc_regime_forecast.trends import summarize_price_trend
from btc_regime_forecast.types import PriceTrendSummary

from conftest import make_history


def test_empty_history_is_neutral() -> None:
    assert summarize_price_trend([]) == PriceTrendSummary()
    assert summarize_price_trend(None) == PriceTrendSummary()


def test_steady_rally_is_bullish_at_highs() -> None:
    trend = summarize_price_trend(make_history([0.01] * 120))
    assert trend.trend_direction == "bullish"
    assert trend.is_in_uptrend and not trend.is_in_downtrend
    assert trend.is_all_time_high
    assert trend.is_local_high
    assert not trend.is_local_low
    assert trend.short_term == pytest.approx(1.005, abs=0.01)
    assert trend.long_term > trend.medium_term > trend.short_term


def test_steady_decline_is_bearish_at_lows() -> None:
    trend = summarize_price_trend(make_history([-0.02] * 60))
    assert trend.trend_direction == "bearish"
    assert trend.is_in_downtrend
    assert trend.is_local_low
    assert not trend.is_all_time_high
    assert trend.quarter_term < trend.long_term < 0


def test_mixed_signs_are_neutral() -> None:
    trend = summarize_price_trend(make_history([0.01] * 40 + [-0.01]))
    assert trend.trend_direction == "neutral"
    assert not trend.is_in_uptrend and not trend.is_in_downtrend


def test_constant_moves_have_no_volatility() -> None:
    trend = summarize_price_trend(make_history([0.0] * 40))
    assert trend.volatility == 0.0
    assert trend.recent_volatility == 0.0
    assert trend.trend_direction == "neutral"


def test_order_of_input_does_not_matter() -> None:
    history = make_history([0.01, -0.03, 0.02, 0.05, -0.01, 0.0, 0.02, -0.02], start=date(2023, 3, 1))
    assert summarize_price_trend(history) == summarize_price_trend(list(reversed(history)))


def test_short_history_skips_volatility() -> None:
    trend = summarize_price_trend(make_history([0.05, 0.05]))
    assert trend.volatility == 0.0
    assert trend.short_term == pytest.approx(5.127, abs=0.01)
