from datetime import date

import pytest

from btc_regime_forecast.context_factors import (
    ContextFactors,
    FundamentalFactors,
    cycle_factor,
    fundamental_factors,
    onchain_factor,
    sentiment_factor,
    target_modifiers,
    volatility_adjustment,
    volatility_ratios,
)
from btc_regime_forecast.fundamentals import calculate_fundamentals
from btc_regime_forecast.types import OnChainMetrics


def test_neutral_factors_leave_prior_unchanged() -> None:
    assert target_modifiers(ContextFactors()) == (1.0, 1.0, 1.0)


def test_high_seasonal_crash_rate_boosts_crash() -> None:
    crash, normal, pump = target_modifiers(ContextFactors(seasonal=1.5))
    assert crash == 1.5
    assert pump == 1.0
    assert normal == pytest.approx(1 / 1.5**0.5)


def test_low_seasonal_crash_rate_boosts_pump() -> None:
    crash, _, pump = target_modifiers(ContextFactors(seasonal=0.5))
    assert crash == 1.0
    assert pump == 2.0


def test_zero_seasonal_factor_is_ignored() -> None:
    assert target_modifiers(ContextFactors(seasonal=0.0)) == (1.0, 1.0, 1.0)


def test_high_volatility_widens_both_tails() -> None:
    crash, normal, pump = target_modifiers(ContextFactors(volatility=1.44))
    assert crash == pump == 1.44
    assert normal == pytest.approx(1 / 1.44)


def test_normal_modifier_is_clamped() -> None:
    _, normal, _ = target_modifiers(ContextFactors(on_chain=2.5, sentiment=2.0, cycle=2.0))
    assert normal == 0.5


def test_fundamentals_route_to_pump() -> None:
    crash, _, pump = target_modifiers(
        ContextFactors(fundamentals=FundamentalFactors(inflation=0.7, scarcity=0.8))
    )
    assert crash == pytest.approx(0.7)
    assert pump == pytest.approx(1 / 0.7 / 0.8)


def test_volatility_ratios_and_adjustment() -> None:
    assert volatility_ratios(0.04, 0.03, 0.02) == pytest.approx((2.0, 1.5))
    assert volatility_ratios(0.04, 0.03, 0.0) == (1.0, 1.0)
    assert volatility_adjustment(1.0, 1.0) == 1.0
    assert volatility_adjustment(2.0, 2.0) == pytest.approx(2**0.5)


def test_onchain_factor() -> None:
    assert onchain_factor(None) == 1.0
    assert onchain_factor(OnChainMetrics()) == 1.0
    assert onchain_factor(OnChainMetrics(mvrv_z_score=0.5)) == pytest.approx(1.0)
    assert onchain_factor(OnChainMetrics(mvrv_z_score=3.0)) == pytest.approx(1.5)
    assert onchain_factor(OnChainMetrics(supply_shock_ratio=0.02)) == pytest.approx(0.7)
    assert onchain_factor(OnChainMetrics(puell_multiple=3.0, risk_level="Extreme", mvrv_z_score=5.0)) == 2.5
    assert onchain_factor(OnChainMetrics(risk_level="Very Low", supply_shock_ratio=0.01)) == 0.5


def test_sentiment_factor_bands() -> None:
    # April carries no calendar bias
    assert sentiment_factor(10, 4) == 1.5
    assert sentiment_factor(50, 4) == 1.0
    assert sentiment_factor(90, 4) == 0.7
    assert sentiment_factor(50, 9) == pytest.approx(1.2)
    assert sentiment_factor(50, 4, month_mean_return=-0.01) == pytest.approx(1.1)
    assert sentiment_factor(50, 4, month_mean_return=0.01) == pytest.approx(0.9)
    assert sentiment_factor(0, 9, month_mean_return=-0.01) == pytest.approx(1.98)


def test_cycle_factor() -> None:
    assert cycle_factor(4, 0.5) == 1.0
    assert cycle_factor(4, 0.9) == pytest.approx(1.4)
    assert cycle_factor(4, 0.1) == pytest.approx(0.75)
    assert cycle_factor(9, 0.5) == pytest.approx(1.15)
    assert cycle_factor(4, 0.5, month_extreme_rate=0.02) == pytest.approx(1.1)
    assert cycle_factor(4, 0.3, halving_phase=0.7) == pytest.approx(0.85 * 0.8)
    assert cycle_factor(9, 0.95, halving_phase=1.2) == 2.0


def test_fundamental_factors_after_2024_halving() -> None:
    f = calculate_fundamentals([], date(2025, 1, 1))
    factors = fundamental_factors(f)
    # ~0.83% inflation, about 94% of supply issued, 256 days into the epoch
    assert factors.inflation == 0.8
    assert factors.scarcity == 0.85
    assert factors.halving_phase == pytest.approx(1.0 + (0.8 - 1.0) * 0.8)
    assert fundamental_factors(None) == FundamentalFactors()
