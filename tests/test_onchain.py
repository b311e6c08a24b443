import math

import numpy as np
import pytest

from btc_regime_forecast.onchain import (
    CYCLE_WINDOW,
    PUELL_WINDOW,
    ZSCORE_WINDOW,
    derive_onchain_frame,
    latest_onchain_metrics,
    risk_level,
    volatility_metrics,
)
from btc_regime_forecast.types import PricePoint, VolatilityMetrics

from conftest import make_history


def test_zscores_need_a_full_window(onchain_history: list[PricePoint]) -> None:
    df = derive_onchain_frame(onchain_history)
    assert df["mvrv_z_score"].iloc[:ZSCORE_WINDOW].isna().all()
    assert df["nvt_z_score"].iloc[:ZSCORE_WINDOW].isna().all()
    assert df["mvrv_z_score"].iloc[ZSCORE_WINDOW:].notna().all()


def test_zscore_uses_only_prior_days(onchain_history: list[PricePoint]) -> None:
    df = derive_onchain_frame(onchain_history)
    i = 400
    window = df["mvrv"].iloc[i - ZSCORE_WINDOW : i]
    expected = (df["mvrv"].iloc[i] - window.mean()) / window.std(ddof=0)
    assert df["mvrv_z_score"].iloc[i] == pytest.approx(expected)


def test_puell_multiple(onchain_history: list[PricePoint]) -> None:
    df = derive_onchain_frame(onchain_history)
    assert df["puell_multiple"].iloc[:PUELL_WINDOW].isna().all()
    i = 500
    expected = df["miner_revenue"].iloc[i] / df["miner_revenue"].iloc[i - PUELL_WINDOW : i].mean()
    assert df["puell_multiple"].iloc[i] == pytest.approx(expected)


def test_supply_shock_and_whale_change(onchain_history: list[PricePoint]) -> None:
    df = derive_onchain_frame(onchain_history)
    assert df["supply_shock_ratio"].iloc[-1] == pytest.approx(0.15)
    assert math.isnan(df["whale_dominance_change"].iloc[0])
    assert df["whale_dominance_change"].iloc[-1] == pytest.approx(0.0001)


def test_cycle_position_covers_recent_window(onchain_history: list[PricePoint]) -> None:
    df = derive_onchain_frame(onchain_history)
    recent = df["cycle_position"].iloc[-CYCLE_WINDOW:]
    assert recent.notna().all()
    assert recent.min() == pytest.approx(0.0)
    assert recent.max() == pytest.approx(1.0)
    assert df["cycle_position"].iloc[: len(df) - CYCLE_WINDOW].isna().all()


def test_cycle_position_needs_a_year() -> None:
    history = make_history([0.0] * 200, mvrv=np.linspace(1.0, 3.0, 201))
    assert derive_onchain_frame(history)["cycle_position"].isna().all()


def test_latest_metrics(onchain_history: list[PricePoint]) -> None:
    m = latest_onchain_metrics(onchain_history)
    assert m is not None
    assert m.mvrv_z_score is not None
    assert m.nvt_z_score is not None
    assert m.puell_multiple is not None
    assert m.supply_shock_ratio == pytest.approx(0.15)
    assert 0.0 <= m.cycle_position <= 1.0
    assert m.risk_level == risk_level(m.mvrv_z_score, m.cycle_position)


def test_latest_metrics_without_onchain_columns(random_walk_history: list[PricePoint]) -> None:
    m = latest_onchain_metrics(random_walk_history)
    assert m is not None
    assert m.mvrv_z_score is None
    assert m.supply_shock_ratio is None
    assert m.cycle_position is None
    assert m.risk_level == "Moderate"
    assert latest_onchain_metrics([]) is None


def test_risk_levels() -> None:
    assert risk_level(None, None) == "Moderate"
    assert risk_level(3.0, 0.9) == "Extreme"
    assert risk_level(None, 0.7) == "High"
    assert risk_level(None, 0.35) == "Low"
    assert risk_level(-1.0, 0.1) == "Very Low"


def test_volatility_defaults_for_short_history() -> None:
    v = volatility_metrics(make_history([0.01, -0.01] * 5))
    assert v.recent_30_day == 0.02
    assert v.medium_90_day == 0.03
    assert v.historical > 0
    assert len(v.by_month) == 12
    assert v.by_month[0] == pytest.approx(v.historical)
    assert v.for_month(2) is None
    assert volatility_metrics([]) == VolatilityMetrics()


def test_volatility_windows(random_walk_history: list[PricePoint]) -> None:
    v = volatility_metrics(random_walk_history)
    tail = np.array([p.log_return for p in random_walk_history[-30:]])
    assert v.recent_30_day == pytest.approx(tail.std())
    assert 0.02 < v.historical < 0.04
    assert all(x > 0 for x in v.by_month)
