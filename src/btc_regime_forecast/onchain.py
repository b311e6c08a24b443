from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from .numeric import clamp
from .price_data import history_to_frame
from .types import OnChainMetrics, PricePoint, RiskLevel, VolatilityMetrics

logger = logging.getLogger(__name__)

ZSCORE_WINDOW = 90
PUELL_WINDOW = 365
PUELL_MIN_VALUES = 180
CYCLE_WINDOW = 730
CYCLE_MIN_ROWS = 365
CYCLE_MIN_MVRV = 180
SHORT_VOL_WINDOW = 30
MEDIUM_VOL_WINDOW = 90


def _trailing_zscore(series: pd.Series, window: int) -> pd.Series:
    # statistics over the `window` rows strictly before each day
    prior = series.shift(1).rolling(window, min_periods=1)
    mean = prior.mean()
    std = prior.std(ddof=0)
    z = (series - mean) / std.where(std > 0)
    z.iloc[:window] = np.nan
    return z


def derive_onchain_frame(history: Sequence[PricePoint]) -> pd.DataFrame:
    """Per-day derived on-chain indicators; a value is NaN where there is not enough data."""
    df = history_to_frame(list(history))
    if df.empty:
        return df

    df["mvrv_z_score"] = _trailing_zscore(df["mvrv"], ZSCORE_WINDOW)
    df["nvt_z_score"] = _trailing_zscore(df["nvt"], ZSCORE_WINDOW)

    df["supply_shock_ratio"] = df["active_supply_1d"] / df["active_supply_1yr"].where(df["active_supply_1yr"] > 0)
    df["whale_dominance_change"] = df["whale_supply"].diff()

    revenue = df["miner_revenue"].shift(1).rolling(PUELL_WINDOW, min_periods=PUELL_MIN_VALUES + 1)
    avg_revenue = revenue.mean()
    puell = df["miner_revenue"] / avg_revenue.where(avg_revenue > 0)
    puell.iloc[:PUELL_WINDOW] = np.nan
    df["puell_multiple"] = puell

    df["cycle_position"] = np.nan
    if len(df) >= CYCLE_MIN_ROWS:
        recent = df.iloc[-CYCLE_WINDOW:]
        mvrv = recent["mvrv"].dropna()
        if len(recent) > CYCLE_MIN_ROWS and len(mvrv) > CYCLE_MIN_MVRV:
            span = mvrv.max() - mvrv.min()
            if span > 0:
                df.loc[recent.index, "cycle_position"] = (recent["mvrv"] - mvrv.min()) / span

    return df


def volatility_metrics(history: Sequence[PricePoint]) -> VolatilityMetrics:
    returns = pd.Series(
        [p.log_return for p in history],
        index=pd.to_datetime([p.date for p in history]),
        dtype=float,
    )
    finite = returns[np.isfinite(returns)]
    if finite.empty:
        return VolatilityMetrics()

    def window_std(window: int, min_values: int, default: float) -> float:
        if len(returns) <= window:
            return default
        tail = returns.iloc[-window:]
        tail = tail[np.isfinite(tail)]
        return float(tail.std(ddof=0)) if len(tail) > min_values else default

    by_month = finite.groupby(finite.index.month).std(ddof=0)
    return VolatilityMetrics(
        recent_30_day=window_std(SHORT_VOL_WINDOW, SHORT_VOL_WINDOW // 2, 0.02),
        medium_90_day=window_std(MEDIUM_VOL_WINDOW, MEDIUM_VOL_WINDOW // 2, 0.03),
        historical=float(finite.std(ddof=0)),
        by_month=tuple(float(by_month.get(m, 0.0)) for m in range(1, 13)),
    )


def risk_level(mvrv_z_score: float | None, cycle_position: float | None) -> RiskLevel:
    scores: list[float] = []
    if mvrv_z_score is not None:
        scores.append(clamp((mvrv_z_score + 1) / 3, 0.0, 1.0))
    if cycle_position is not None:
        scores.append(cycle_position)
    avg = sum(scores) / len(scores) if scores else 0.5

    if avg >= 0.8:
        return "Extreme"
    if avg >= 0.65:
        return "High"
    if avg >= 0.45:
        return "Moderate"
    if avg >= 0.3:
        return "Low"
    return "Very Low"


def _value(row: pd.Series, col: str) -> float | None:
    v = row[col]
    return None if pd.isna(v) else float(v)


def _latest_valid(series: pd.Series) -> float | None:
    idx = series.last_valid_index()
    return None if idx is None else float(series[idx])


def latest_onchain_metrics(history: Sequence[PricePoint] | None) -> OnChainMetrics | None:
    """Newest derived indicators. Supply shock and Puell come from their latest available day."""
    if not history:
        return None

    df = derive_onchain_frame(history)
    latest = df.iloc[-1]
    mvrv_z = _value(latest, "mvrv_z_score")
    cycle = _value(latest, "cycle_position")

    metrics = OnChainMetrics(
        mvrv_z_score=mvrv_z,
        nvt_z_score=_value(latest, "nvt_z_score"),
        supply_shock_ratio=_latest_valid(df["supply_shock_ratio"]),
        whale_dominance_change=_value(latest, "whale_dominance_change"),
        puell_multiple=_latest_valid(df["puell_multiple"]),
        cycle_position=cycle,
        risk_level=risk_level(mvrv_z, cycle),
    )
    logger.debug("Latest on-chain metrics: %s", metrics)
    return metrics
