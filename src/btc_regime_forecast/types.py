from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

import numpy as np

ReturnState = Literal["crash", "normal", "pump"]
SentimentClass = Literal["negative", "neutral", "positive"]
TrendDirection = Literal["bullish", "bearish", "neutral"]
RiskLevel = Literal["Very Low", "Low", "Moderate", "High", "Extreme"]

STATES: tuple[ReturnState, ReturnState, ReturnState] = ("crash", "normal", "pump")
CRASH, NORMAL, PUMP = 0, 1, 2


@dataclass(frozen=True)
class PricePoint:
    date: date
    price: float
    log_return: float = 0.0
    halving_epoch: int = 0
    mvrv: float | None = None
    nvt: float | None = None
    active_addresses: float | None = None
    active_supply_1d: float | None = None
    active_supply_1yr: float | None = None
    current_supply: float | None = None
    miner_revenue: float | None = None
    whale_supply: float | None = None
    return_state: ReturnState | None = None


@dataclass(frozen=True)
class PriceTrendSummary:
    short_term: float = 0.0
    medium_term: float = 0.0
    long_term: float = 0.0
    quarter_term: float = 0.0
    volatility: float = 0.0
    recent_volatility: float = 0.0
    trend_direction: TrendDirection = "neutral"
    is_all_time_high: bool = False
    is_local_high: bool = False
    is_local_low: bool = False
    is_in_uptrend: bool = False
    is_in_downtrend: bool = False


@dataclass(frozen=True)
class Headline:
    title: str
    timestamp: str | None = None


@dataclass(frozen=True)
class HeadlineScore:
    headline: str
    score: int
    weight: float


@dataclass(frozen=True)
class SentimentResult:
    raw_score: float
    value: int
    label: str
    details: list[HeadlineScore] = field(default_factory=list)


@dataclass(frozen=True)
class BitcoinFundamentals:
    inflation_rate: float
    current_block_reward: float
    current_circulating_supply: float
    percentage_of_max_supply_issued: float
    current_epoch: int
    days_since_last_halving: float
    new_coins_per_year: float


@dataclass(frozen=True)
class VolatilityMetrics:
    recent_30_day: float = 0.02
    medium_90_day: float = 0.03
    historical: float = 0.02
    by_month: tuple[float, ...] = ()

    def for_month(self, month: int) -> float | None:
        if 1 <= month <= len(self.by_month) and self.by_month[month - 1] > 0:
            return self.by_month[month - 1]
        return None


@dataclass(frozen=True)
class OnChainMetrics:
    mvrv_z_score: float | None = None
    nvt_z_score: float | None = None
    supply_shock_ratio: float | None = None
    whale_dominance_change: float | None = None
    puell_multiple: float | None = None
    cycle_position: float | None = None
    risk_level: RiskLevel | None = None


@dataclass(frozen=True)
class ForecastContext:
    cycle_position: float | None = None
    on_chain: OnChainMetrics | None = None
    volatility_ratio: float | None = None
    volatility: VolatilityMetrics | None = None
    fundamentals: BitcoinFundamentals | None = None
    sentiment_value: float | None = None
    current_month: int | None = None


@dataclass(frozen=True)
class MonthlyStats:
    total_days: int
    state_counts: dict[ReturnState, int]
    frequencies: dict[ReturnState, float]
    seasonal_factors: dict[ReturnState, float]
    transition_counts: np.ndarray
    mean_return: float
    volatility: float


@dataclass(frozen=True)
class MonthlyRisk:
    """Chance of at least one crash day within the horizon, for one calendar month."""

    month: int
    risk: float
    lower: float
    upper: float
    extreme_events: int = 0
    total_days: int = 0
    seasonal_factor: float = 1.0


@dataclass(frozen=True)
class SimulationStep:
    time_step: int
    mean: float
    median: float
    lower5: float
    lower25: float
    upper75: float
    upper95: float


@dataclass(frozen=True)
class ForecastSnapshot:
    forecast_price: float
    expected_return: float
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class ForecastResult:
    current_price: float
    forecast_price: float
    lower_bound: float
    upper_bound: float
    expected_return: float
    crash_probability: float
    pump_probability: float
    transition_matrix: np.ndarray
    steady_state_probs: np.ndarray
    simulation_summary: list[SimulationStep]
    forecast_paths: np.ndarray
    timeframe_days: int = 0
    daily_returns: list[float] = field(default_factory=list)
    expected_daily_return: float = 0.0
    volatility: float = 0.0
    state_returns: dict[ReturnState, float] = field(default_factory=dict)
    state_volatility: dict[ReturnState, float] = field(default_factory=dict)
    current_state_dist: np.ndarray | None = None
    sentiment_factor: float | None = None
    original: ForecastSnapshot | None = None


@dataclass(frozen=True)
class StateOutlook:
    crash: float
    normal: float
    pump: float
