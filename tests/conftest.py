from __future__ import annotations

import math
from datetime import date, timedelta

import numpy as np
import pytest

from btc_regime_forecast.fundamentals import halving_epoch
from btc_regime_forecast.types import PricePoint


def make_history(
    returns: list[float] | np.ndarray,
    start: date = date(2022, 1, 1),
    start_price: float = 30_000.0,
    **onchain: list[float] | np.ndarray,
) -> list[PricePoint]:
    """Daily points whose log returns are ``returns`` (the first point has return 0)."""
    out: list[PricePoint] = []
    price = start_price
    for i, r in enumerate([0.0, *returns]):
        price *= math.exp(r)
        dt = start + timedelta(days=i)
        extra = {k: float(v[i]) for k, v in onchain.items() if i < len(v)}
        out.append(PricePoint(date=dt, price=price, log_return=r, halving_epoch=halving_epoch(dt), **extra))
    return out


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(12345)


@pytest.fixture
def random_walk_history() -> list[PricePoint]:
    gen = np.random.default_rng(7)
    returns = gen.normal(0.0005, 0.03, size=599)
    return make_history(returns)


@pytest.fixture
def onchain_history() -> list[PricePoint]:
    gen = np.random.default_rng(11)
    n = 800
    returns = gen.normal(0.0, 0.025, size=n - 1)
    t = np.arange(n)
    return make_history(
        returns,
        start=date(2021, 6, 1),
        mvrv=1.5 + np.sin(t / 120.0) + gen.normal(0, 0.05, n),
        nvt=60 + 10 * np.cos(t / 90.0) + gen.normal(0, 1.0, n),
        active_supply_1d=np.full(n, 1.2e6),
        active_supply_1yr=np.full(n, 8.0e6),
        current_supply=np.linspace(18.8e6, 19.5e6, n),
        miner_revenue=900 + 100 * np.sin(t / 60.0),
        whale_supply=0.45 + 0.0001 * t,
    )
