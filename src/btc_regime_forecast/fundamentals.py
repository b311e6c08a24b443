from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from .types import BitcoinFundamentals, PricePoint

# Genesis block followed by each halving.
HALVING_DATES: tuple[date, ...] = (
    date(2009, 1, 3),
    date(2012, 11, 28),
    date(2016, 7, 9),
    date(2020, 5, 11),
    date(2024, 4, 20),
)

BASE_BLOCK_REWARD = 50.0
BLOCKS_PER_YEAR = 6 * 24 * 365.25
MAX_SUPPLY = 21_000_000.0
FALLBACK_CIRCULATING_SUPPLY = 19_700_000.0


def halving_epoch(dt: date) -> int:
    for i in range(len(HALVING_DATES) - 1, -1, -1):
        if dt >= HALVING_DATES[i]:
            return i
    return 0


def calculate_fundamentals(history: Sequence[PricePoint] | None, as_of: date) -> BitcoinFundamentals:
    epoch = halving_epoch(as_of)
    block_reward = BASE_BLOCK_REWARD / 2**epoch
    new_coins_per_year = block_reward * BLOCKS_PER_YEAR

    supply = FALLBACK_CIRCULATING_SUPPLY
    if history:
        latest_supply = history[-1].current_supply
        if latest_supply:
            supply = float(latest_supply)

    return BitcoinFundamentals(
        inflation_rate=new_coins_per_year / supply,
        current_block_reward=block_reward,
        current_circulating_supply=supply,
        percentage_of_max_supply_issued=supply / MAX_SUPPLY,
        current_epoch=epoch,
        days_since_last_halving=float((as_of - HALVING_DATES[epoch]).days),
        new_coins_per_year=new_coins_per_year,
    )
