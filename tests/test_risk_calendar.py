from datetime import date

import pytest

from btc_regime_forecast.risk_calendar import crash_probability, credible_interval, monthly_crash_risk
from btc_regime_forecast.states import classify_states
from btc_regime_forecast.types import PricePoint

from conftest import make_history


def test_crash_probability_closed_form() -> None:
    assert crash_probability(2.0, 10.0, 5) == pytest.approx(1 - (10 / 15) ** 2)
    assert crash_probability(0.0, 10.0, 5) == 0.0
    assert crash_probability(2.0, 10.0, 0) == 0.0


def test_credible_interval_brackets_risk() -> None:
    lower, upper = credible_interval(3.0, 100.0, 30)
    risk = crash_probability(3.0, 100.0, 30)
    assert 0.0 < lower < risk < upper < 1.0


def test_single_month_without_crashes() -> None:
    # 31 days is too short for a crash tail, so alpha = A0 * 1.0 and beta = B0 + 31
    history = make_history([0.01, -0.01] * 15, start=date(2022, 1, 1))
    calendar = monthly_crash_risk(history, 30)

    jan = calendar[1]
    assert jan.extreme_events == 0
    assert jan.total_days == 31
    assert jan.seasonal_factor == 1.0
    assert jan.risk == pytest.approx(30 / 62)
    assert jan.lower == pytest.approx(1 - 0.975 ** (30 / 32))
    assert jan.upper == pytest.approx(1 - 0.025 ** (30 / 32))
    for month in range(2, 13):
        assert calendar[month].risk == calendar[month].lower == calendar[month].upper == 0.0


def test_calendar_over_random_walk(random_walk_history: list[PricePoint]) -> None:
    calendar = monthly_crash_risk(random_walk_history, 30)
    crashes = sum(1 for p in classify_states(random_walk_history) if p.return_state == "crash")

    assert sorted(calendar) == list(range(1, 13))
    assert sum(r.total_days for r in calendar.values()) == len(random_walk_history)
    assert sum(r.extreme_events for r in calendar.values()) == crashes
    for r in calendar.values():
        assert 0.0 <= r.lower <= r.risk <= r.upper <= 1.0


def test_longer_horizon_raises_risk(random_walk_history: list[PricePoint]) -> None:
    short = monthly_crash_risk(random_walk_history, 7)
    long = monthly_crash_risk(random_walk_history, 90)
    for month in range(1, 13):
        assert long[month].risk >= short[month].risk


def test_zero_horizon_has_no_risk(random_walk_history: list[PricePoint]) -> None:
    calendar = monthly_crash_risk(random_walk_history, 0)
    assert all(r.risk == r.lower == r.upper == 0.0 for r in calendar.values())


def test_invalid_inputs_return_empty(random_walk_history: list[PricePoint]) -> None:
    assert monthly_crash_risk([], 30) == {}
    assert monthly_crash_risk(None, 30) == {}
    assert monthly_crash_risk(random_walk_history, -1) == {}
