#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

import numpy as np

from btc_regime_forecast.forecast import (
    apply_sentiment_adjustment,
    average_state_impacts,
    build_forecast_context,
    calculate_forecast,
    imminent_outlook,
    near_term_drivers,
)
from btc_regime_forecast.price_data import load_headlines_json, load_price_csv
from btc_regime_forecast.risk_calendar import monthly_crash_risk
from btc_regime_forecast.sentiment import HeadlineSentimentScorer
from btc_regime_forecast.settings import settings
from btc_regime_forecast.types import STATES


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Regime-switching BTC price forecast from a daily price CSV")
    p.add_argument("--price-csv", default="data/btc.csv", help="Coin Metrics style CSV (time, PriceUSD, ...)")
    p.add_argument("--headlines-json", default=None, help="Optional JSON list of headlines, freshest first")
    p.add_argument("--days", type=int, nargs="+", default=[1, 7, 30, 90])
    p.add_argument("--seed", type=int, default=settings.random_seed)
    p.add_argument("--risk-horizon", type=int, default=30, help="Horizon in days for the monthly crash-risk calendar")
    p.add_argument("--no-sentiment-adjust", action="store_true", help="Skip the post-hoc sentiment scaling")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    rng = np.random.default_rng(args.seed)

    history = load_price_csv(args.price_csv)

    sentiment = None
    if args.headlines_json:
        headlines = load_headlines_json(args.headlines_json)
        sentiment = HeadlineSentimentScorer(history=history, rng=rng).analyze_headlines(headlines)

    context = build_forecast_context(history, sentiment)

    forecasts = {}
    for days in args.days:
        forecast = calculate_forecast(history, days, context, rng=rng)
        if forecast is None:
            forecasts[str(days)] = None
            continue
        if sentiment is not None and not args.no_sentiment_adjust:
            forecast = apply_sentiment_adjustment(forecast, sentiment)

        crash_impact, pump_impact = average_state_impacts(forecast)
        forecasts[str(days)] = {
            "current_price": round(forecast.current_price, 2),
            "forecast_price": round(forecast.forecast_price, 2),
            "lower_bound": round(forecast.lower_bound, 2),
            "upper_bound": round(forecast.upper_bound, 2),
            "expected_return": round(forecast.expected_return, 6),
            "volatility": round(forecast.volatility, 6),
            "crash_probability": round(forecast.crash_probability, 4),
            "pump_probability": round(forecast.pump_probability, 4),
            "sentiment_factor": forecast.sentiment_factor,
            "transition_matrix": np.round(forecast.transition_matrix, 4).tolist(),
            "steady_state": dict(zip(STATES, np.round(forecast.steady_state_probs, 4).tolist())),
            "outlook_1d": asdict(imminent_outlook(forecast, 1)),
            "outlook_3d": asdict(imminent_outlook(forecast, 3)),
            "crash_impact_pct": round(crash_impact, 2),
            "pump_impact_pct": round(pump_impact, 2),
        }

    output = {
        "as_of": history[-1].date.isoformat(),
        "sentiment": None if sentiment is None else {"value": sentiment.value, "label": sentiment.label},
        "drivers": near_term_drivers(
            context.on_chain,
            context.volatility,
            None if sentiment is None else sentiment.value,
        ),
        "forecasts": forecasts,
        "crash_risk_calendar": {
            str(month): {"risk": round(r.risk, 4), "lower": round(r.lower, 4), "upper": round(r.upper, 4)}
            for month, r in monthly_crash_risk(history, args.risk_horizon).items()
        },
    }
    print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
