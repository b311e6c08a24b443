#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

import numpy as np

from btc_regime_forecast.price_data import load_headlines_json, load_price_csv
from btc_regime_forecast.sentiment import HeadlineSentimentScorer
from btc_regime_forecast.settings import settings


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Score crypto news headlines into a 0-100 sentiment index")
    p.add_argument("--headlines-json", default="data/headlines.json")
    p.add_argument("--price-csv", default=None, help="Optional price CSV for market-context adjustment")
    p.add_argument("--top-n", type=int, default=settings.headline_top_n)
    p.add_argument("--seed", type=int, default=settings.random_seed)
    p.add_argument("--text", nargs="*", default=None, help="Score these texts instead of the JSON file")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    history = load_price_csv(args.price_csv) if args.price_csv else None
    scorer = HeadlineSentimentScorer(history=history, rng=np.random.default_rng(args.seed))

    if args.text:
        payload = [
            {"text": t, "score": round(scorer.score(t), 4), "class": scorer.classify(t)}
            for t in args.text
        ]
        print(json.dumps(payload, indent=2))
        return

    result = scorer.analyze_headlines(load_headlines_json(args.headlines_json), top_n=args.top_n)
    print(json.dumps(asdict(result), indent=2))


if __name__ == "__main__":
    main()
