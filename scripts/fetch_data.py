#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from btc_regime_forecast.feeds import fetch_coinmetrics_frame, fetch_headlines
from btc_regime_forecast.price_data import COINMETRICS_COLUMNS
from btc_regime_forecast.settings import settings


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch BTC daily prices (Coin Metrics) and news headlines")
    p.add_argument("--price-out", default="data/btc.csv", help="Output CSV path")
    p.add_argument("--headlines-out", default="data/headlines.json", help="Output JSON path")
    p.add_argument("--skip-news", action="store_true")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    df = fetch_coinmetrics_frame()
    df = df[[c for c in COINMETRICS_COLUMNS if c in df.columns]]
    price_out = Path(args.price_out)
    price_out.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(price_out, index=False)
    print(f"Wrote {len(df)} rows to {price_out}")

    if args.skip_news:
        return

    headlines = fetch_headlines()
    headlines_out = Path(args.headlines_out)
    headlines_out.parent.mkdir(parents=True, exist_ok=True)
    headlines_out.write_text(
        json.dumps([{"title": h.title, "timestamp": h.timestamp} for h in headlines], indent=2),
        encoding="utf-8",
    )
    print(f"Wrote {len(headlines)} headlines to {headlines_out}")


if __name__ == "__main__":
    main()
