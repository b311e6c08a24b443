from __future__ import annotations

import json
import logging
import math
from pathlib import Path

import numpy as np
import pandas as pd

from .fundamentals import halving_epoch
from .types import Headline, PricePoint

logger = logging.getLogger(__name__)

# Coin Metrics community CSV column -> PricePoint field
COINMETRICS_COLUMNS = {
    "time": "date",
    "PriceUSD": "price",
    "CapMVRVCur": "mvrv",
    "NVTAdj": "nvt",
    "AdrActCnt": "active_addresses",
    "SplyAct1d": "active_supply_1d",
    "SplyAct1yr": "active_supply_1yr",
    "SplyCur": "current_supply",
    "RevNtv": "miner_revenue",
    "SplyAdrTop10Pct": "whale_supply",
}

ONCHAIN_FIELDS = [f for f in COINMETRICS_COLUMNS.values() if f not in ("date", "price")]


def _optional(value: object) -> float | None:
    if value is None:
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if math.isfinite(out) else None


def prepare_price_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Normalise a raw price frame to ascending daily rows with log returns and halving epochs."""
    out = df.rename(columns=COINMETRICS_COLUMNS).copy()
    required = {"date", "price"}
    if not required.issubset(out.columns):
        raise ValueError(f"Price data must contain columns {required} (or Coin Metrics 'time'/'PriceUSD')")

    out["date"] = pd.to_datetime(out["date"], utc=False).dt.date
    out["price"] = pd.to_numeric(out["price"], errors="coerce")
    out = out[out["price"] > 0]
    out = out.sort_values("date", kind="stable").drop_duplicates("date", keep="last").reset_index(drop=True)

    for col in ONCHAIN_FIELDS:
        out[col] = pd.to_numeric(out[col], errors="coerce") if col in out.columns else np.nan

    out["log_return"] = np.log(out["price"] / out["price"].shift(1)).fillna(0.0)
    out["halving_epoch"] = [halving_epoch(d) for d in out["date"]]
    return out


def history_from_frame(df: pd.DataFrame) -> list[PricePoint]:
    frame = prepare_price_frame(df)
    if frame.empty:
        raise ValueError("No rows with a positive price")

    return [
        PricePoint(
            date=row["date"],
            price=float(row["price"]),
            log_return=float(row["log_return"]),
            halving_epoch=int(row["halving_epoch"]),
            **{col: _optional(row[col]) for col in ONCHAIN_FIELDS},
        )
        for row in frame.to_dict("records")
    ]


def history_to_frame(history: list[PricePoint]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "date": [p.date for p in history],
            "price": [p.price for p in history],
            "log_return": [p.log_return for p in history],
            **{col: [getattr(p, col) for p in history] for col in ONCHAIN_FIELDS},
        }
    ).astype({"price": float, "log_return": float, **{col: float for col in ONCHAIN_FIELDS}})


def load_price_csv(path: str | Path) -> list[PricePoint]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Price file not found at {p}. Expected CSV columns: time,PriceUSD[,on-chain...]")

    history = history_from_frame(pd.read_csv(p))
    logger.info("Loaded %d daily prices from %s (%s to %s)", len(history), p, history[0].date, history[-1].date)
    return history


def load_headlines_json(path: str | Path) -> list[Headline]:
    """Read a JSON list of headlines (strings or objects with ``title``), freshest first."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Headlines file not found: {path}")

    payload = json.loads(p.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("headlines", payload.get("items", []))
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of headlines in {path}")

    seen: set[str] = set()
    out: list[Headline] = []
    for item in payload:
        if isinstance(item, str):
            title, timestamp = item, None
        elif isinstance(item, dict):
            title, timestamp = item.get("title"), item.get("timestamp") or item.get("pubDate")
        else:
            continue
        if not isinstance(title, str) or not title.strip() or title.strip() in seen:
            continue
        title = title.strip()
        seen.add(title)
        out.append(Headline(title=title, timestamp=str(timestamp) if timestamp is not None else None))
    return out
