from __future__ import annotations

import logging
from io import StringIO
from urllib.parse import urlencode

import pandas as pd
import requests

from .price_data import history_from_frame
from .settings import settings
from .types import Headline, PricePoint

logger = logging.getLogger(__name__)

HEADERS = {"User-Agent": "btc-regime-forecast/0.1"}
GOOGLE_NEWS_RSS = "https://news.google.com/rss/search"


def fetch_coinmetrics_frame(url: str | None = None, timeout: float | None = None) -> pd.DataFrame:
    resp = requests.get(
        url or settings.coinmetrics_csv_url,
        headers=HEADERS,
        timeout=timeout or settings.http_timeout_seconds,
    )
    resp.raise_for_status()
    return pd.read_csv(StringIO(resp.text))


def fetch_price_history(url: str | None = None, timeout: float | None = None) -> list[PricePoint]:
    history = history_from_frame(fetch_coinmetrics_frame(url, timeout))
    logger.info("Fetched %d daily prices (%s to %s)", len(history), history[0].date, history[-1].date)
    return history


def google_news_feed_url(query: str) -> str:
    return GOOGLE_NEWS_RSS + "?" + urlencode({"q": query, "hl": "en-US", "gl": "US", "ceid": "US:en"})


def fetch_feed_items(query: str, timeout: float | None = None) -> list[dict[str, str]]:
    """Items of one Google News search feed, converted to JSON by rss2json."""
    resp = requests.get(
        settings.rss2json_url,
        params={"rss_url": google_news_feed_url(query)},
        headers=HEADERS,
        timeout=timeout or settings.http_timeout_seconds,
    )
    resp.raise_for_status()
    payload = resp.json()
    if payload.get("status") != "ok":
        raise RuntimeError(f"rss2json returned status {payload.get('status')!r} for {query!r}")
    return payload.get("items") or []


def fetch_headlines(queries: list[str] | None = None, timeout: float | None = None) -> list[Headline]:
    """Merged headlines from every feed, newest first, one per title."""
    errors: list[str] = []
    items: list[dict[str, str]] = []
    for query in queries or settings.news_queries:
        try:
            items.extend(fetch_feed_items(query, timeout))
        except (requests.RequestException, RuntimeError, ValueError) as exc:
            logger.warning("News feed %r failed: %s", query, exc)
            errors.append(f"{query}: {exc}")

    if not items:
        raise RuntimeError("Failed to fetch news headlines: " + (" | ".join(errors) or "no items"))

    df = pd.DataFrame(
        {
            "title": [str(x.get("title") or "").strip() for x in items],
            "timestamp": [x.get("pubDate") for x in items],
        }
    )
    df = df[df["title"] != ""].copy()
    df["sort_key"] = pd.to_datetime(df["timestamp"], errors="coerce", utc=True, format="mixed")
    df = df.sort_values("sort_key", ascending=False, kind="stable", na_position="last")
    df = df.drop_duplicates("title", keep="first")

    return [
        Headline(title=row["title"], timestamp=None if pd.isna(row["timestamp"]) else str(row["timestamp"]))
        for row in df.to_dict("records")
    ]
