from datetime import date
from typing import Any

import pytest
import requests

from btc_regime_forecast import feeds


class FakeResponse:
    def __init__(self, text: str = "", payload: dict[str, Any] | None = None, status: int = 200) -> None:
        self.text = text
        self._payload = payload or {}
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"HTTP {self.status}")

    def json(self) -> dict[str, Any]:
        return self._payload


def test_fetch_price_history(monkeypatch: pytest.MonkeyPatch) -> None:
    csv = "time,PriceUSD,CapMVRVCur\n2024-01-01,42000,1.8\n2024-01-02,45000,1.9\n2024-01-03,,1.9\n"
    seen: dict[str, Any] = {}

    def fake_get(url: str, **kwargs: Any) -> FakeResponse:
        seen["url"] = url
        seen["timeout"] = kwargs["timeout"]
        return FakeResponse(text=csv)

    monkeypatch.setattr(feeds.requests, "get", fake_get)
    history = feeds.fetch_price_history(url="https://example.test/btc.csv", timeout=5)

    assert seen == {"url": "https://example.test/btc.csv", "timeout": 5}
    assert [h.date for h in history] == [date(2024, 1, 1), date(2024, 1, 2)]
    assert history[1].mvrv == 1.9


def test_http_error_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(feeds.requests, "get", lambda url, **kwargs: FakeResponse(status=503))
    with pytest.raises(requests.HTTPError):
        feeds.fetch_coinmetrics_frame()


def test_google_news_feed_url() -> None:
    url = feeds.google_news_feed_url("Bitcoin Price")
    assert url.startswith("https://news.google.com/rss/search?q=Bitcoin+Price")
    assert "ceid=US%3Aen" in url


def test_fetch_headlines_merges_sorts_and_dedupes(monkeypatch: pytest.MonkeyPatch) -> None:
    feeds_by_query = {
        "a": [
            {"title": "Older story", "pubDate": "2024-05-01 08:00:00"},
            {"title": "Shared story", "pubDate": "2024-05-02 08:00:00"},
        ],
        "b": [
            {"title": "Newest story", "pubDate": "2024-05-03 08:00:00"},
            {"title": "Shared story", "pubDate": "2024-05-02 09:00:00"},
            {"title": "", "pubDate": "2024-05-04 08:00:00"},
        ],
    }

    def fake_get(url: str, params: dict[str, str], **kwargs: Any) -> FakeResponse:
        query = params["rss_url"].split("q=")[1].split("&")[0]
        return FakeResponse(payload={"status": "ok", "items": feeds_by_query[query]})

    monkeypatch.setattr(feeds.requests, "get", fake_get)
    headlines = feeds.fetch_headlines(["a", "b"])

    assert [h.title for h in headlines] == ["Newest story", "Shared story", "Older story"]
    assert headlines[1].timestamp == "2024-05-02 09:00:00"


def test_failed_feed_is_skipped(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, params: dict[str, str], **kwargs: Any) -> FakeResponse:
        if "q=bad" in params["rss_url"]:
            raise requests.ConnectionError("boom")
        return FakeResponse(payload={"status": "ok", "items": [{"title": "Only story"}]})

    monkeypatch.setattr(feeds.requests, "get", fake_get)
    headlines = feeds.fetch_headlines(["bad", "good"])
    assert [h.title for h in headlines] == ["Only story"]
    assert headlines[0].timestamp is None


def test_all_feeds_failing_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        feeds.requests, "get", lambda url, **kwargs: FakeResponse(payload={"status": "error"})
    )
    with pytest.raises(RuntimeError):
        feeds.fetch_headlines(["x"])
