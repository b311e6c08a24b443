from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

import numpy as np

from .lexicon import (
    EMOJI_PHRASES,
    HEADLINE_PATTERNS,
    HIGH_VALUE_TOKENS,
    NEGATION_TERMS,
    PRICE_PATTERNS,
    PRIOR_KNOWLEDGE,
    SENTIMENT_LEXICON,
    SIGNIFICANT_BIGRAMS,
    STOP_WORDS,
    TICKERS,
)
from .numeric import clamp
from .settings import settings
from .trends import summarize_price_trend
from .types import (
    Headline,
    HeadlineScore,
    PricePoint,
    PriceTrendSummary,
    SentimentClass,
    SentimentResult,
)

logger = logging.getLogger(__name__)

CLASSES: tuple[SentimentClass, ...] = ("negative", "neutral", "positive")
NEGATION_WINDOW = 3
CLASSIFY_THRESHOLD = 0.2
MIXED_SIGNAL_DISCOUNT = 0.8

_TICKER_RE = re.compile(r"\b(" + "|".join(TICKERS) + r")\b", re.IGNORECASE)
_PRICE_RE = re.compile(r"\$([0-9,.]+)k?", re.IGNORECASE)
_PERCENT_RE = re.compile(r"\b(\d+(?:\.\d+)?)%\b")
_PUNCT_RE = re.compile(r"[.!?;,]")
_UNIGRAM_RE = re.compile(r"^(?:NOT_)?(?:price_|percent_)?[^_]*$")

_PRICE_RULES = [(re.compile(p, re.IGNORECASE), w) for p, w in PRICE_PATTERNS.items()]
_HEADLINE_RULES = [(re.compile(p, re.IGNORECASE), w) for p, w in HEADLINE_PATTERNS.items()]

_CONTRAST_RE = re.compile(r"(but|however|despite|while|although)", re.IGNORECASE)
_UP_WORDS_RE = re.compile(r"(rally|gain|rises|climbs|up|positive)", re.IGNORECASE)
_DOWN_WORDS_RE = re.compile(r"(crash|plunge|fall|drop|decline|down|negative)", re.IGNORECASE)
_DOLLAR_MENTION_RE = re.compile(r"\$\d+[k]?", re.IGNORECASE)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _to_scaled(score: float) -> int:
    return _round_half_up((score + 1.0) * 50.0)


def sentiment_label(value: float) -> str:
    if value >= 70:
        return "Very Positive"
    if value >= 60:
        return "Positive"
    if value >= 40:
        return "Neutral"
    if value >= 30:
        return "Negative"
    return "Very Negative"


def _headline_title(item: Headline | Mapping[str, Any] | str | None) -> str | None:
    if isinstance(item, Headline):
        title = item.title
    elif isinstance(item, Mapping):
        title = item.get("title")
    else:
        title = item
    return title if isinstance(title, str) and title else None


class HeadlineSentimentScorer:
    """Hybrid lexicon / Naive-Bayes scorer for crypto news headlines.

    Scores are in [-1, 1]. The rule-based side dominates the blend; the
    Naive-Bayes side is seeded from a small curated headline corpus and can be
    trained further with :meth:`train_document`. When a price history is given,
    its trend summary nudges the rule score toward what the market is actually
    doing.
    """

    def __init__(
        self,
        history: Sequence[PricePoint] | None = None,
        rng: np.random.Generator | None = None,
        bigram_probability: float | None = None,
        skip_bigram_probability: float | None = None,
        naive_bayes_weight: float | None = None,
        use_bigrams: bool = True,
        use_negation: bool = True,
        alpha: float = 1.0,
    ) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(settings.random_seed)
        self.bigram_probability = (
            settings.bigram_inclusion_probability if bigram_probability is None else bigram_probability
        )
        self.skip_bigram_probability = (
            settings.skip_bigram_inclusion_probability if skip_bigram_probability is None else skip_bigram_probability
        )
        self.naive_bayes_weight = settings.naive_bayes_weight if naive_bayes_weight is None else naive_bayes_weight
        self.use_bigrams = use_bigrams
        self.use_negation = use_negation
        self.alpha = alpha

        self.price_trends: PriceTrendSummary = summarize_price_trend(history)

        self.word_counts: dict[str, dict[SentimentClass, int]] = {}
        self.class_counts: dict[SentimentClass, int] = {c: 0 for c in CLASSES}
        self.document_counts: dict[SentimentClass, int] = {c: 0 for c in CLASSES}

        for text, cls, repetitions in PRIOR_KNOWLEDGE:
            for _ in range(repetitions):
                self.train_document(text, cls)

    # -- tokenization -----------------------------------------------------

    def _normalize(self, text: str) -> str:
        processed = text.lower()
        processed = _TICKER_RE.sub(r" \1 ", processed)
        processed = _PRICE_RE.sub(r" price_\1 ", processed)
        processed = _PERCENT_RE.sub(r" percent_\1 ", processed)
        for emoji, phrase in EMOJI_PHRASES.items():
            processed = processed.replace(emoji, f" {phrase} ")
        return processed

    def _apply_negation(self, tokens: list[str]) -> list[str]:
        out: list[str] = []
        active = False
        last_negation = -10
        for i, token in enumerate(tokens):
            if token in NEGATION_TERMS:
                active = True
                last_negation = i
                out.append(token)
            elif active:
                if token not in out:
                    out.append("NOT_" + token)
                if (i > 0 and _PUNCT_RE.search(tokens[i - 1])) or i - last_negation > NEGATION_WINDOW:
                    active = False
            elif token not in out:
                out.append(token)
        return out

    @staticmethod
    def _is_forced_pair(a: str, b: str) -> bool:
        return any(
            t in HIGH_VALUE_TOKENS or t.startswith("price_") or t.startswith("percent_") for t in (a, b)
        )

    def preprocess(self, text: str) -> list[str]:
        if not isinstance(text, str):
            logger.error("preprocess expects a string, got %r", type(text).__name__)
            return []

        tokens = [t for t in self._normalize(text).split() if t not in STOP_WORDS]
        if self.use_negation:
            tokens = self._apply_negation(tokens)

        features = list(tokens)
        if not self.use_bigrams:
            return features

        for a, b in zip(tokens, tokens[1:]):
            bigram = f"{a}_{b}"
            if bigram in SIGNIFICANT_BIGRAMS or self._is_forced_pair(a, b):
                features.append(bigram)
            elif self.rng.random() < self.bigram_probability:
                features.append(bigram)

        for a, c in zip(tokens, tokens[2:]):
            if a in HIGH_VALUE_TOKENS or c in HIGH_VALUE_TOKENS:
                if self.rng.random() < self.skip_bigram_probability:
                    features.append(f"{a}__{c}")

        return features

    # -- Naive Bayes ------------------------------------------------------

    def train_document(self, text: str, cls: SentimentClass) -> HeadlineSentimentScorer:
        if cls not in CLASSES:
            logger.error("Unknown sentiment class %r", cls)
            return self

        self.document_counts[cls] += 1
        for token in self.preprocess(text):
            counts = self.word_counts.setdefault(token, {c: 0 for c in CLASSES})
            counts[cls] += 1
            self.class_counts[cls] += 1
        return self

    @staticmethod
    def feature_weight(word: str) -> float:
        if word in SIGNIFICANT_BIGRAMS:
            return 1.5
        if "__" in word:
            return 1.2
        if not _UNIGRAM_RE.match(word):
            return 1.2
        if word.startswith("NOT_"):
            return 1.4
        if word.startswith("price_"):
            return 1.4
        if word.startswith("percent_"):
            try:
                return 1.7 if float(word.split("_", 1)[1]) > 10 else 1.5
            except ValueError:
                return 1.5
        if word in HIGH_VALUE_TOKENS:
            return 1.3
        return 1.0

    def word_probability(self, word: str, cls: SentimentClass) -> float:
        denominator = self.class_counts[cls] + self.alpha * (len(self.word_counts) + 1)
        counts = self.word_counts.get(word)
        if counts is None:
            return self.alpha / denominator
        return (counts[cls] * self.feature_weight(word) + self.alpha) / denominator

    def class_probability(self, cls: SentimentClass) -> float:
        total = sum(self.document_counts.values())
        return 1.0 / len(CLASSES) if total == 0 else self.document_counts[cls] / total

    def log_probabilities(self, tokens: Sequence[str]) -> dict[SentimentClass, float]:
        out: dict[SentimentClass, float] = {}
        for cls in CLASSES:
            log_prob = math.log(self.class_probability(cls)) if self.class_probability(cls) > 0 else math.log(1e-10)
            for token in tokens:
                log_prob += math.log(max(self.word_probability(token, cls), 1e-10))
            out[cls] = log_prob
        return out

    def class_probabilities(self, tokens: Sequence[str]) -> dict[SentimentClass, float]:
        log_probs = self.log_probabilities(tokens)
        peak = max(log_probs.values())
        exp = {c: math.exp(v - peak) for c, v in log_probs.items()}
        total = sum(exp.values())
        return {c: v / total for c, v in exp.items()}

    # -- rules ------------------------------------------------------------

    def _rule_evidence(self, lower: str, tokens: Sequence[str]) -> tuple[float, float]:
        total = 0.0
        matches = 0.0

        for token in tokens:
            value = SENTIMENT_LEXICON.get(token.removeprefix("NOT_"))
            if value is None:
                continue
            total += -value if token.startswith("NOT_") else value
            matches += 1

        for regex, value in _PRICE_RULES:
            if regex.search(lower):
                total += value * 1.5
                matches += 1.5

        for regex, value in _HEADLINE_RULES:
            if regex.search(lower):
                total += value * 2.0
                matches += 2.0

        for delta, weight in self._heuristics(lower):
            total += delta
            matches += weight

        return total, matches

    @staticmethod
    def _heuristics(lower: str) -> list[tuple[float, float]]:
        hits: list[tuple[float, float]] = []

        if re.search(r"(liquidation|billion|million)\s+.*\s+(market|crypto|bitcoin)", lower):
            hits.append((-0.6, 1.5))

        if _CONTRAST_RE.search(lower) and re.search(
            r"(down|plunge|crash|negative|hurting|losing|falls|pressure|weaken)", lower
        ):
            hits.append((-0.4, 1.2))

        if re.search(r"(below|under|fall|drop|sink|slide)", lower) and _DOLLAR_MENTION_RE.search(lower):
            hits.append((-0.5, 1.0))

        if (
            "outflow" in lower
            or ("billion" in lower and re.search(r"(exit|exits|loss|losses|liquidation)", lower))
            or ("etf" in lower and re.search(r"(outflow|shed|exit|selling|losing|streak)", lower))
        ):
            hits.append((-0.7, 1.5))

        if re.search(r"(wipe|rout|loss|crash|bloodbath|dive|steep|tumble|sink)", lower) and re.search(
            r"(\$\d+|\d+\s*[mb]illion|\d+\s*[mb]ln)", lower
        ):
            hits.append((-0.8, 2.0))

        if re.search(r"plunge|plunged|plunging", lower):
            hits.append((-0.8, 1.5))

        if re.search(r"could|might|expected|predict|forecast", lower) and re.search(
            r"(\$\d+k?|\d+\s*dollars)", lower
        ):
            hits.append((0.5, 1.0))

        return hits

    def _market_context(self, lower: str, rule_total: float) -> tuple[float, float]:
        trends = self.price_trends
        adjustment = 0.0
        weight = 0.0

        if rule_total < 0 and trends.trend_direction == "bearish":
            adjustment -= 0.2
            weight += 1.0
        if rule_total > 0 and trends.trend_direction == "bullish":
            adjustment += 0.2
            weight += 1.0

        if re.search(r"\$(\d+(?:\.\d+)?)[k]?", lower):
            if re.search(r"(rise|climb|jump|surge|soar|up)", lower) and trends.short_term > 0:
                adjustment += 0.3
                weight += 1.5
            if re.search(r"(fall|drop|sink|slide|tumble|plunge|down)", lower) and trends.short_term < 0:
                adjustment -= 0.3
                weight += 1.5

        # negative news lands harder in a volatile tape
        if trends.recent_volatility > 5 and rule_total < 0:
            adjustment -= 0.1 * (trends.recent_volatility / 5)
            weight += 0.5

        if trends.is_local_high:
            adjustment += 0.2
            weight += 0.5
        elif trends.is_local_low:
            adjustment -= 0.2
            weight += 0.5

        if trends.long_term < -20:
            adjustment -= 0.15
            weight += 0.5
        elif trends.long_term > 20:
            adjustment += 0.15
            weight += 0.5

        return adjustment, weight

    # -- public API -------------------------------------------------------

    def score(self, text: str) -> float:
        if not isinstance(text, str) or not text.strip():
            logger.error("score expects a non-empty string, got %r", text)
            return 0.0

        lower = text.lower()
        tokens = self.preprocess(lower)

        probs = self.class_probabilities(tokens)
        nb_score = probs["positive"] - probs["negative"]

        rule_total, matches = self._rule_evidence(lower, tokens)
        rule_score = rule_total / max(matches, 1.0)
        adjustment, context_weight = self._market_context(lower, rule_total)
        if context_weight > 0:
            rule_score = (rule_score * matches + adjustment * context_weight) / (matches + context_weight)
        rule_score = clamp(rule_score, -1.0, 1.0)

        final = self.naive_bayes_weight * nb_score + (1.0 - self.naive_bayes_weight) * rule_score
        if (_UP_WORDS_RE.search(lower) and _DOWN_WORDS_RE.search(lower)) or _CONTRAST_RE.search(lower):
            final *= MIXED_SIGNAL_DISCOUNT

        logger.debug("sentiment %.4f (nb=%.4f rule=%.4f) for %r", final, nb_score, rule_score, text)
        return clamp(final, -1.0, 1.0)

    def classify(self, text: str) -> SentimentClass:
        if not isinstance(text, str):
            logger.error("classify expects a string, got %r", type(text).__name__)
            return "neutral"
        value = self.score(text)
        if value > CLASSIFY_THRESHOLD:
            return "positive"
        if value < -CLASSIFY_THRESHOLD:
            return "negative"
        return "neutral"

    def score_with_price(self, text: str, price_change_pct: float = 0.0) -> float:
        """0-100 sentiment that blends the headline score with the realised price move."""
        if not isinstance(text, str):
            logger.error("score_with_price expects a string, got %r", type(text).__name__)
            return 50.0
        if not isinstance(price_change_pct, (int, float)) or math.isnan(price_change_pct):
            logger.warning("Invalid price change %r, using 0", price_change_pct)
            price_change_pct = 0.0

        scaled = (self.score(text) + 1.0) * 50.0
        if price_change_pct > 20:
            price_component = 20.0
        elif price_change_pct > 10:
            price_component = 10.0
        elif price_change_pct < -20:
            price_component = -20.0
        elif price_change_pct < -10:
            price_component = -10.0
        else:
            price_component = price_change_pct / 2.0
        return clamp(0.9 * scaled + price_component, 0.0, 100.0)

    def analyze_headlines(
        self,
        headlines: Sequence[Headline | Mapping[str, Any] | str] | None,
        top_n: int | None = None,
    ) -> SentimentResult:
        if not headlines:
            return SentimentResult(raw_score=0.0, value=50, label="Neutral")

        top_n = settings.headline_top_n if top_n is None else top_n
        try:
            total = 0.0
            weight_sum = 0.0
            details: list[HeadlineScore] = []
            for i, item in enumerate(list(headlines)[:top_n]):
                title = _headline_title(item)
                if title is None:
                    logger.warning("Skipping headline without a usable title: %r", item)
                    continue
                s = self.score(title)
                w = math.exp(-settings.recency_decay * i)
                total += s * w
                weight_sum += w
                details.append(HeadlineScore(headline=title, score=_to_scaled(s), weight=round(w, 2)))
                logger.debug("headline %r -> %d (weight %.2f)", title, details[-1].score, w)

            if not details:
                return SentimentResult(raw_score=0.0, value=50, label="Neutral")

            aggregate = total / (weight_sum or 1.0)
            negative_share = sum(1 for d in details if d.score < 40) / len(details)
            if negative_share > 0.4:
                factor = min(0.7, 0.5 + negative_share * 0.5)
                logger.info("High negative headline share %.2f, scaling aggregate by %.2f", negative_share, factor)
                aggregate *= factor

            value = int(clamp(_to_scaled(aggregate), 0, 100))
            return SentimentResult(
                raw_score=clamp(aggregate, -1.0, 1.0),
                value=value,
                label=sentiment_label(value),
                details=details,
            )
        except Exception:
            logger.exception("Headline analysis failed; returning neutral sentiment")
            return SentimentResult(raw_score=0.0, value=50, label="Neutral")
