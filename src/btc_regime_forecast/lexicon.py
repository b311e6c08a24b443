"""Vocabulary tables for the headline sentiment scorer.

Weights are in [-1, 1]; regex tables are matched against the lowercased
headline, in insertion order.
"""

from __future__ import annotations

EMOJI_PHRASES: dict[str, str] = {
    "🚀": "bullish rocket",
    "📈": "uptrend",
    "📉": "downtrend",
    "💸": "money loss",
    "🩸": "bloodbath",
    "💪": "strong",
    "🐂": "bull",
    "🐻": "bear",
    "💎": "diamond hands",
    "🙌": "hodl",
    "🔥": "hot market",
    "💰": "profits",
    "🤑": "money gains",
    "😱": "market panic",
    "😨": "market fear",
    "🥳": "market celebration",
    "🎯": "price target",
    "🔪": "sharp drop",
    "⚡": "fast move",
    "🌕": "moon",
    "📊": "chart analysis",
    "💯": "full confidence",
    "🧨": "market explosion",
    "💥": "breakout",
    "👨‍💻": "developer activity",
    "🔒": "secure",
    "🔓": "security breach",
    "🏦": "institutional",
    "🐋": "whale",
    "🦐": "small investor",
    "🧠": "smart money",
    "💩": "bad investment",
    "🧻": "weak hands",
    "🤡": "foolish trade",
}

TICKERS = ("btc", "eth", "xrp", "bnb", "doge", "sol", "ada", "dot", "link", "avax", "matic", "shib")

NEGATION_TERMS = frozenset(
    {
        "not", "no", "never", "none", "nobody", "nothing", "neither", "nor", "nowhere",
        "cannot", "can't", "won't", "isn't", "aren't", "wasn't", "weren't", "don't", "doesn't", "didn't",
        "couldn't", "shouldn't", "wouldn't", "hasn't", "haven't", "hadn't", "fails", "failed", "against",
        "despite", "without", "absent", "lack", "lacking", "prevents", "denies", "blocks", "stops",
    }
)

STOP_WORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "has", "he", "in", "is", "it", "its",
        "of", "on", "that", "the", "to", "was", "were", "will", "with",
    }
)

SENTIMENT_LEXICON: dict[str, float] = {
    # negative
    "crash": -0.8, "plunge": -0.8, "fall": -0.7, "drop": -0.7, "dive": -0.7,
    "sink": -0.7, "slump": -0.6, "tumble": -0.6, "dip": -0.5, "slide": -0.5,
    "outflow": -0.6, "losing": -0.6, "loss": -0.6, "low": -0.5, "sell": -0.4,
    "selling": -0.5, "selloff": -0.7, "bear": -0.6, "bearish": -0.7,
    "fear": -0.7, "dump": -0.7, "weak": -0.5, "trouble": -0.6, "risk": -0.5,
    "volatile": -0.5, "volatility": -0.5, "concern": -0.5, "worried": -0.6,
    "panic": -0.8, "hack": -0.8, "scam": -0.9, "fraud": -0.9, "ban": -0.7,
    "regulation": -0.3, "tax": -0.3, "tariff": -0.4, "bubble": -0.7,
    "warning": -0.6, "caution": -0.5, "problematic": -0.6, "danger": -0.7,
    "underperformance": -0.7, "down": -0.5, "decline": -0.6, "falling": -0.7,
    "recession": -0.7, "crisis": -0.8, "problem": -0.6, "issue": -0.5,
    "struggle": -0.6, "suffering": -0.7, "pressure": -0.5, "strain": -0.5,
    "sours": -0.7, "sheds": -0.6, "hit": -0.5, "hits": -0.5, "loses": -0.6,
    "losses": -0.7, "erasing": -0.6, "erase": -0.6, "erased": -0.6,
    # neutral, slight bias
    "steady": 0.1, "stable": 0.1, "unchanged": 0.0, "flat": 0.0,
    "hold": 0.0, "holding": 0.0, "consolidate": 0.0, "consolidation": 0.0,
    "sideways": 0.0, "trading": 0.0, "range": 0.0, "plateau": 0.0,
    "maintain": 0.1, "maintains": 0.1, "remains": 0.0, "continuing": 0.0,
    "transition": 0.0, "shift": 0.0, "moving": 0.0, "moves": 0.0,
    "plan": 0.1, "plans": 0.1, "planning": 0.1, "consider": 0.0,
    "considering": 0.0, "analysis": 0.0, "report": 0.0, "reported": 0.0,
    "study": 0.0, "research": 0.0, "examine": 0.0, "review": 0.0,
    "technical": 0.0, "conference": 0.0, "event": 0.0, "update": 0.0,
    # positive
    "rise": 0.6, "rising": 0.6, "climb": 0.6, "climbing": 0.6,
    "surge": 0.8, "soar": 0.8, "jump": 0.7, "leap": 0.7, "rally": 0.7,
    "gain": 0.6, "gains": 0.6, "increase": 0.5, "increasing": 0.5,
    "up": 0.5, "upward": 0.6, "higher": 0.5, "bull": 0.6, "bullish": 0.7,
    "boom": 0.8, "explode": 0.8, "skyrocket": 0.9, "moonshot": 0.9,
    "record": 0.7, "high": 0.6, "peak": 0.7, "top": 0.6, "best": 0.7,
    "strong": 0.6, "strengthen": 0.6, "growth": 0.6, "growing": 0.6,
    "outperform": 0.7, "outperforming": 0.7, "beat": 0.6, "beating": 0.6,
    "exceed": 0.7, "exceeding": 0.7, "success": 0.7, "successful": 0.7,
    "profit": 0.7, "profitable": 0.7, "positive": 0.6, "optimistic": 0.7,
    "opportunity": 0.6, "potential": 0.3, "promising": 0.6, "hope": 0.5,
    "hopeful": 0.6, "confidence": 0.6, "confident": 0.6, "enthusiasm": 0.7,
    "enthusiastic": 0.7, "excitement": 0.7, "excited": 0.7, "happy": 0.6,
    "happiness": 0.6, "win": 0.7, "winning": 0.7, "victory": 0.7,
    "breakthrough": 0.8, "milestone": 0.7, "achievement": 0.7,
    "inflow": 0.7, "advance": 0.6, "advances": 0.6, "adoption": 0.7,
    "approved": 0.7, "approval": 0.7, "approve": 0.7, "viability": 0.6,
    "viable": 0.6, "momentum": 0.6, "catalyst": 0.6, "boost": 0.7,
    "could": 0.3, "reach": 0.4, "predicts": 0.4, "target": 0.5,
    "forecast": 0.4, "expected": 0.3,
}

# Generic price-movement phrasing.
PRICE_PATTERNS: dict[str, float] = {
    r"\b(?:plunge|dive|crash|dump|tumble|plummet)": -0.8,
    r"\b(?:drop|fall|sink|dip|decline|slide)s?\b": -0.7,
    r"\bdown\s+\d+": -0.7,
    r"\bdips?\s+(?:below|under|to)\s+[$]?\d": -0.7,
    r"\bsells?\s+off\b": -0.7,
    r"\blower\b": -0.6,
    r"\b(?:bears?|bearish)\b": -0.7,
    r"\b(?:outflow|losing streak|losses)\b": -0.7,
    r"\brecord\s+(?:outflow|low)": -0.8,
    r"\bworst\s+(?:day|week|month)": -0.8,
    r"\b(?:steady|stable|unchanged|flat)\b": 0.0,
    r"\bsideways\b": 0.0,
    r"\bconsolidat(?:e|ing|ion)\b": 0.0,
    r"\brange\s*bound\b": 0.0,
    r"\b(?:surge|soar|skyrocket|explode|jump|leap)": 0.8,
    r"\b(?:rise|climb|rally|gain)s?\b": 0.7,
    r"\bup\s+\d+": 0.7,
    r"\bhigh(?:er|est)?\b": 0.6,
    r"\btops?\s+[$]?\d": 0.7,
    r"\b(?:above|over|exceeds?)\s+[$]?\d": 0.7,
    r"\b(?:bulls?|bullish)\b": 0.7,
    r"\b(?:inflow|winning streak|gains)\b": 0.7,
    r"\brecord\s+(?:inflow|high)": 0.8,
    r"\bbest\s+(?:day|week|month)": 0.8,
}

# Headline phrasing that carries strong sentiment on its own.
HEADLINE_PATTERNS: dict[str, float] = {
    # ETF flows
    r"record\s+\$?\d+\s+billion\s+outflow": -0.9,
    r"etfs?\s+(?:hit|hits|hit by)": -0.8,
    r"etfs?\s+outflow": -0.8,
    r"fund\s+sheds": -0.8,
    r"losing streak": -0.8,
    # negative
    r"(?:bitcoin|btc|crypto)\s+(?:crash|plunge|dump)": -0.9,
    r"record\s+(?:outflow|low|loss)": -0.8,
    r"worst\s+(?:day|week|month|performance)": -0.8,
    r"loses?\s+\d+%": -0.8,
    r"down\s+\d+%": -0.8,
    r"sell(?:ing)?\s+(?:pressure|off)": -0.7,
    r"bear\s+market": -0.9,
    r"bubble\s+(?:burst|popping)": -0.9,
    r"warning|danger|risk|caution": -0.7,
    r"hack|scam|fraud|attack": -0.9,
    r"liquidation": -0.8,
    r"billion.*loss": -0.9,
    r"million.*loss": -0.8,
    r"rout": -0.8,
    r"wipe": -0.8,
    r"stolen": -0.9,
    r"theft": -0.9,
    r"extradited": -0.7,
    r"warn": -0.7,
    r"under\s+\$\d+[k]?": -0.6,
    r"below\s+\$\d+[k]?": -0.6,
    r"slides\s+under": -0.7,
    r"slides\s+below": -0.7,
    r"dips\s+below": -0.7,
    r"drops\s+below": -0.7,
    r"tipped\s+into\s+bear": -0.9,
    r"slipping\s+\d+%": -0.8,
    r"plunges\s+\d+%": -0.9,
    r"sinks\s+to": -0.7,
    r"drops\s+to": -0.7,
    r"falls\s+to": -0.7,
    r"slides\s+to": -0.7,
    r"erasing\s+gains": -0.7,
    r"wiping\s+\$\d+": -0.8,
    r"wipes\s+\$\d+": -0.8,
    r"billion\s+from": -0.7,
    r"losing\s+its\s+shine": -0.7,
    r"sours": -0.8,
    r"didn't\s+get": -0.6,
    r"fears\s+grow": -0.7,
    r"fear\s+crash": -0.9,
    r"slump\s+deepens": -0.8,
    r"worried": -0.7,
    r"investors\s+be\s+worried": -0.8,
    r"should\s+investors\s+be": -0.6,
    r"should\s+you\s+buy": -0.3,
    r"what's\s+behind": -0.5,
    r"why\s+is\s+crypto\s+crashing": -0.9,
    r"why\s+bitcoin": -0.5,
    r"why\s+there's\s+no": -0.6,
    r"historic\s+crypto\s+hack": -0.9,
    # positive
    r"(?:bitcoin|btc|crypto)\s+(?:surge|soar|rally)": 0.9,
    r"record\s+(?:inflow|high|gain)": 0.8,
    r"best\s+(?:day|week|month|performance)": 0.8,
    r"gains?\s+\d+%": 0.8,
    r"up\s+\d+%": 0.8,
    r"buy(?:ing)?\s+(?:pressure|opportunity)": 0.7,
    r"bull\s+market": 0.8,
    r"breakout|breakthrough": 0.8,
    r"optimis(?:m|tic)|positiv(?:e|ity)": 0.7,
    r"adopt(?:ion|ing|ed)|integration": 0.7,
    r"hasn't\s+peaked": 0.7,
    r"bullish\s+year": 0.8,
    r"buy\s+bitcoin": 0.6,
    r"solo\s+mining\s+viable": 0.6,
    r"buys?\s+\$\d+": 0.7,
    r"buys?\s+almost\s+\$\d+": 0.8,
    r"buys?\s+more": 0.7,
    r"snaps\s+up": 0.7,
    r"advances\s+bitcoin": 0.7,
    r"passes": 0.6,
    r"groundbreaking": 0.8,
    r"fuel\s+the\s+future": 0.8,
    r"rolls out": 0.4,
    r"fix for": 0.3,
    r"inheritance fix": 0.3,
    r"problem waiting": -0.5,
    r"key\s+metric\s+shows": 0.7,
    r"metric\s+shows": 0.6,
    r"what\s+if": 0.0,
    r"future\s+of": 0.5,
    r"better\s+cryptocurrency": 0.6,
    r"could\s+hit\s+\$?\d+k?": 0.7,
    r"price\s+target\s+\$?\d+k?": 0.6,
    r"predicts\s+\$?\d+k?": 0.6,
    r"forecast\s+\$?\d+k?": 0.6,
    r"expected\s+to\s+reach\s+\$?\d+k?": 0.7,
}

HIGH_VALUE_TOKENS = frozenset(
    {
        # positive
        "bullish", "rally", "surge", "soar", "gain", "climb", "jump", "rise", "recover", "breakthrough",
        "milestone", "adoption", "approval", "support", "launch", "partnership", "accept", "boost",
        "bullrun", "pump", "moon", "ath", "bottom", "accumulation", "breakout", "upturn", "uptrend",
        "institutional", "whale", "buy", "buying", "bought", "hodl", "hold", "holding", "growth",
        "record", "high", "invest", "upgrade", "successful", "success", "win", "winning",
        # negative
        "bearish", "crash", "plunge", "slump", "dive", "tumble", "fall", "sink", "drop", "decline",
        "selloff", "dump", "liquidation", "panic", "fear", "ban", "hack", "scam", "fraud", "attack",
        "breach", "theft", "steal", "exploit", "vulnerability", "risk", "warning", "threat", "concern",
        "crackdown", "regulate", "regulation", "comply", "illegal", "shutdown", "reject", "denial",
        "downtrend", "downturn", "bear", "sell", "selling", "sold", "capitulate", "surrender",
        "lower", "weak", "losses", "losing", "lost", "collapse", "breakdown", "bloodbath", "blood",
        # assets
        "btc", "eth", "xrp", "bnb", "doge", "sol", "ada", "dot", "link", "avax", "matic", "shib",
        "bitcoin", "ethereum", "ripple", "binance", "dogecoin", "solana", "cardano", "polkadot",
        "chainlink", "avalanche", "polygon", "shiba",
        # market structure
        "resistance", "volume", "momentum", "volatility", "liquidity", "trend", "reversal",
        "correction", "consolidation", "distribution", "fomo", "fud",
        # technical
        "halving", "mining", "staking", "defi", "nft", "token", "wallet", "exchange", "protocol",
        "smart", "contract", "blockchain", "ledger", "consensus", "node", "hash", "mempool",
    }
)

# Bigrams are joined with "_" after tokenization, so dollar amounts appear as price_<n>.
SIGNIFICANT_BIGRAMS = frozenset(
    {
        "all_time", "time_high", "bear_market", "bull_market", "bull_run",
        "price_crash", "price_surge", "market_crash", "market_rally", "price_correction",
        "panic_selling", "fear_uncertainty", "whale_activity", "retail_investors",
        "institutional_adoption", "bitcoin_halving", "sell_pressure", "buy_opportunity",
        # negative
        "bitcoin_plunges", "bitcoin_crashes", "bitcoin_tumbles", "bitcoin_sinks", "bitcoin_falls",
        "ethereum_plunges", "ethereum_crashes", "ethereum_tumbles", "ethereum_falls",
        "crypto_bloodbath", "crypto_crash", "crypto_plunge", "price_slump", "market_rout",
        "below_price_85", "below_price_90", "loses_price_800", "billion_loss", "wipes_price_800",
        "down_50%", "drops_20%", "falls_15%", "plunges_25%", "sinks_10%",
        "extreme_fear", "heavy_selling", "mass_liquidation", "market_fear",
        "trader_panic", "investor_fear", "liquidations_hit", "liquidation_cascade",
        "billion_liquidation", "million_liquidation",
        "outflow_record", "etf_outflows", "market_sentiment_dips",
        "sec_rejects", "government_bans", "regulatory_crackdown", "security_breach",
        "fraud_charges", "crypto_scam", "crypto_theft", "crypto_stolen", "hack_results",
        "support_weakens", "breaks_support", "bearish_divergence",
        "critical_juncture", "under_pressure", "further_downside", "losing_shine",
        # positive
        "bitcoin_surges", "bitcoin_rallies", "bitcoin_climbs", "bitcoin_jumps", "bitcoin_recovers",
        "ethereum_surges", "ethereum_rallies", "ethereum_climbs", "ethereum_jumps",
        "crypto_soars", "price_jump", "price_rally", "price_recovery",
        "market_surge", "market_recovery", "market_bounce",
        "above_price_100", "reaches_price_120", "gains_price_10", "billion_inflow", "adds_price_800",
        "up_25%", "gains_18%", "jumps_15%", "climbs_10%", "surges_20%",
        "bullish_sentiment", "strong_buying", "whale_accumulation",
        "market_confidence", "trader_optimism", "investor_interest", "buying_pressure",
        "inflows_record", "etf_approval", "massive_volume", "record_high",
        "etf_launch", "regulatory_approval", "adoption_grows", "major_partnership",
        "positive_outlook", "bullish_forecast", "acceptance_grows", "institutional_interest",
        "breaks_resistance", "forms_support", "bullish_divergence",
        "higher_lows", "golden_cross", "upward_trend", "price_discovery",
        # neutral or mixed
        "price_stabilizes", "bitcoin_steadies", "market_consolidates", "price_consolidation",
        "sideways_trading", "range_bound", "neutral_sentiment", "mixed_signals",
        "price_analysis", "market_analysis", "technical_indicators", "chart_patterns",
        "key_levels", "support_resistance", "trading_volume", "market_dynamics",
        "monthly_performance", "weekly_review", "daily_update", "current_levels",
        "report_suggests", "analysts_predict", "experts_say", "according_to",
        "study_shows", "data_indicates", "research_suggests", "survey_finds",
        "despite_market", "while_bitcoin", "although_prices", "even_as",
        "pays_off_but", "initially_but", "before_eventually", "mixed_results",
    }
)

# (text, class, repetitions) used to seed the Naive-Bayes counts.
PRIOR_KNOWLEDGE: tuple[tuple[str, str, int], ...] = (
    # positive price action
    ("bitcoin surges past $100K", "positive", 3),
    ("ethereum climbs to new heights", "positive", 3),
    ("bitcoin rallies amid strong buying", "positive", 3),
    ("crypto markets soar to record levels", "positive", 3),
    ("bitcoin breaks through resistance level", "positive", 2),
    ("bitcoin price skyrockets overnight", "positive", 3),
    ("crypto explodes higher on massive volume", "positive", 3),
    ("bitcoin bounces back sharply", "positive", 2),
    ("ethereum surges 15% in 24 hours", "positive", 3),
    # positive adoption
    ("major bank adopts bitcoin payments", "positive", 3),
    ("institutional investors pile into crypto", "positive", 3),
    ("new regulatory framework boosts crypto confidence", "positive", 3),
    ("bitcoin etf approval expected soon", "positive", 3),
    ("major retailer now accepts cryptocurrency", "positive", 2),
    ("country announces bitcoin as legal tender", "positive", 3),
    ("tech giant adds bitcoin to balance sheet", "positive", 3),
    ("crypto adoption rate accelerates globally", "positive", 2),
    # positive sentiment
    ("bull market gains momentum for bitcoin", "positive", 3),
    ("crypto sentiment turns extremely bullish", "positive", 3),
    ("bitcoin halving generates positive outlook", "positive", 2),
    ("analysts predict bitcoin will reach $150K", "positive", 2),
    ("trader confidence in crypto at all time high", "positive", 3),
    ("hodlers rewarded as bitcoin climbs", "positive", 2),
    ("bitcoin whales accumulating at current levels", "positive", 2),
    ("supply shock expected to drive bitcoin higher", "positive", 2),
    # negative price action
    ("bitcoin plunges below $85K", "negative", 3),
    ("ethereum crashes 20% in massive selloff", "negative", 3),
    ("bitcoin tumbles as selling pressure mounts", "negative", 3),
    ("crypto market collapses under heavy selling", "negative", 3),
    ("bitcoin breaks support triggering liquidations", "negative", 3),
    ("flash crash wipes billions from crypto market", "negative", 3),
    ("bitcoin sinks to multi-month lows", "negative", 2),
    ("ethereum tanks on heavy volume", "negative", 2),
    ("bitcoin in freefall as panic sets in", "negative", 3),
    # negative regulation and security
    ("major hack results in crypto theft", "negative", 3),
    ("regulator announces crypto crackdown", "negative", 3),
    ("government bans cryptocurrency trading", "negative", 3),
    ("sec rejects bitcoin etf proposals", "negative", 3),
    ("exchange freezes withdrawals amid concerns", "negative", 3),
    ("crypto ponzi scheme uncovered by authorities", "negative", 3),
    ("tax authority targets crypto investors", "negative", 2),
    ("major exploit drains defi protocol", "negative", 3),
    # negative sentiment
    ("fear grips crypto market as bitcoin slides", "negative", 3),
    ("analysts warn of further crypto downside", "negative", 2),
    ("bear market intensifies for bitcoin", "negative", 3),
    ("crypto investors capitulate amid losses", "negative", 3),
    ("market sentiment reaches extreme fear", "negative", 3),
    ("bitcoin miners selling holdings en masse", "negative", 2),
    ("bitcoin whales dumping at current levels", "negative", 2),
    ("panic selling accelerates crypto decline", "negative", 3),
    # neutral price action
    ("bitcoin price steadies around $90K", "neutral", 2),
    ("crypto markets trade sideways", "neutral", 2),
    ("bitcoin consolidates after recent move", "neutral", 2),
    ("ethereum hovers near previous close", "neutral", 2),
    ("bitcoin remains range-bound this week", "neutral", 2),
    ("crypto volatility decreases as markets calm", "neutral", 2),
    ("bitcoin trades in tight range at $88K", "neutral", 2),
    # neutral news
    ("bitcoin network undergoes scheduled update", "neutral", 2),
    ("analysts offer mixed outlook for crypto", "neutral", 2),
    ("ethereum developers announce testnet progress", "neutral", 2),
    ("crypto conference highlights industry developments", "neutral", 2),
    ("report examines bitcoin mining efficiency", "neutral", 2),
    ("research paper analyzes blockchain performance", "neutral", 2),
    # ETF outflows
    ("bitcoin etfs hit by record $1 billion outflow", "negative", 3),
    ("etf outflows reach record levels as bitcoin falls", "negative", 3),
    ("bitcoin fund sheds $420M as losing streak continues", "negative", 3),
    ("record etf outflows signal waning interest in crypto", "negative", 3),
    ("investors exit bitcoin etfs amid market weakness", "negative", 3),
    ("bitcoin etf sees massive withdrawals in single day", "negative", 3),
    ("crypto etfs hit by significant selling pressure", "negative", 3),
    # real headlines
    ("Bitcoin ETFs Are Hit by a Record $1 Billion Outflow in One Day", "negative", 4),
    ("BlackRock Bitcoin fund sheds $420M as ETF losing streak hits day 7", "negative", 4),
    ("Corporate Bitcoin Bets Pay Off at First but Lead To Long-Term Underperformance", "negative", 3),
    ("Should You Buy Bitcoin While It's Under $90,000?", "negative", 3),
    ("Since Trump took office, stocks are down and bitcoin has plunged", "negative", 4),
    ("Bitcoin Price Plunges To Almost $82,000 As Political Momentum Stalls", "negative", 4),
    ("Bitcoin has tipped into a bear market, slipping 23% from January highs", "negative", 4),
    ("Bitcoin slides under $90,000, erasing some of the gains", "negative", 3),
    ("Bitcoin Dips Below $90K Following Historic Crypto Hack", "negative", 4),
    ("Block's Bitkey rolls out bitcoin inheritance fix for multibillion-dollar problem", "neutral", 2),
    ("Key metric shows Bitcoin hasn't peaked, has bullish year ahead", "positive", 3),
    ("Is Bitcoin solo mining viable in 2025?", "neutral", 2),
)
