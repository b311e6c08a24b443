from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    bigram_inclusion_probability: float = Field(default=0.7, alias="BIGRAM_INCLUSION_PROBABILITY")
    skip_bigram_inclusion_probability: float = Field(default=0.5, alias="SKIP_BIGRAM_INCLUSION_PROBABILITY")
    naive_bayes_weight: float = Field(default=0.2, alias="NAIVE_BAYES_WEIGHT")
    headline_top_n: int = Field(default=25, alias="HEADLINE_TOP_N")
    recency_decay: float = Field(default=0.05, alias="RECENCY_DECAY")

    crash_percentile: float = Field(default=0.01, alias="CRASH_PERCENTILE")
    pump_percentile: float = Field(default=0.99, alias="PUMP_PERCENTILE")
    default_crash_threshold: float = Field(default=-0.05, alias="DEFAULT_CRASH_THRESHOLD")
    default_pump_threshold: float = Field(default=0.05, alias="DEFAULT_PUMP_THRESHOLD")

    max_simulation_paths: int = Field(default=10_000, alias="MAX_SIMULATION_PATHS")
    forecast_simulation_paths: int = Field(default=5_000, alias="FORECAST_SIMULATION_PATHS")
    forecast_path_sample: int = Field(default=100, alias="FORECAST_PATH_SAMPLE")

    coinmetrics_csv_url: str = Field(
        default="https://raw.githubusercontent.com/coinmetrics/data/master/csv/btc.csv",
        alias="COINMETRICS_CSV_URL",
    )
    rss2json_url: str = Field(default="https://api.rss2json.com/v1/api.json", alias="RSS2JSON_URL")
    news_queries: list[str] = Field(
        default=["Bitcoin", "Cryptocurrency", "Crypto Market", "Bitcoin Price"],
        alias="NEWS_QUERIES",
    )
    http_timeout_seconds: float = Field(default=30.0, alias="HTTP_TIMEOUT_SECONDS")

    random_seed: int | None = Field(default=None, alias="RANDOM_SEED")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
