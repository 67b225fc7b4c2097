from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelayStrategy(BaseModel):
    name: str
    # "{url}" is replaced by the target URL (percent-encoded when quote_target is set).
    url_template: str = "{url}"
    quote_target: bool = True
    # JSON envelope field holding the relayed body, e.g. allorigins' "contents".
    unwrap_field: str | None = None
    forward_headers: bool = False


def _default_strategies() -> List[RelayStrategy]:
    return [
        RelayStrategy(name="direct", url_template="{url}", quote_target=False, forward_headers=True),
        RelayStrategy(name="allorigins_raw", url_template="https://api.allorigins.win/raw?url={url}"),
        RelayStrategy(
            name="allorigins_get",
            url_template="https://api.allorigins.win/get?url={url}",
            unwrap_field="contents",
        ),
    ]


class FeedSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SATSFOREX_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_pro_base_url: str = "https://pro-api.coingecko.com/api/v3"
    coingecko_api_key: str | None = None
    imf_base_url: str = "https://www.imf.org/external/datamapper/api/v1"
    imf_indicator: str = "NGDPD"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )
    attempt_timeout_seconds: float = 8.0
    chain_timeout_seconds: float = 15.0
    min_gdp_countries: int = 20
    imf_fetch_labels: bool = True
    price_currencies: List[str] = Field(
        default_factory=lambda: [
            "usd", "eur", "jpy", "gbp", "cny", "inr", "cad", "aud", "brl", "rub",
            "krw", "sgd", "chf", "hkd", "sek", "mxn", "zar", "nok", "nzd", "thb",
            "try", "pln", "dkk", "idr", "php", "myr", "czk", "clp", "ars", "ils",
            "cop", "sar", "aed", "twd", "ron", "huf", "vnd", "pkr", "ngn",
            "xau", "xag",
        ]
    )
    history_days: int = 365
    history_currencies: List[str] = Field(
        default_factory=lambda: [
            "usd", "aed", "ars", "aud", "bdt", "bhd", "bmd", "brl", "cad", "chf", "clp", "cny",
            "czk", "dkk", "eur", "gbp", "gel", "hkd", "huf", "idr", "ils", "inr", "jpy", "krw",
            "kwd", "lkr", "mmk", "mxn", "myr", "ngn", "nok", "nzd", "php", "pkr", "pln", "rub",
            "sar", "sek", "sgd", "thb", "try", "twd", "uah", "vef", "vnd", "zar", "xdr", "xag",
            "xau",
        ]
    )
    strategies: List[RelayStrategy] = Field(default_factory=_default_strategies)


class SnapshotSettings(BaseModel):
    directory: str = "cache"
    price_stale_after_seconds: int = 24 * 60 * 60
    gdp_stale_after_seconds: int = 7 * 24 * 60 * 60


class MetalSettings(BaseModel):
    code: str
    name: str
    supply_metric_tons: float


class AggregationSettings(BaseModel):
    reference_fiat: str = "USD"
    btc_circulating_supply: float = 19_500_000
    troy_ounces_per_metric_ton: float = 32_150.746
    top_fiat_limit: int = 30
    require_gdp: bool = False
    # Extra country -> currency mappings on top of the built-in table.
    extra_country_currencies: dict[str, str] = Field(default_factory=dict)
    metals: List[MetalSettings] = Field(
        default_factory=lambda: [
            MetalSettings(code="XAU", name="Gold", supply_metric_tons=215_000),
            MetalSettings(code="XAG", name="Silver", supply_metric_tons=1_800_000),
        ]
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SATSFOREX_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "SATSFOREX_REDIS_URL"),
    )
    refresh_queue_name: str = Field(
        default="refresh",
        validation_alias=AliasChoices("REFRESH_QUEUE_NAME", "SATSFOREX_REFRESH_QUEUE_NAME"),
    )
    ranking_cache_key: str = "satsforex:rankings"
    ranking_cache_ttl_seconds: int = 60
    log_level: str = "INFO"
    log_json: bool = True

    feeds: FeedSettings = Field(default_factory=FeedSettings)
    snapshots: SnapshotSettings = Field(default_factory=SnapshotSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)


settings = Settings()
