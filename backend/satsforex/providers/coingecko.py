from __future__ import annotations

import math
from typing import Any
from urllib.parse import urlencode

from satsforex.config.settings import FeedSettings
from satsforex.errors import PayloadError


SOURCE = "coingecko"
_SIMPLE_PRICE_PATH = "/simple/price"
_COIN_ID = "bitcoin"
_MARKET_CHART_PATH = f"/coins/{_COIN_ID}/market_chart"


def build_url(feed_settings: FeedSettings, params: dict[str, str] | None = None) -> str:
    currencies = ",".join(code.lower() for code in feed_settings.price_currencies)
    query = {"ids": _COIN_ID, "vs_currencies": currencies}
    if params:
        query.update(params)
    base_url = (
        feed_settings.coingecko_pro_base_url
        if feed_settings.coingecko_api_key
        else feed_settings.coingecko_base_url
    )
    return f"{base_url.rstrip('/')}{_SIMPLE_PRICE_PATH}?{urlencode(query, safe=',')}"


def build_headers(feed_settings: FeedSettings) -> dict[str, str]:
    headers = {"User-Agent": feed_settings.user_agent}
    if feed_settings.coingecko_api_key:
        headers["x-cg-pro-api-key"] = feed_settings.coingecko_api_key
    return headers


def decode(payload: Any, params: dict[str, str] | None = None) -> dict[str, float]:
    """Flatten ``{"bitcoin": {code: price}}`` into ``{CODE: price}``.

    Quotes that are not positive finite numbers are dropped; an absent price
    is never represented as zero.
    """
    if not isinstance(payload, dict):
        raise PayloadError("price response is not an object")
    quotes = payload.get(_COIN_ID)
    if not isinstance(quotes, dict):
        raise PayloadError(f"price response has no '{_COIN_ID}' object")

    prices: dict[str, float] = {}
    for code, value in quotes.items():
        if not isinstance(code, str) or isinstance(value, bool):
            continue
        if not isinstance(value, (int, float)):
            continue
        try:
            price = float(value)
        except OverflowError:
            continue
        if not math.isfinite(price) or price <= 0:
            continue
        prices[code.strip().upper()] = price
    return prices


def is_supported_currency(feed_settings: FeedSettings, currency: str) -> bool:
    return currency.strip().lower() in {code.lower() for code in feed_settings.history_currencies}


def build_history_url(feed_settings: FeedSettings, currency: str, days: int | None = None) -> str:
    query = {
        "vs_currency": currency.strip().lower(),
        "days": str(days if days is not None else feed_settings.history_days),
        "precision": "full",
    }
    base_url = (
        feed_settings.coingecko_pro_base_url
        if feed_settings.coingecko_api_key
        else feed_settings.coingecko_base_url
    )
    return f"{base_url.rstrip('/')}{_MARKET_CHART_PATH}?{urlencode(query)}"


def decode_history(payload: Any) -> list[tuple[int, float]]:
    """Read ``{"prices": [[epoch_ms, price], ...]}`` into ordered pairs.

    Malformed or non-positive points are skipped.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("prices"), list):
        raise PayloadError("market chart response has no 'prices' list")

    points: list[tuple[int, float]] = []
    for entry in payload["prices"]:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            continue
        timestamp, value = entry[0], entry[1]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        try:
            price = float(value)
            moment = int(timestamp)
        except (OverflowError, ValueError):
            continue
        if not math.isfinite(price) or price <= 0:
            continue
        points.append((moment, price))
    points.sort(key=lambda point: point[0])
    return points
