from __future__ import annotations

import datetime
import math
from typing import Any, Literal
from urllib.parse import urlencode

from satsforex.config.settings import FeedSettings
from satsforex.errors import PayloadError
from satsforex.schemas.rankings import GdpRecord


SOURCE = "imf"
_COUNTRIES_PATH = "/countries"

ResponseShape = Literal["datasets", "values"]


def default_year(today: datetime.date | None = None) -> str:
    current = today or datetime.date.today()
    return str(current.year - 1)


def resolve_params(params: dict[str, str] | None) -> dict[str, str]:
    resolved = dict(params or {})
    resolved.setdefault("periods", default_year())
    return resolved


def build_url(feed_settings: FeedSettings, params: dict[str, str] | None = None) -> str:
    base_url = feed_settings.imf_base_url.rstrip("/")
    query = resolve_params(params)
    return f"{base_url}/{feed_settings.imf_indicator}?{urlencode(query)}"


def build_countries_url(feed_settings: FeedSettings) -> str:
    return f"{feed_settings.imf_base_url.rstrip('/')}{_COUNTRIES_PATH}"


def build_headers(feed_settings: FeedSettings) -> dict[str, str]:
    return {"User-Agent": feed_settings.user_agent}


def detect_shape(payload: Any) -> ResponseShape:
    if isinstance(payload, dict):
        if isinstance(payload.get("datasets"), dict):
            return "datasets"
        if isinstance(payload.get("values"), dict):
            return "values"
    raise PayloadError("GDP response has neither a 'datasets' nor a 'values' table")


def _country_table(container: dict, indicator: str) -> dict:
    table = container.get(indicator)
    if isinstance(table, dict):
        return table
    # Some responses put the country rows directly under the shape key.
    return container


def _as_gdp_value(raw: Any) -> float | None:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return None
    try:
        value = float(raw)
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def decode(payload: Any, params: dict[str, str] | None = None, indicator: str = "NGDPD") -> dict[str, dict]:
    """Decode either known NGDPD response shape into ``{code: {"label", "gdp"}}``."""
    year = resolve_params(params)["periods"]
    shape = detect_shape(payload)
    table = _country_table(payload[shape], indicator)

    rows: dict[str, dict] = {}
    for country_code, year_data in table.items():
        if not isinstance(country_code, str) or not isinstance(year_data, dict):
            continue
        value = _as_gdp_value(year_data.get(year))
        if value is None:
            continue
        rows[country_code] = {"label": country_code, "gdp": value}
    return rows


def decode_labels(payload: Any) -> dict[str, str]:
    if not isinstance(payload, dict) or not isinstance(payload.get("countries"), dict):
        raise PayloadError("countries response has no 'countries' object")
    labels: dict[str, str] = {}
    for code, details in payload["countries"].items():
        if isinstance(details, dict) and isinstance(details.get("label"), str):
            labels[code] = details["label"]
    return labels


def apply_labels(rows: dict[str, dict], labels: dict[str, str]) -> dict[str, dict]:
    return {
        code: {**row, "label": labels.get(code, row.get("label") or code)}
        for code, row in rows.items()
    }


def records_from_table(data: dict[str, Any], year: str | None = None) -> list[GdpRecord]:
    """Read a stored GDP table.

    Accepts the ``{code: {"label", "gdp"}}`` rows written after a live fetch
    and the flat ``{code: value}`` table used to prime the snapshot.
    """
    records: list[GdpRecord] = []
    for code, row in data.items():
        label = None
        raw = row
        if isinstance(row, dict):
            raw = row.get("gdp")
            label = row.get("label") if isinstance(row.get("label"), str) else None
        value = _as_gdp_value(raw)
        if value is None:
            continue
        records.append(
            GdpRecord(country_code=code, year=year, value_billions_usd=value, label=label)
        )
    return records
