from __future__ import annotations

import math

from babel.core import UnknownLocaleError
from babel.numbers import (
    UnknownCurrencyError,
    format_currency,
    format_decimal,
    validate_currency,
)


DEFAULT_LOCALE = "en_US"
EXPONENTIAL_BELOW = 1e-6


def _decimal_pattern(decimals: int) -> str:
    if decimals <= 0:
        return "#,##0"
    return "#,##0." + "#" * decimals


def format_number(value: float, decimals: int = 2, locale: str = DEFAULT_LOCALE) -> str:
    if value is None or math.isnan(value):
        return "0"
    if value != 0 and abs(value) < EXPONENTIAL_BELOW:
        mantissa, exponent = f"{value:.{decimals}e}".split("e")
        return f"{mantissa}e{int(exponent)}"
    return format_decimal(value, format=_decimal_pattern(decimals), locale=locale)


def format_btc(btc: float, locale: str = DEFAULT_LOCALE) -> str:
    return format_number(btc, 8, locale)


def format_sats(sats: float, locale: str = DEFAULT_LOCALE) -> str:
    return format_number(sats, 0, locale)


def format_fiat(amount: float, currency_code: str, locale: str = DEFAULT_LOCALE) -> str:
    code = currency_code.strip().upper()
    try:
        validate_currency(code)
        return format_currency(
            amount,
            code,
            format="¤#,##0.00",
            locale=locale,
            currency_digits=False,
        )
    except (UnknownCurrencyError, UnknownLocaleError, ValueError):
        return f"{code} {format_number(amount, 2, DEFAULT_LOCALE)}"


_COMPACT_STEPS = ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K"))


def format_compact(value: float, decimals: int = 2) -> str:
    if value == 0:
        return "0"
    for threshold, suffix in _COMPACT_STEPS:
        if value >= threshold:
            return f"{value / threshold:.{decimals}f}{suffix}"
    return f"{value:.{decimals}f}"


def format_sats_per_unit(value: float | None, locale: str = DEFAULT_LOCALE) -> str:
    """Render with at least four significant figures; N/A when unknown."""
    if value is None or value == 0 or math.isnan(value):
        return "N/A"
    if value >= 1000:
        return format_decimal(value, format="#,##0", locale=locale)
    if value >= 100:
        return f"{value:.1f}"
    if value >= 10:
        return f"{value:.2f}"
    if value >= 1:
        return f"{value:.3f}"

    decimal_places = 4
    scaled = value
    while scaled < 0.1 and decimal_places < 10:
        scaled *= 10
        decimal_places += 1
    return f"{value:.{decimal_places}f}"


def format_sat_value(value: float | None) -> str:
    if value is None or value == 0:
        return "N/A"
    return f"{value:.10f}"
