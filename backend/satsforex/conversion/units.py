"""Conversions between satoshis, BTC and fiat amounts.

Every function taking a price treats a missing, non-finite or non-positive
price as "no quote" and returns 0.0 instead of raising, so a single absent
upstream price cannot break a ranking cycle.
"""
from __future__ import annotations

import math


SATS_PER_BTC = 100_000_000


def _valid_price(fiat_per_btc: float | None) -> bool:
    if fiat_per_btc is None:
        return False
    try:
        value = float(fiat_per_btc)
    except (TypeError, ValueError):
        return False
    return math.isfinite(value) and value > 0


def sats_to_btc(sats: float) -> float:
    return sats / SATS_PER_BTC


def btc_to_sats(btc: float) -> float:
    return btc * SATS_PER_BTC


def fiat_to_sats(fiat_amount: float, fiat_per_btc: float | None) -> float:
    if not _valid_price(fiat_per_btc):
        return 0.0
    return (fiat_amount / float(fiat_per_btc)) * SATS_PER_BTC


def sats_to_fiat(sats: float, fiat_per_btc: float | None) -> float:
    if not _valid_price(fiat_per_btc):
        return 0.0
    return sats_to_btc(sats) * float(fiat_per_btc)


def fiat_to_btc(fiat_amount: float, fiat_per_btc: float | None) -> float:
    if not _valid_price(fiat_per_btc):
        return 0.0
    return fiat_amount / float(fiat_per_btc)


def btc_to_fiat(btc: float, fiat_per_btc: float | None) -> float:
    if not _valid_price(fiat_per_btc):
        return 0.0
    return btc * float(fiat_per_btc)


def sats_per_unit(fiat_per_btc: float | None) -> float:
    """Satoshis bought by one unit of the quote currency."""
    return fiat_to_sats(1.0, fiat_per_btc)


def value_of_one_sat(fiat_per_btc: float | None) -> float:
    """Quote-currency value of a single satoshi."""
    return sats_to_fiat(1.0, fiat_per_btc)
