from satsforex.conversion.formatting import (
    format_btc,
    format_compact,
    format_fiat,
    format_number,
    format_sat_value,
    format_sats,
    format_sats_per_unit,
)


def test_format_number_groups_thousands() -> None:
    assert format_number(1234.5) == "1,234.5"
    assert format_number(1_000_000) == "1,000,000"


def test_format_number_uses_exponent_for_tiny_values() -> None:
    assert format_number(0.0000001) == "1.00e-7"
    assert format_number(0.0000005) == "5.00e-7"
    assert format_number(-2.5e-12, 1) == "-2.5e-12"


def test_format_number_handles_nan() -> None:
    assert format_number(float("nan")) == "0"


def test_format_btc_and_sats() -> None:
    assert format_btc(0.5) == "0.5"
    assert format_btc(0.00012345) == "0.00012345"
    assert format_sats(1500) == "1,500"


def test_format_fiat_known_and_unknown_currency() -> None:
    assert format_fiat(1234.5, "usd") == "$1,234.50"
    assert format_fiat(1, "ZZZ") == "ZZZ 1"


def test_format_compact_suffixes() -> None:
    assert format_compact(0) == "0"
    assert format_compact(1.5e12) == "1.50T"
    assert format_compact(2_500_000_000) == "2.50B"
    assert format_compact(3_200_000) == "3.20M"
    assert format_compact(4_500) == "4.50K"
    assert format_compact(12) == "12.00"


def test_format_sats_per_unit_keeps_significant_figures() -> None:
    assert format_sats_per_unit(None) == "N/A"
    assert format_sats_per_unit(0) == "N/A"
    assert format_sats_per_unit(2345.0) == "2,345"
    assert format_sats_per_unit(123.45) == "123.5"
    assert format_sats_per_unit(12.346) == "12.35"
    assert format_sats_per_unit(1.5) == "1.500"
    assert format_sats_per_unit(0.00123) == "0.001230"


def test_format_sat_value() -> None:
    assert format_sat_value(None) == "N/A"
    assert format_sat_value(0.0006) == "0.0006000000"
