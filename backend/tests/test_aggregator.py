import pytest

from satsforex.aggregation.aggregator import aggregate, consolidate_gdp, price_points
from satsforex.aggregation.currencies import (
    currency_for_country,
    currency_name,
    economy_for_country,
    is_eurozone_country,
)
from satsforex.config.settings import AggregationSettings
from satsforex.errors import AggregationError
from satsforex.schemas.rankings import GdpRecord

PRICES = {"USD": 50_000.0, "EUR": 45_000.0, "JPY": 7_500_000.0, "XAU": 25.0, "XAG": 2_000.0}


def gdp(*rows: tuple[str, float]) -> list[GdpRecord]:
    return [
        GdpRecord(country_code=code, year="2024", value_billions_usd=value)
        for code, value in rows
    ]


def entity(result, code: str):
    return next(item for item in result.entities if item.code == code)


def test_price_points_drop_non_positive_quotes() -> None:
    assert price_points({"usd": 50_000, "jpy": 0, "eur": -1, "gbp": float("nan"), "chf": None}) == {
        "USD": 50_000.0
    }


def test_eurozone_members_sum_into_euro() -> None:
    totals = consolidate_gdp(gdp(("DEU", 10.0), ("FRA", 20.0), ("ITA", 5.0)))
    assert totals == {"EUR": 35.0}

    result = aggregate(PRICES, gdp(("DEU", 10.0), ("FRA", 20.0), ("ITA", 5.0)), AggregationSettings())
    assert entity(result, "EUR").economic_size == pytest.approx(35e9)
    assert [item.code for item in result.entities].count("EUR") == 1


def test_alternate_codes_count_once() -> None:
    assert consolidate_gdp(gdp(("USA", 100.0), ("US", 90.0))) == {"USD": 100.0}
    assert consolidate_gdp(gdp(("US", 90.0), ("USA", 100.0))) == {"USD": 100.0}
    assert consolidate_gdp(gdp(("US", 90.0))) == {"USD": 90.0}


def test_euro_area_row_only_used_without_members() -> None:
    assert consolidate_gdp(gdp(("EMU", 50.0))) == {"EUR": 50.0}
    assert consolidate_gdp(gdp(("EMU", 50.0), ("DEU", 10.0))) == {"EUR": 10.0}


def test_unmapped_countries_are_dropped() -> None:
    assert consolidate_gdp(gdp(("IRQ", 264.15), ("JPN", 4070.09))) == {"JPY": 4070.09}


def test_missing_fiat_quote_is_a_diagnostic() -> None:
    constants = AggregationSettings(extra_country_currencies={"XYZ": "XYZ"})

    result = aggregate(PRICES, gdp(("USA", 100.0), ("XYZ", 500.0)), constants)

    assert "XYZ" not in {item.code for item in result.entities}
    assert [(d.code, d.entity) for d in result.diagnostics] == [("missing_fiat_quote", "XYZ")]


def test_fiat_list_is_truncated_to_top_economies() -> None:
    codes = [f"C{index:02d}" for index in range(45)]
    constants = AggregationSettings(extra_country_currencies={code: code for code in codes})
    prices = {"USD": 50_000.0, **{code: 1_000.0 for code in codes}}
    records = gdp(*[(code, float(index + 1)) for index, code in enumerate(codes)])

    result = aggregate(prices, records, constants)

    fiat = [item for item in result.entities if item.type == "fiat"]
    assert len(fiat) == 30
    assert {item.code for item in fiat} == set(codes[15:])


def test_ranks_follow_economic_size() -> None:
    result = aggregate(
        PRICES,
        gdp(("USA", 29167.78), ("JPN", 4070.09), ("DEU", 4710.03), ("FRA", 3174.10)),
        AggregationSettings(),
        gdp_year="2024",
    )

    sizes = [item.economic_size for item in result.entities]
    assert [item.rank for item in result.entities] == list(range(1, len(result.entities) + 1))
    assert sizes == sorted(sizes, reverse=True)
    assert result.gdp_year == "2024"
    assert result.reference_price == 50_000.0


def test_sats_per_unit_times_value_of_one_sat_is_one() -> None:
    result = aggregate(PRICES, gdp(("USA", 100.0), ("JPN", 50.0), ("DEU", 10.0)), AggregationSettings())

    for item in result.entities:
        assert item.sats_per_unit * item.value_of_one_sat == pytest.approx(1.0)


def test_bitcoin_and_metal_rows() -> None:
    result = aggregate(PRICES, gdp(("USA", 100.0)), AggregationSettings())

    btc = entity(result, "BTC")
    gold = entity(result, "XAU")
    usd = entity(result, "USD")

    assert btc.type == "crypto"
    assert btc.sats_per_unit == pytest.approx(100_000_000)
    assert btc.value_of_one_sat == pytest.approx(1e-8)
    assert btc.economic_size == pytest.approx(50_000.0 * 19_500_000)
    assert gold.name == "Gold"
    assert gold.economic_size == pytest.approx(215_000 * 32_150.746 * 2_000.0)
    assert gold.sats_per_unit == pytest.approx(4_000_000)
    assert usd.sats_per_unit == pytest.approx(2_000)
    assert usd.economic_size == pytest.approx(100e9)


def test_metal_without_quote_is_omitted() -> None:
    prices = {key: value for key, value in PRICES.items() if key != "XAG"}

    result = aggregate(prices, gdp(("USA", 100.0)), AggregationSettings())

    assert "XAG" not in {item.code for item in result.entities}
    assert [(d.code, d.entity) for d in result.diagnostics] == [("missing_metal_quote", "XAG")]


def test_missing_gdp_ranks_crypto_and_metals_only() -> None:
    result = aggregate(PRICES, None, AggregationSettings())

    assert {item.type for item in result.entities} == {"crypto", "metal"}
    assert [d.code for d in result.diagnostics] == ["gdp_unavailable"]


def test_missing_gdp_raises_when_required() -> None:
    with pytest.raises(AggregationError):
        aggregate(PRICES, None, AggregationSettings(require_gdp=True))


def test_missing_reference_price_raises() -> None:
    with pytest.raises(AggregationError):
        aggregate({"EUR": 45_000.0}, gdp(("USA", 100.0)), AggregationSettings())


def test_country_lookups() -> None:
    assert currency_for_country(" deu ") == "EUR"
    assert currency_for_country("GB") == "GBP"
    assert currency_for_country("IRQ") is None
    assert economy_for_country("US") == "USA"
    assert is_eurozone_country("fra") is True
    assert is_eurozone_country("GBR") is False
    assert currency_name("xau") == "Gold"
    assert currency_name("ZZZ") == "ZZZ"
