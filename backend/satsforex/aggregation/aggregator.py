from __future__ import annotations

import math
from typing import Any, Iterable

import structlog

from satsforex.aggregation.currencies import (
    COUNTRY_TO_CURRENCY,
    COUNTRY_TO_ECONOMY,
    currency_name,
    is_aggregate_economy,
)
from satsforex.config.settings import AggregationSettings, settings
from satsforex.conversion import units
from satsforex.errors import AggregationError
from satsforex.schemas.rankings import (
    AggregationResult,
    Diagnostic,
    EntityType,
    GdpRecord,
    PricePoint,
    RankedEntity,
)

logger = structlog.get_logger()

BILLION = 1_000_000_000
BASE_ASSET_CODE = "BTC"


def price_points(raw: dict[str, Any]) -> dict[str, float]:
    """Canonicalise quote codes and drop anything that is not a positive price."""
    points: dict[str, float] = {}
    for code, value in raw.items():
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
        point = PricePoint(code=code, price=price)
        points[point.code] = point.price
    return points


def consolidate_gdp(
    records: Iterable[GdpRecord],
    extra_mappings: dict[str, str] | None = None,
) -> dict[str, float]:
    """Sum GDP (billions of USD) per currency.

    Alternate codes of one economy count once, preferring the row filed under
    the economy's own code. Currency unions sum their member economies; an
    aggregate row (e.g. the euro area) is only used when no member reported.
    """
    extra = {code.strip().upper(): currency.strip().upper() for code, currency in (extra_mappings or {}).items()}

    per_economy: dict[str, tuple[str, float, bool]] = {}
    unmapped: list[str] = []
    for record in records:
        code = record.country_code.strip().upper()
        currency = extra.get(code) or COUNTRY_TO_CURRENCY.get(code)
        if currency is None:
            unmapped.append(code)
            continue
        economy = code if code in extra else COUNTRY_TO_ECONOMY.get(code, code)
        canonical = code == economy
        existing = per_economy.get(economy)
        if existing is not None and (existing[2] or not canonical):
            continue
        per_economy[economy] = (currency, record.value_billions_usd, canonical)

    if unmapped:
        logger.debug("gdp_countries_unmapped", count=len(unmapped))

    totals: dict[str, float] = {}
    aggregates: dict[str, float] = {}
    for economy, (currency, value, _) in per_economy.items():
        if is_aggregate_economy(economy):
            aggregates[currency] = value
            continue
        totals[currency] = totals.get(currency, 0.0) + value
    for currency, value in aggregates.items():
        totals.setdefault(currency, value)
    return totals


def _entity(code: str, name: str, economic_size: float, quote: float, entity_type: EntityType) -> RankedEntity:
    return RankedEntity(
        code=code,
        name=name,
        economic_size=economic_size,
        sats_per_unit=units.sats_per_unit(quote),
        value_of_one_sat=units.value_of_one_sat(quote),
        type=entity_type,
    )


def aggregate(
    prices: dict[str, Any],
    gdp: Iterable[GdpRecord] | None,
    constants: AggregationSettings | None = None,
    gdp_year: str | None = None,
) -> AggregationResult:
    constants = constants or settings.aggregation
    quotes = price_points(prices)
    diagnostics: list[Diagnostic] = []

    reference = constants.reference_fiat.strip().upper()
    reference_price = quotes.get(reference)
    if reference_price is None:
        raise AggregationError(f"No Bitcoin price in {reference}; cannot rank.")

    # The base asset is quoted against itself (1 BTC per BTC).
    entities: list[RankedEntity] = [
        _entity(
            BASE_ASSET_CODE,
            currency_name(BASE_ASSET_CODE),
            reference_price * constants.btc_circulating_supply,
            1.0,
            "crypto",
        )
    ]

    metal_codes: set[str] = set()
    for metal in constants.metals:
        code = metal.code.strip().upper()
        metal_codes.add(code)
        btc_in_metal = quotes.get(code)
        if btc_in_metal is None:
            diagnostics.append(
                Diagnostic(
                    code="missing_metal_quote",
                    entity=code,
                    message=f"No Bitcoin price available for {code}",
                )
            )
            continue
        fiat_price = reference_price / btc_in_metal
        economic_size = metal.supply_metric_tons * constants.troy_ounces_per_metric_ton * fiat_price
        entities.append(_entity(code, metal.name, economic_size, btc_in_metal, "metal"))

    fiat_entities: list[RankedEntity] = []
    if gdp is None:
        if constants.require_gdp:
            raise AggregationError("GDP data unavailable; fiat ranking required.")
        diagnostics.append(
            Diagnostic(
                code="gdp_unavailable",
                entity="GDP",
                message="GDP data unavailable; ranking crypto and metals only",
            )
        )
    else:
        gdp_by_currency = consolidate_gdp(gdp, constants.extra_country_currencies)
        for currency, gdp_billions in gdp_by_currency.items():
            if currency == BASE_ASSET_CODE or currency in metal_codes:
                continue
            quote = quotes.get(currency)
            if quote is None:
                diagnostics.append(
                    Diagnostic(
                        code="missing_fiat_quote",
                        entity=currency,
                        message=f"No Bitcoin price available for {currency}",
                    )
                )
                continue
            fiat_entities.append(
                _entity(currency, currency_name(currency), gdp_billions * BILLION, quote, "fiat")
            )

    # Truncate to the top economies before merging with crypto and metals.
    fiat_entities.sort(key=lambda entity: entity.economic_size, reverse=True)
    entities.extend(fiat_entities[: max(constants.top_fiat_limit, 0)])

    entities.sort(key=lambda entity: entity.economic_size, reverse=True)
    ranked = [
        entity.model_copy(update={"rank": index + 1})
        for index, entity in enumerate(entities)
    ]

    if diagnostics:
        logger.info(
            "aggregation_diagnostics",
            count=len(diagnostics),
            entities=[diagnostic.entity for diagnostic in diagnostics],
        )

    return AggregationResult(
        entities=ranked,
        diagnostics=diagnostics,
        reference_fiat=reference,
        reference_price=reference_price,
        gdp_year=gdp_year,
    )
