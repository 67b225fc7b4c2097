from __future__ import annotations

import time
from http.client import HTTPException
from typing import Any, Callable

import structlog

from satsforex.config.settings import FeedSettings, settings
from satsforex.errors import PayloadError
from satsforex.providers import coingecko, imf
from satsforex.providers.transport import (
    Opener,
    build_request,
    classify_error,
    decode_body,
    default_opener,
    describe_error,
    render_url,
)
from satsforex.schemas.feeds import (
    AttemptRecord,
    Domain,
    FetchFailure,
    PriceHistory,
    PriceHistoryPoint,
    ValidatedPayload,
)
from satsforex.validation.validator import validate_gdp_data, validate_price_data

logger = structlog.get_logger()


class ChainResult:
    def __init__(self) -> None:
        self.data: Any = None
        self.strategy: str | None = None
        self.attempts: list[AttemptRecord] = []
        self.last_error: str | None = None

    @property
    def ok(self) -> bool:
        return self.strategy is not None


class SourceClient:
    """Fetches one feed through an ordered list of transport strategies.

    Every strategy failure (timeout, HTTP status, unparsable or invalid body)
    is soft: the client records the attempt and moves on. Only when the whole
    list is exhausted, or the chain deadline passes, is a ``FetchFailure``
    returned. The client never persists anything.
    """

    def __init__(
        self,
        feed_settings: FeedSettings | None = None,
        reference_fiat: str | None = None,
        opener: Opener | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.feed_settings = feed_settings or settings.feeds
        self.reference_fiat = reference_fiat or settings.aggregation.reference_fiat
        self.opener = opener or default_opener
        self.clock = clock

    def fetch(self, domain: Domain, params: dict[str, str] | None = None) -> ValidatedPayload | FetchFailure:
        deadline = self.clock() + self.feed_settings.chain_timeout_seconds
        if domain == "price":
            return self._fetch_prices(params, deadline)
        if domain == "gdp":
            return self._fetch_gdp(params, deadline)
        raise ValueError(f"Unknown feed domain: {domain}")

    def _fetch_prices(self, params: dict[str, str] | None, deadline: float) -> ValidatedPayload | FetchFailure:
        def accept(payload: Any) -> dict[str, float]:
            prices = coingecko.decode(payload)
            validation = validate_price_data(
                prices, self.reference_fiat, self.feed_settings.price_currencies
            )
            if validation.status == "fail":
                raise PayloadError(validation.summary())
            if validation.status == "warn":
                logger.info("price_quotes_incomplete", issues=[i.message for i in validation.issues])
            return prices

        chain = self._run_chain(
            "price",
            coingecko.build_url(self.feed_settings, params),
            coingecko.build_headers(self.feed_settings),
            accept,
            deadline,
        )
        if not chain.ok:
            return FetchFailure(domain="price", error=chain.last_error or "no strategy succeeded", attempts=chain.attempts)
        return ValidatedPayload(
            domain="price",
            data=chain.data,
            source=coingecko.SOURCE,
            strategy=chain.strategy,
            attempts=chain.attempts,
        )

    def _fetch_gdp(self, params: dict[str, str] | None, deadline: float) -> ValidatedPayload | FetchFailure:
        resolved = imf.resolve_params(params)
        indicator = self.feed_settings.imf_indicator

        def accept(payload: Any) -> dict[str, dict]:
            rows = imf.decode(payload, resolved, indicator=indicator)
            validation = validate_gdp_data(rows, self.feed_settings.min_gdp_countries)
            if validation.status == "fail":
                raise PayloadError(validation.summary())
            return rows

        headers = imf.build_headers(self.feed_settings)
        chain = self._run_chain(
            "gdp",
            imf.build_url(self.feed_settings, resolved),
            headers,
            accept,
            deadline,
        )
        if not chain.ok:
            return FetchFailure(domain="gdp", error=chain.last_error or "no strategy succeeded", attempts=chain.attempts)

        rows = chain.data
        attempts = list(chain.attempts)
        if self.feed_settings.imf_fetch_labels:
            labels = self._run_chain(
                "gdp_labels",
                imf.build_countries_url(self.feed_settings),
                headers,
                imf.decode_labels,
                deadline,
            )
            attempts.extend(labels.attempts)
            if labels.ok:
                rows = imf.apply_labels(rows, labels.data)
            else:
                logger.info("gdp_labels_unavailable", error=labels.last_error)

        return ValidatedPayload(
            domain="gdp",
            data=rows,
            year=resolved["periods"],
            source=imf.SOURCE,
            strategy=chain.strategy,
            attempts=attempts,
        )

    def fetch_history(self, currency: str, days: int | None = None) -> PriceHistory | FetchFailure:
        """Daily BTC prices in one currency, through the same strategy chain."""
        code = currency.strip().lower()
        if not coingecko.is_supported_currency(self.feed_settings, code):
            raise ValueError(f"Unsupported history currency: {currency}")
        window = days if days is not None else self.feed_settings.history_days

        def accept(payload: Any) -> list[tuple[int, float]]:
            points = coingecko.decode_history(payload)
            if not points:
                raise PayloadError("market chart response contains no usable prices")
            return points

        deadline = self.clock() + self.feed_settings.chain_timeout_seconds
        chain = self._run_chain(
            "price_history",
            coingecko.build_history_url(self.feed_settings, code, window),
            coingecko.build_headers(self.feed_settings),
            accept,
            deadline,
        )
        if not chain.ok:
            return FetchFailure(domain="price", error=chain.last_error or "no strategy succeeded", attempts=chain.attempts)
        return PriceHistory(
            currency=code.upper(),
            days=window,
            points=[PriceHistoryPoint(timestamp=moment, price=price) for moment, price in chain.data],
            source=coingecko.SOURCE,
            strategy=chain.strategy,
            attempts=chain.attempts,
        )

    def _run_chain(
        self,
        feed: str,
        target_url: str,
        headers: dict[str, str],
        accept: Callable[[Any], Any],
        deadline: float,
    ) -> ChainResult:
        result = ChainResult()
        for strategy in self.feed_settings.strategies:
            url = render_url(strategy, target_url)
            remaining = deadline - self.clock()
            if remaining <= 0:
                result.attempts.append(
                    AttemptRecord(
                        strategy=strategy.name,
                        url=url,
                        outcome="deadline",
                        detail="chain deadline exceeded",
                    )
                )
                result.last_error = f"{strategy.name}: chain deadline exceeded"
                logger.warning("feed_chain_deadline", feed=feed, strategy=strategy.name)
                break

            timeout = min(self.feed_settings.attempt_timeout_seconds, remaining)
            started = self.clock()
            try:
                body = self.opener(build_request(strategy, target_url, headers), timeout)
                data = accept(decode_body(strategy, body))
            except (OSError, HTTPException, PayloadError, ValueError, ArithmeticError) as exc:
                detail = describe_error(exc)
                result.attempts.append(
                    AttemptRecord(
                        strategy=strategy.name,
                        url=url,
                        outcome=classify_error(exc),
                        detail=detail,
                        elapsed_ms=int((self.clock() - started) * 1000),
                    )
                )
                result.last_error = f"{strategy.name}: {detail}"
                logger.warning(
                    "feed_attempt_failed",
                    feed=feed,
                    strategy=strategy.name,
                    outcome=classify_error(exc),
                    error=detail,
                )
                continue

            result.attempts.append(
                AttemptRecord(
                    strategy=strategy.name,
                    url=url,
                    outcome="ok",
                    elapsed_ms=int((self.clock() - started) * 1000),
                )
            )
            result.data = data
            result.strategy = strategy.name
            logger.info("feed_fetched", feed=feed, strategy=strategy.name, attempts=len(result.attempts))
            return result

        if result.last_error is None:
            result.last_error = "no transport strategies configured"
        return result
