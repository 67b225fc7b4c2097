from __future__ import annotations

import asyncio

import structlog

from satsforex.aggregation.aggregator import aggregate
from satsforex.cache import RankingCache
from satsforex.config.settings import AggregationSettings, settings
from satsforex.errors import DomainUnavailableError
from satsforex.providers import imf
from satsforex.providers.selector import FallbackOrchestrator, get_orchestrator
from satsforex.schemas.feeds import Domain, FeedResult, FetchFailure, PriceHistory, SnapshotStatus, now_ms
from satsforex.schemas.rankings import RankingResponse

logger = structlog.get_logger()


def _advisories(*feeds: FeedResult) -> list[str]:
    advisories: list[str] = []
    for feed in feeds:
        if feed.state == "degraded" and feed.advisory:
            advisories.append(feed.advisory)
        elif feed.state == "failed" and feed.error:
            advisories.append(feed.error)
    return advisories


class RefreshService:
    """Fetches both feeds concurrently and turns them into one ranking."""

    def __init__(
        self,
        orchestrator: FallbackOrchestrator | None = None,
        cache: RankingCache | None = None,
        aggregation_settings: AggregationSettings | None = None,
    ) -> None:
        self.orchestrator = orchestrator or get_orchestrator()
        self.cache = cache or RankingCache()
        self.aggregation_settings = aggregation_settings or settings.aggregation

    async def feed(self, domain: Domain, params: dict[str, str] | None = None) -> FeedResult:
        return await self.orchestrator.fetch_with_fallback_async(domain, params)

    def snapshot_status(self) -> list[SnapshotStatus]:
        return self.orchestrator.store.status()

    async def history(self, currency: str, days: int | None = None) -> PriceHistory | FetchFailure:
        return await asyncio.to_thread(self.orchestrator.client.fetch_history, currency, days)

    async def refresh(self) -> RankingResponse:
        price_feed, gdp_feed = await asyncio.gather(self.feed("price"), self.feed("gdp"))

        if not price_feed.usable:
            raise DomainUnavailableError("price", price_feed.error)

        gdp_records = None
        gdp_year = None
        if gdp_feed.usable:
            gdp_records = imf.records_from_table(gdp_feed.data or {}, gdp_feed.year)
            gdp_year = gdp_feed.year

        result = aggregate(
            price_feed.data or {},
            gdp_records,
            self.aggregation_settings,
            gdp_year=gdp_year,
        )
        response = RankingResponse(
            entities=result.entities,
            diagnostics=result.diagnostics,
            reference_fiat=result.reference_fiat,
            reference_price=result.reference_price,
            gdp_year=result.gdp_year,
            generated_at=now_ms(),
            price_feed=price_feed.model_copy(update={"data": None}),
            gdp_feed=gdp_feed.model_copy(update={"data": None}),
            advisories=_advisories(price_feed, gdp_feed),
        )
        await asyncio.to_thread(self.cache.set, response)
        logger.info(
            "rankings_refreshed",
            entities=len(response.entities),
            diagnostics=len(response.diagnostics),
            price_state=price_feed.state,
            gdp_state=gdp_feed.state,
        )
        return response

    async def get_rankings(self, force: bool = False) -> RankingResponse:
        if not force:
            cached = await asyncio.to_thread(self.cache.get)
            if cached is not None:
                return cached
        return await self.refresh()


_service: RefreshService | None = None


def get_refresh_service() -> RefreshService:
    global _service
    if _service is None:
        _service = RefreshService()
    return _service


def run_refresh() -> int:
    response = asyncio.run(get_refresh_service().refresh())
    return len(response.entities)
