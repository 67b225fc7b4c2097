import asyncio
import threading
from unittest.mock import Mock

import pytest

from satsforex.config.settings import AggregationSettings
from satsforex.errors import DomainUnavailableError
from satsforex.jobs.refresh import RefreshService
from satsforex.schemas.feeds import FeedResult, PriceHistory

GDP_ROWS = {
    "USA": {"label": "United States", "gdp": 29167.78},
    "DEU": {"label": "Germany", "gdp": 4710.03},
    "FRA": {"label": "France", "gdp": 3174.10},
    "JPN": {"label": "Japan", "gdp": 4070.09},
}


def price_feed(state: str = "succeeded") -> FeedResult:
    if state == "failed":
        return FeedResult(domain="price", state="failed", error="Failed to fetch price data and no cache available")
    return FeedResult(
        domain="price",
        state=state,
        source="live" if state == "succeeded" else "cache",
        data={"USD": 50_000.0, "EUR": 45_000.0, "JPY": 7_500_000.0, "XAU": 25.0, "XAG": 2_000.0},
        advisory="Showing cached price data from 5 minutes ago" if state == "degraded" else None,
    )


def gdp_feed(state: str = "succeeded") -> FeedResult:
    if state == "failed":
        return FeedResult(domain="gdp", state="failed", error="Failed to fetch gdp data and no cache available")
    return FeedResult(
        domain="gdp",
        state=state,
        source="live" if state == "succeeded" else "cache",
        data=GDP_ROWS,
        year="2024",
        advisory="Showing cached gdp data from 2 hours ago" if state == "degraded" else None,
    )


class FakeOrchestrator:
    def __init__(self, price: FeedResult, gdp: FeedResult) -> None:
        self.results = {"price": price, "gdp": gdp}
        self.calls: list[str] = []
        self.store = None

    async def fetch_with_fallback_async(self, domain, params=None, ceiling_seconds=None):
        self.calls.append(domain)
        return self.results[domain]


class FakeCache:
    def __init__(self, cached=None) -> None:
        self.cached = cached
        self.stored = []

    def get(self):
        return self.cached

    def set(self, ranking) -> None:
        self.stored.append(ranking)


def make_service(price: FeedResult, gdp: FeedResult, cache: FakeCache | None = None) -> RefreshService:
    return RefreshService(
        orchestrator=FakeOrchestrator(price, gdp),
        cache=cache or FakeCache(),
        aggregation_settings=AggregationSettings(),
    )


def test_refresh_builds_and_caches_ranking() -> None:
    service = make_service(price_feed(), gdp_feed())

    response = asyncio.run(service.refresh())

    codes = [item.code for item in response.entities]
    assert sorted(service.orchestrator.calls) == ["gdp", "price"]
    assert codes[0] == "USD"
    assert {"BTC", "XAG", "USD", "EUR", "JPY"} <= set(codes)
    assert response.gdp_year == "2024"
    assert response.price_feed.state == "succeeded"
    assert response.price_feed.data is None
    assert response.gdp_feed.data is None
    assert response.advisories == []
    assert service.cache.stored == [response]


def test_refresh_sums_eurozone_members() -> None:
    response = asyncio.run(make_service(price_feed(), gdp_feed()).refresh())

    eur = next(item for item in response.entities if item.code == "EUR")
    assert eur.economic_size == pytest.approx((4710.03 + 3174.10) * 1e9)


def test_refresh_without_price_raises() -> None:
    service = make_service(price_feed("failed"), gdp_feed())

    with pytest.raises(DomainUnavailableError) as excinfo:
        asyncio.run(service.refresh())

    assert excinfo.value.domain == "price"
    assert service.cache.stored == []


def test_refresh_without_gdp_degrades() -> None:
    response = asyncio.run(make_service(price_feed(), gdp_feed("failed")).refresh())

    assert {item.type for item in response.entities} == {"crypto", "metal"}
    assert [d.code for d in response.diagnostics] == ["gdp_unavailable"]
    assert response.advisories == ["Failed to fetch gdp data and no cache available"]


def test_refresh_surfaces_cache_advisories() -> None:
    response = asyncio.run(make_service(price_feed("degraded"), gdp_feed("degraded")).refresh())

    assert response.advisories == [
        "Showing cached price data from 5 minutes ago",
        "Showing cached gdp data from 2 hours ago",
    ]


def test_get_rankings_prefers_cache() -> None:
    cached = asyncio.run(make_service(price_feed(), gdp_feed()).refresh())
    service = make_service(price_feed(), gdp_feed(), cache=FakeCache(cached))

    assert asyncio.run(service.get_rankings()) is cached
    assert service.orchestrator.calls == []

    fresh = asyncio.run(service.get_rankings(force=True))
    assert fresh is not cached
    assert sorted(service.orchestrator.calls) == ["gdp", "price"]


class ThreadRecordingCache(FakeCache):
    def __init__(self, cached=None) -> None:
        super().__init__(cached)
        self.threads: list[int] = []

    def get(self):
        self.threads.append(threading.get_ident())
        return super().get()

    def set(self, ranking) -> None:
        self.threads.append(threading.get_ident())
        super().set(ranking)


def test_cache_calls_run_off_the_event_loop_thread() -> None:
    cache = ThreadRecordingCache()
    service = make_service(price_feed(), gdp_feed(), cache=cache)

    asyncio.run(service.get_rankings())

    assert len(cache.threads) == 2
    assert threading.get_ident() not in cache.threads


def test_history_delegates_to_client() -> None:
    history = PriceHistory(currency="EUR", days=7, source="coingecko", strategy="direct")
    client = Mock()
    client.fetch_history.return_value = history
    service = make_service(price_feed(), gdp_feed())
    service.orchestrator.client = client

    assert asyncio.run(service.history("eur", 7)) is history
    client.fetch_history.assert_called_once_with("eur", 7)
