from __future__ import annotations

import asyncio

import structlog

from satsforex.providers.client import SourceClient
from satsforex.schemas.feeds import Domain, FeedResult, FetchFailure, ValidatedPayload, now_ms
from satsforex.snapshots import SnapshotStore

logger = structlog.get_logger()


def _describe_age(age_seconds: float) -> str:
    minutes = int(age_seconds // 60)
    if minutes < 1:
        return "less than a minute ago"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 48:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    return f"{hours // 24} days ago"


class FallbackOrchestrator:
    """Live fetch first, last snapshot second, explicit failure last."""

    def __init__(self, client: SourceClient | None = None, store: SnapshotStore | None = None) -> None:
        self.client = client or SourceClient()
        self.store = store or SnapshotStore()

    def fetch_with_fallback(self, domain: Domain, params: dict[str, str] | None = None) -> FeedResult:
        return self.settle(domain, self.client.fetch(domain, params))

    async def fetch_with_fallback_async(
        self,
        domain: Domain,
        params: dict[str, str] | None = None,
        ceiling_seconds: float | None = None,
    ) -> FeedResult:
        feeds = self.client.feed_settings
        ceiling = ceiling_seconds
        if ceiling is None:
            ceiling = feeds.chain_timeout_seconds + feeds.attempt_timeout_seconds
        try:
            outcome = await asyncio.wait_for(
                asyncio.to_thread(self.client.fetch, domain, params), timeout=ceiling
            )
        except asyncio.TimeoutError:
            logger.warning("feed_ceiling_exceeded", domain=domain, ceiling_seconds=ceiling)
            outcome = FetchFailure(domain=domain, error=f"refresh ceiling of {ceiling:g}s exceeded")
        return await asyncio.to_thread(self.settle, domain, outcome)

    def settle(self, domain: Domain, outcome: ValidatedPayload | FetchFailure) -> FeedResult:
        if isinstance(outcome, ValidatedPayload):
            written = self.store.write(
                domain, outcome.data, year=outcome.year, source=outcome.source
            )
            timestamp = written.timestamp if written is not None else now_ms()
            logger.info("feed_succeeded", domain=domain, strategy=outcome.strategy)
            return FeedResult(
                domain=domain,
                state="succeeded",
                data=outcome.data,
                year=outcome.year,
                source="live",
                strategy=outcome.strategy,
                timestamp=timestamp,
                age_seconds=0.0,
                attempts=outcome.attempts,
            )

        snapshot = self.store.read(domain)
        if snapshot is None:
            logger.error("feed_failed", domain=domain, error=outcome.error)
            return FeedResult(
                domain=domain,
                state="failed",
                error=f"Failed to fetch {domain} data and no cache available ({outcome.error})",
                attempts=outcome.attempts,
            )

        age_seconds = snapshot.age_seconds()
        stale = self.store.is_stale(snapshot)
        advisory = f"Showing cached {domain} data from {_describe_age(age_seconds)}"
        if stale:
            advisory += " (stale)"
        logger.warning(
            "feed_degraded",
            domain=domain,
            error=outcome.error,
            snapshot_timestamp=snapshot.timestamp,
            age_seconds=age_seconds,
            stale=stale,
        )
        return FeedResult(
            domain=domain,
            state="degraded",
            data=snapshot.data,
            year=snapshot.year,
            source="cache",
            timestamp=snapshot.timestamp,
            age_seconds=age_seconds,
            stale=stale,
            advisory=advisory,
            error=outcome.error,
            attempts=outcome.attempts,
        )


_orchestrator: FallbackOrchestrator | None = None


def get_orchestrator() -> FallbackOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = FallbackOrchestrator()
    return _orchestrator


def fetch_with_fallback(domain: Domain, params: dict[str, str] | None = None) -> FeedResult:
    return get_orchestrator().fetch_with_fallback(domain, params)
