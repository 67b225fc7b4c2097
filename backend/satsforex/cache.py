from __future__ import annotations

import structlog
from pydantic import ValidationError
from redis import Redis

from satsforex.config.settings import settings
from satsforex.schemas.rankings import RankingResponse

logger = structlog.get_logger()


def _get_client() -> Redis:
    return Redis.from_url(settings.redis_url)


class RankingCache:
    """Last computed ranking, kept in Redis for a short TTL."""

    def __init__(self, key: str | None = None, ttl_seconds: int | None = None) -> None:
        self.key = key or settings.ranking_cache_key
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.ranking_cache_ttl_seconds

    def get(self) -> RankingResponse | None:
        try:
            client = _get_client()
            raw = client.get(self.key)
        except Exception as exc:
            logger.warning("ranking_cache_unavailable", key=self.key, error=str(exc))
            return None

        if not raw:
            return None

        try:
            return RankingResponse.model_validate_json(raw)
        except (ValidationError, TypeError, ValueError) as exc:
            logger.warning("ranking_cache_corrupt", key=self.key, error=str(exc))
            return None

    def set(self, ranking: RankingResponse) -> None:
        if self.ttl_seconds <= 0:
            return None
        try:
            client = _get_client()
            client.setex(self.key, self.ttl_seconds, ranking.model_dump_json())
        except Exception as exc:
            logger.warning("ranking_cache_unavailable", key=self.key, error=str(exc))
            return None

    def clear(self) -> None:
        try:
            client = _get_client()
            client.delete(self.key)
        except Exception as exc:
            logger.warning("ranking_cache_unavailable", key=self.key, error=str(exc))
