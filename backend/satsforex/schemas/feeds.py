from __future__ import annotations

import time
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


Domain = Literal["price", "gdp"]
DOMAINS: tuple[Domain, ...] = ("price", "gdp")

FeedState = Literal["fetching", "succeeded", "degraded", "failed"]
AttemptOutcome = Literal["ok", "timeout", "http_error", "network_error", "invalid_payload", "deadline"]


def now_ms() -> int:
    return int(time.time() * 1000)


class AttemptRecord(BaseModel):
    strategy: str
    url: str
    outcome: AttemptOutcome
    detail: Optional[str] = None
    elapsed_ms: int = 0


class ValidatedPayload(BaseModel):
    domain: Domain
    data: dict[str, Any]
    year: Optional[str] = None
    source: str
    strategy: str
    attempts: list[AttemptRecord] = Field(default_factory=list)


class FetchFailure(BaseModel):
    domain: Domain
    error: str
    attempts: list[AttemptRecord] = Field(default_factory=list)


class Snapshot(BaseModel):
    domain: Domain
    timestamp: int
    year: Optional[str] = None
    source: str = "unknown"
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def age_seconds(self, now: int | None = None) -> float:
        current = now if now is not None else now_ms()
        return max(0.0, (current - self.timestamp) / 1000.0)

    def is_stale(self, threshold_seconds: float, now: int | None = None) -> bool:
        return self.age_seconds(now) > threshold_seconds


class SnapshotStatus(BaseModel):
    domain: Domain
    exists: bool
    timestamp: Optional[int] = None
    year: Optional[str] = None
    age_seconds: Optional[float] = None
    stale: Optional[bool] = None


class FeedResult(BaseModel):
    domain: Domain
    state: FeedState = "fetching"
    data: Optional[dict[str, Any]] = None
    year: Optional[str] = None
    source: Optional[Literal["live", "cache"]] = None
    strategy: Optional[str] = None
    timestamp: Optional[int] = None
    age_seconds: Optional[float] = None
    stale: bool = False
    advisory: Optional[str] = None
    error: Optional[str] = None
    attempts: list[AttemptRecord] = Field(default_factory=list)

    @property
    def usable(self) -> bool:
        return self.state in ("succeeded", "degraded") and self.data is not None


class PriceHistoryPoint(BaseModel):
    timestamp: int
    price: float


class PriceHistory(BaseModel):
    currency: str
    days: int
    points: list[PriceHistoryPoint] = Field(default_factory=list)
    source: str
    strategy: str
    attempts: list[AttemptRecord] = Field(default_factory=list)
