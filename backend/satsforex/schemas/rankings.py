from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from satsforex.schemas.feeds import FeedResult


EntityType = Literal["crypto", "metal", "fiat"]


class PricePoint(BaseModel):
    code: str
    price: float

    @field_validator("code")
    @classmethod
    def _canonical_code(cls, value: str) -> str:
        return value.strip().upper()


class GdpRecord(BaseModel):
    country_code: str
    year: Optional[str] = None
    value_billions_usd: float = Field(ge=0)
    label: Optional[str] = None


class RankedEntity(BaseModel):
    model_config = ConfigDict(frozen=True)

    rank: int = 0
    code: str
    name: str
    economic_size: float
    sats_per_unit: float
    value_of_one_sat: float
    type: EntityType


class Diagnostic(BaseModel):
    code: str
    entity: str
    message: str


class AggregationResult(BaseModel):
    entities: list[RankedEntity] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    reference_fiat: str = "USD"
    reference_price: float
    gdp_year: Optional[str] = None


class RankingResponse(BaseModel):
    entities: list[RankedEntity] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    reference_fiat: str = "USD"
    reference_price: float
    gdp_year: Optional[str] = None
    generated_at: int
    price_feed: FeedResult
    gdp_feed: FeedResult
    advisories: list[str] = Field(default_factory=list)
