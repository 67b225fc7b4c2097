from fastapi import APIRouter, Depends, HTTPException, Query, status

from satsforex.errors import AggregationError, DomainUnavailableError
from satsforex.jobs.queue import enqueue_refresh
from satsforex.jobs.refresh import RefreshService, get_refresh_service
from satsforex.schemas.feeds import DOMAINS, FeedResult, FetchFailure, PriceHistory, SnapshotStatus
from satsforex.schemas.rankings import RankingResponse

router = APIRouter()

RETRY_HINT = "Check your connection and retry in a minute."


def _normalize_domain(domain: str) -> str:
    cleaned = domain.strip().lower()
    if cleaned not in DOMAINS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": f"Unknown feed '{domain}'. Expected one of: {', '.join(DOMAINS)}."},
        )
    return cleaned


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/feeds/{domain}", response_model=FeedResult)
async def get_feed(domain: str, service: RefreshService = Depends(get_refresh_service)) -> FeedResult:
    normalized = _normalize_domain(domain)
    result = await service.feed(normalized)  # type: ignore[arg-type]
    if result.state == "failed":
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": result.error, "retry": RETRY_HINT},
        )
    return result


@router.get("/rankings", response_model=RankingResponse)
async def get_rankings(
    force: bool = False, service: RefreshService = Depends(get_refresh_service)
) -> RankingResponse:
    try:
        return await service.get_rankings(force=force)
    except DomainUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(exc), "domain": exc.domain, "retry": RETRY_HINT},
        ) from exc
    except AggregationError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(exc), "retry": RETRY_HINT},
        ) from exc


@router.get("/history/{currency}", response_model=PriceHistory)
async def get_history(
    currency: str,
    days: int = Query(default=365, ge=1, le=3650),
    service: RefreshService = Depends(get_refresh_service),
) -> PriceHistory:
    try:
        result = await service.history(currency, days)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"message": f"Unsupported currency '{currency}'."},
        ) from exc
    if isinstance(result, FetchFailure):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": result.error, "retry": RETRY_HINT},
        )
    return result


@router.get("/snapshots", response_model=list[SnapshotStatus])
def list_snapshots(service: RefreshService = Depends(get_refresh_service)) -> list[SnapshotStatus]:
    return service.snapshot_status()


@router.post("/refresh", status_code=status.HTTP_202_ACCEPTED)
def refresh_rankings() -> dict:
    job = enqueue_refresh()
    return {"job_id": job.id, "status": "queued"}
