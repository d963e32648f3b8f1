"""Weekly trending sidebar endpoints."""

from fastapi import APIRouter, Query

from animelog.api.v1.dependencies import SessionDep
from animelog.schemas.trending import TrendingReviewResponse, TrendingUserResponse
from animelog.services import trending as trending_service

router = APIRouter(prefix="/trending", tags=["trending"])


@router.get("/reviews", response_model=list[TrendingReviewResponse])
async def top_reviews(
    db: SessionDep,
    limit: int = Query(1, ge=1, le=20),
) -> list[TrendingReviewResponse]:
    """Most engaged-with public reviews of the past week."""
    return [
        TrendingReviewResponse.model_validate(pick)
        for pick in trending_service.top_reviews(db, limit=limit)
    ]


@router.get("/users", response_model=list[TrendingUserResponse])
async def top_users(
    db: SessionDep,
    limit: int = Query(1, ge=1, le=20),
) -> list[TrendingUserResponse]:
    return [
        TrendingUserResponse.model_validate(pick)
        for pick in trending_service.top_users(db, limit=limit)
    ]
