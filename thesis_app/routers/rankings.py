"""
Rankings Router - Thesis Defense Platform
thesis_app/routers/rankings.py

Leaderboards built from submitted and locked evaluations.
Results are cached in Redis and invalidated on submit/lock.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from thesis_app.config import settings
from thesis_app.core.dependencies import get_ranking_service
from thesis_app.core.errors import raise_not_found
from thesis_app.models.ranking import (
    GroupRankingEnvelope,
    GroupRankingListResponse,
    StudentRankingEnvelope,
    StudentRankingListResponse,
)
from thesis_app.services.ranking_service import RankingService

router = APIRouter(prefix=settings.API_V1_PREFIX, tags=["Rankings"])


@router.get(
    "/rankings/groups",
    response_model=GroupRankingListResponse,
    summary="Group leaderboard",
    description="Groups ordered by percentage (desc), then latest defense (desc), then title.",
)
async def list_group_rankings(
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_LIMIT),
    service: RankingService = Depends(get_ranking_service),
) -> GroupRankingListResponse:
    return service.group_rankings(limit)


@router.get("/rankings/groups/{group_id}", response_model=GroupRankingEnvelope, summary="Rank of one group")
async def get_group_ranking(
    group_id: UUID,
    service: RankingService = Depends(get_ranking_service),
) -> GroupRankingEnvelope:
    ranking = service.group_ranking(group_id)
    if ranking is None:
        raise_not_found("group ranking")
    return GroupRankingEnvelope(ranking=ranking)


@router.get("/rankings/students", response_model=StudentRankingListResponse, summary="Student leaderboard")
async def list_student_rankings(
    limit: Optional[int] = Query(None, ge=1, le=settings.MAX_PAGE_LIMIT),
    service: RankingService = Depends(get_ranking_service),
) -> StudentRankingListResponse:
    return service.student_rankings(limit)


@router.get("/rankings/students/{student_id}", response_model=StudentRankingEnvelope, summary="Rank of one student")
async def get_student_ranking(
    student_id: UUID,
    service: RankingService = Depends(get_ranking_service),
) -> StudentRankingEnvelope:
    ranking = service.student_ranking(student_id)
    if ranking is None:
        raise_not_found("student ranking")
    return StudentRankingEnvelope(ranking=ranking)
