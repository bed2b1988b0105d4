"""
Year-end reset API endpoints.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_session
from core.dependencies import get_actor_id
from schemas.year_end import YearEndResetResult, YearEndSummary
from services.year_end_service import YearEndService

router = APIRouter()


@router.get("/summary", response_model=YearEndSummary)
async def year_end_summary(db: AsyncSession = Depends(get_session)):
    """Operator status counts for contract facilities."""
    return await YearEndService.summary(db)


@router.post("/reset-completed", response_model=YearEndResetResult)
async def reset_completed(
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """Clear status and completion flags of completed facilities."""
    return await YearEndService.reset_completed(db, actor_id=actor_id)


@router.post("/reset-other", response_model=YearEndResetResult)
async def reset_other(
    db: AsyncSession = Depends(get_session),
    actor_id: Optional[UUID] = Depends(get_actor_id),
):
    """Clear the status of not-started, planned and postponed facilities."""
    return await YearEndService.reset_other_statuses(db, actor_id=actor_id)
