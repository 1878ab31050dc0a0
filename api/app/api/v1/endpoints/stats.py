from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.database import get_session
from app.schemas.stats import LearningAnalytics, UserStatistics
from app.services import stats_service

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", response_model=UserStatistics)
async def get_user_statistics(
    user_id: int,
    session: Session = Depends(get_session)
):
    """Totals over the caller's dictionary and practice history."""
    return stats_service.get_user_statistics(session, user_id)


@router.get("/analytics", response_model=LearningAnalytics)
async def get_learning_analytics(
    user_id: int,
    days: int = Query(30, ge=1, le=365),
    session: Session = Depends(get_session)
):
    return stats_service.get_learning_analytics(session, user_id, days=days)
