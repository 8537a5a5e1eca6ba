import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from taskflow.auth import get_current_user
from taskflow.database import get_db
from taskflow.schemas import Period, ProductivityType
from taskflow.services.analytics_service import AnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics"])


@router.get("/overview")
async def overview(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return AnalyticsService.get_overview(db, user_id)
    except Exception as e:
        logger.error(f"Get overview analytics error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch overview analytics")


@router.get("/productivity")
async def productivity(period: Period = "30d", type: ProductivityType = "both",
                       user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    """Daily created/completed counts for charts."""
    try:
        return AnalyticsService.get_productivity(db, user_id, period, type)
    except Exception as e:
        logger.error(f"Get productivity analytics error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch productivity analytics")


@router.get("/priority-distribution")
async def priority_distribution(user_id: int = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        return AnalyticsService.priority_distribution(db, user_id)
    except Exception as e:
        logger.error(f"Get priority distribution error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch priority distribution")


@router.get("/completion-trends")
async def completion_trends(period: Period = "30d", user_id: int = Depends(get_current_user),
                            db: Session = Depends(get_db)):
    try:
        return AnalyticsService.completion_trends(db, user_id, period)
    except Exception as e:
        logger.error(f"Get completion trends error: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch completion trends")
