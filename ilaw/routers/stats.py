from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ilaw.auth import get_current_user_staff
from ilaw.database import get_db
from ilaw.models.user import User
from ilaw.schemas.stats import DashboardStatsResponse
from ilaw.services.stats import dashboard_stats

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("", response_model=DashboardStatsResponse)
def get_stats(
    db: Session = Depends(get_db),
    _user: User = Depends(get_current_user_staff),
):
    """Dashboard numbers for admins and teachers."""
    return DashboardStatsResponse(stats=dashboard_stats(db))
