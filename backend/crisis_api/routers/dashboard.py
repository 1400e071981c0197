"""
Crisis Reporting API - Dashboard Router
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import sessionmaker

from ..database import get_session_factory
from ..errors import ValidationError
from ..services.dashboard import DashboardComposer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

# Ten years
MAX_LOOKBACK_DAYS = 3650


def parse_days(days: Optional[str]) -> int:
    """Lookback length in days; 7 when absent, at most MAX_LOOKBACK_DAYS."""
    if days is None or days == "":
        return 7
    try:
        value = int(days)
    except ValueError:
        raise ValidationError("days must be a positive integer")
    if value < 1:
        raise ValidationError("days must be a positive integer")
    if value > MAX_LOOKBACK_DAYS:
        raise ValidationError(f"days must be at most {MAX_LOOKBACK_DAYS}")
    return value


@router.get("/summary")
async def dashboard_summary(
    days: Optional[str] = Query(None),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    data = await DashboardComposer(session_factory).dashboard_summary(parse_days(days))
    return {"success": True, "data": data}
