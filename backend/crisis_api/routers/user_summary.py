"""
Crisis Reporting API - Per-Account Summary Router
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import sessionmaker

from ..database import get_session_factory
from ..models import UserDB
from ..auth import get_current_user
from ..services.user_summary import UserSummaryComposer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["user-summary"])


@router.get("/summary")
async def user_summary(
    current_user: UserDB = Depends(get_current_user),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    """Submission counts, last submission time and 7-day activity for the caller."""
    data = await UserSummaryComposer(session_factory).summary(current_user.id)
    return {"success": True, "data": data}
