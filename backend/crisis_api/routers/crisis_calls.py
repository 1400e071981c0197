"""
Crisis Reporting API - Crisis Calls Router
Submit crisis line calls and read the monthly summary.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session, sessionmaker

from ..database import get_db, get_session_factory
from ..models import County, CrisisCallDB, CrisisType, UserDB
from ..auth import get_current_user
from ..services.aggregation import build_crisis_call_report, parse_year_month
from .submissions import SubmissionRequest, SubmissionResponse, create_submission, serialize_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/crisis-calls", tags=["crisis-calls"])

# The county field has always been called callByCountry by clients
WIRE_NAMES = {"call_by_county": "callByCountry"}


class CrisisCallRequest(SubmissionRequest):
    call_by_county: County = Field(alias="callByCountry")
    crisis_type: CrisisType
    description: Optional[str] = None


@router.post("/create", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_crisis_call(
    request: CrisisCallRequest,
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    record = create_submission(db, CrisisCallDB, current_user, request)
    return SubmissionResponse(
        message="Crisis call record created successfully",
        data=serialize_submission(record, WIRE_NAMES),
    )


@router.get("/summary")
async def crisis_call_summary(
    year: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    """
    Calls per county and per crisis type for one calendar month.
    """
    y, m = parse_year_month(year, month)
    return await build_crisis_call_report(session_factory, y, m)
