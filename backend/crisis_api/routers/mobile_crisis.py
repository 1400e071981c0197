"""
Crisis Reporting API - Mobile Crisis Router
Submit mobile crisis team dispatches and read the monthly summary.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session, sessionmaker

from ..database import get_db, get_session_factory
from ..models import (
    AgeGroup, County, CrisisType, MilitaryServiceStatus, MobileCrisisDB,
    MobileCrisisOutcome, MobileCrisisReferralSource, PrimaryInsurance,
    ReferralType, UserDB, VeteranStatus,
)
from ..auth import get_current_user
from ..services.aggregation import build_mobile_crisis_report, parse_year_month
from .submissions import SubmissionRequest, SubmissionResponse, create_submission, serialize_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/mobile-crisis", tags=["mobile-crisis"])


class MobileCrisisRequest(SubmissionRequest):
    """Time fields are in minutes."""
    referral_source: MobileCrisisReferralSource
    total_dispatches: int = Field(default=0, ge=0)
    dispatch_county: County
    crisis_type: CrisisType
    outcome: MobileCrisisOutcome

    total_response_time: float = Field(default=0, ge=0)
    mean_response_time: float = Field(default=0, ge=0)
    total_on_scene_time: float = Field(default=0, ge=0)
    mean_on_scene_time: float = Field(default=0, ge=0)

    referrals_given: int = Field(default=0, ge=0)
    referral_type: Optional[ReferralType] = None
    naloxone_dispensations: int = Field(default=0, ge=0)
    follow_up_contacts: int = Field(default=0, ge=0)
    individuals_served: int = Field(default=0, ge=0)

    primary_insurance: PrimaryInsurance
    age_group: AgeGroup
    veteran_status: VeteranStatus
    serving_in_military: MilitaryServiceStatus


@router.post("/create", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_mobile_crisis(
    request: MobileCrisisRequest,
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    record = create_submission(db, MobileCrisisDB, current_user, request)
    return SubmissionResponse(
        message="Mobile crisis record created successfully",
        data=serialize_submission(record),
    )


@router.get("/summary")
async def mobile_crisis_summary(
    year: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    y, m = parse_year_month(year, month)
    return await build_mobile_crisis_report(session_factory, y, m)
