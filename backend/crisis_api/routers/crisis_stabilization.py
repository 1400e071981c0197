"""
Crisis Reporting API - Crisis Stabilization Router
Submit stabilization unit visits and read the monthly summary.
"""
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field
from sqlalchemy.orm import Session, sessionmaker

from ..database import get_db, get_session_factory
from ..models import (
    AgeGroup, County, CrisisStabilizationDB, CrisisType, MilitaryServiceStatus,
    PrimaryInsurance, ReferralType, StabilizationOutcome,
    StabilizationReferralSource, UserDB, VeteranStatus,
)
from ..auth import get_current_user
from ..services.aggregation import build_stabilization_report, parse_year_month
from .submissions import SubmissionRequest, SubmissionResponse, create_submission, serialize_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/crisis-stabilization", tags=["crisis-stabilization"])


class CrisisStabilizationRequest(SubmissionRequest):
    """Time fields are in minutes."""
    referrals_to_crisis_stabilization: StabilizationReferralSource
    number_of_visits: int = Field(default=0, ge=0)
    crisis_types: CrisisType
    outcome: StabilizationOutcome

    total_stabilization_time: float = Field(default=0, ge=0)
    mean_stabilization_time: float = Field(default=0, ge=0)

    referrals_given: int = Field(default=0, ge=0)
    referrals_by_type: Optional[ReferralType] = None
    naloxone_dispensations: int = Field(default=0, ge=0)
    follow_up_contacts: int = Field(default=0, ge=0)
    individuals_served: int = Field(default=0, ge=0)

    client_county_of_residence: County
    client_primary_insurance: PrimaryInsurance
    client_age_groups: AgeGroup
    client_veteran_status: VeteranStatus
    client_serving_in_military: MilitaryServiceStatus


@router.post("/create", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_crisis_stabilization(
    request: CrisisStabilizationRequest,
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    record = create_submission(db, CrisisStabilizationDB, current_user, request)
    return SubmissionResponse(
        message="Crisis stabilization record created successfully",
        data=serialize_submission(record),
    )


@router.get("/summary")
async def crisis_stabilization_summary(
    year: Optional[str] = Query(None),
    month: Optional[str] = Query(None),
    session_factory: sessionmaker = Depends(get_session_factory)
):
    y, m = parse_year_month(year, month)
    return await build_stabilization_report(session_factory, y, m)
