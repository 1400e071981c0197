"""
Crisis Reporting API - SQLAlchemy ORM Models
PostgreSQL database models for accounts and form submissions
"""
import os

from sqlalchemy import Column, String, Integer, Float, DateTime, Text, Boolean, Enum as SQLEnum

from ..database import Base, utc_now
from .enums import (
    AccountStatus,
    AgeGroup,
    County,
    CrisisType,
    MilitaryServiceStatus,
    MobileCrisisOutcome,
    MobileCrisisReferralSource,
    PrimaryInsurance,
    ReferralType,
    StabilizationOutcome,
    StabilizationReferralSource,
    VeteranStatus,
)

DEFAULT_PROFILE_IMAGE = os.getenv("DEFAULT_PROFILE_IMAGE", "https://i.pravatar.cc/300?img=65")


def EnumColumn(enum_cls, nullable: bool = False) -> Column:
    """
    Column storing an Enum by its display value.

    validate_strings rejects any string outside the enum on flush, so a bad
    value can never reach a report as an unexpected bucket.
    """
    return Column(
        SQLEnum(
            enum_cls,
            values_callable=lambda members: [m.value for m in members],
            native_enum=False,
            validate_strings=True,
            length=64,
        ),
        nullable=nullable,
    )


# =============================================================================
# ACCOUNTS
# =============================================================================

class UserDB(Base):
    """Field staff account that submits forms."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID
    name = Column(String(50), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lowercase
    password_hash = Column(String(255), nullable=True)  # set when signup completes
    status = Column(
        SQLEnum(AccountStatus, values_callable=lambda members: [m.value for m in members], native_enum=False),
        nullable=False,
        default=AccountStatus.INACTIVE,
    )
    otp = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)
    is_otp_verified = Column(Boolean, default=False, nullable=False)
    profile_image = Column(String(500), nullable=True, default=DEFAULT_PROFILE_IMAGE)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


class AdminDB(Base):
    """The single administrator account."""
    __tablename__ = "admins"

    id = Column(String(36), primary_key=True)  # UUID
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_image = Column(String(500), nullable=True)
    otp = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime, nullable=True)
    is_otp_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)


# =============================================================================
# FORM SUBMISSIONS
# =============================================================================
# Submissions are append-only: created once by a user, never updated.
# user_id is a weak reference (no foreign key) so deleting an account keeps
# its historical submissions in the reports.

class CrisisCallDB(Base):
    """A crisis line call."""
    __tablename__ = "crisis_calls"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=True, index=True)
    call_by_county = EnumColumn(County)
    crisis_type = EnumColumn(CrisisType)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now)


class MobileCrisisDB(Base):
    """A mobile crisis team dispatch. Time fields are in minutes."""
    __tablename__ = "mobile_crisis_dispatches"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=True, index=True)

    referral_source = EnumColumn(MobileCrisisReferralSource)
    total_dispatches = Column(Integer, default=0, nullable=False)
    dispatch_county = EnumColumn(County)
    crisis_type = EnumColumn(CrisisType)
    outcome = EnumColumn(MobileCrisisOutcome)

    total_response_time = Column(Float, default=0, nullable=False)
    mean_response_time = Column(Float, default=0, nullable=False)
    total_on_scene_time = Column(Float, default=0, nullable=False)
    mean_on_scene_time = Column(Float, default=0, nullable=False)

    referrals_given = Column(Integer, default=0, nullable=False)
    referral_type = EnumColumn(ReferralType, nullable=True)
    naloxone_dispensations = Column(Integer, default=0, nullable=False)
    follow_up_contacts = Column(Integer, default=0, nullable=False)
    individuals_served = Column(Integer, default=0, nullable=False)

    # Demographics
    primary_insurance = EnumColumn(PrimaryInsurance)
    age_group = EnumColumn(AgeGroup)
    veteran_status = EnumColumn(VeteranStatus)
    serving_in_military = EnumColumn(MilitaryServiceStatus)

    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now)


class CrisisStabilizationDB(Base):
    """A crisis stabilization unit visit. Time fields are in minutes."""
    __tablename__ = "crisis_stabilization_visits"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=True, index=True)

    referrals_to_crisis_stabilization = EnumColumn(StabilizationReferralSource)
    number_of_visits = Column(Integer, default=0, nullable=False)
    crisis_types = EnumColumn(CrisisType)
    outcome = EnumColumn(StabilizationOutcome)

    total_stabilization_time = Column(Float, default=0, nullable=False)
    mean_stabilization_time = Column(Float, default=0, nullable=False)

    referrals_given = Column(Integer, default=0, nullable=False)
    referrals_by_type = EnumColumn(ReferralType, nullable=True)
    naloxone_dispensations = Column(Integer, default=0, nullable=False)
    follow_up_contacts = Column(Integer, default=0, nullable=False)
    individuals_served = Column(Integer, default=0, nullable=False)

    # Client demographics
    client_county_of_residence = EnumColumn(County)
    client_primary_insurance = EnumColumn(PrimaryInsurance)
    client_age_groups = EnumColumn(AgeGroup)
    client_veteran_status = EnumColumn(VeteranStatus)
    client_serving_in_military = EnumColumn(MilitaryServiceStatus)

    created_at = Column(DateTime, default=utc_now, nullable=False, index=True)
    updated_at = Column(DateTime, default=utc_now)
