"""Crisis Reporting API - Data Models"""
from .enums import (
    AccountStatus, AgeGroup, County, CrisisType, MilitaryServiceStatus,
    MobileCrisisOutcome, MobileCrisisReferralSource, PrimaryInsurance,
    ReferralType, StabilizationOutcome, StabilizationReferralSource,
    VeteranStatus,
)
from .db_models import (
    UserDB, AdminDB, CrisisCallDB, MobileCrisisDB, CrisisStabilizationDB,
)

__all__ = [
    # Enums
    "AccountStatus", "AgeGroup", "County", "CrisisType", "MilitaryServiceStatus",
    "MobileCrisisOutcome", "MobileCrisisReferralSource", "PrimaryInsurance",
    "ReferralType", "StabilizationOutcome", "StabilizationReferralSource",
    "VeteranStatus",
    # ORM
    "UserDB", "AdminDB", "CrisisCallDB", "MobileCrisisDB", "CrisisStabilizationDB",
]
