"""
Crisis Reporting API - Enumerations

Closed value sets for every categorical form field. The string value of each
member is exactly what the forms submit and what reports display.
"""
from enum import Enum


INDIANA_COUNTIES = [
    "adams co.", "allen co.", "bartholomew co.", "benton co.", "blackford co.",
    "boone co.", "brown co.", "carroll co.", "cass co.", "clark co.",
    "clay co.", "clinton co.", "crawford co.", "daviess co.", "dearborn co.",
    "decatur co.", "dekalb co.", "delaware co.", "dubois co.", "elkhart co.",
    "fayette co.", "floyd co.", "fountain co.", "franklin co.", "fulton co.",
    "gibson co.", "grant co.", "greene co.", "hamilton co.", "hancock co.",
    "harrison co.", "hendricks co.", "henry co.", "howard co.", "huntington co.",
    "jackson co.", "jasper co.", "jay co.", "jefferson co.", "jennings co.",
    "johnson co.", "knox co.", "kosciusko co.", "lagrange co.", "lake co.",
    "laporte co.", "lawrence co.", "madison co.", "marion co.", "marshall co.",
    "martin co.", "miami co.", "monroe co.", "montgomery co.", "morgan co.",
    "newton co.", "noble co.", "ohio co.", "orange co.", "owen co.",
    "parke co.", "perry co.", "pike co.", "porter co.", "posey co.",
    "pulaski co.", "putnam co.", "randolph co.", "ripley co.", "rush co.",
    "scott co.", "shelby co.", "spencer co.", "st. joseph co.", "starke co.",
    "steuben co.", "sullivan co.", "switzerland co.", "tippecanoe co.", "tipton co.",
    "union co.", "vanderburgh co.", "vermillion co.", "vigo co.", "wabash co.",
    "warren co.", "warrick co.", "washington co.", "wayne co.", "wells co.",
    "white co.", "whitley co.",
]


def _member_name(county: str) -> str:
    # "st. joseph co." -> "ST_JOSEPH"
    return county.replace(" co.", "").replace(".", "").replace(" ", "_").upper()


# 92 members, one per county
County = Enum(
    "County",
    [(_member_name(name), name) for name in INDIANA_COUNTIES],
    type=str,
    module=__name__,
)


class AccountStatus(str, Enum):
    """Lifecycle status of a user account."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class CrisisType(str, Enum):
    SUICIDE_RISK = "Suicide Risk"
    RISK_TO_OTHERS = "At Risk of Hurting Others"
    ADULT_MENTAL_HEALTH = "Adult Mental Health"
    YOUTH_MENTAL_HEALTH = "Youth Mental Health"
    SUBSTANCE_USE = "Substance Use"
    OTHER = "Other"


class MobileCrisisReferralSource(str, Enum):
    """Who referred the individual to a mobile crisis team."""
    LAW_ENFORCEMENT = "Law Enforcement/Justice System"
    EMS = "EMS"
    MEDICAL_HOSPITALS = "Medical Hospitals"
    PSYCHIATRIC_HOSPITALS = "Psychiatric Hospitals"
    BEHAVIORAL_HEALTH_PROVIDERS = "Behavioral Health Providers"
    SCHOOLS = "Schools"
    CHILD_SERVICES = "Department of Child Services"
    FAITH_BASED = "Faith-Based Organizations"
    HOUSING_SHELTERS = "Housing Shelters"
    FAMILY_AND_FRIENDS = "Family and Friends"
    SELF = "Self"
    PRIMARY_HEALTHCARE = "Primary Healthcare"
    SOCIAL_SERVICE_AGENCY = "Social Service Agency"
    LINE_988 = "988"
    LINE_911 = "911"
    OTHER = "Other"


class StabilizationReferralSource(str, Enum):
    """Who referred the individual to a crisis stabilization unit."""
    LAW_ENFORCEMENT = "Law Enforcement/Justice System"
    EMS = "EMS"
    MOBILE_CRISIS_TEAM = "Mobile Crisis Team"
    MEDICAL_HOSPITALS = "Medical Hospitals"
    PSYCHIATRIC_HOSPITALS = "Psychiatric Hospitals"
    BEHAVIORAL_HEALTH_PROVIDERS = "Behavioral Health Providers"
    SCHOOLS = "Schools"
    CHILD_SERVICES = "Department of Child Services"
    FAITH_BASED = "Faith-Based Organizations"
    HOUSING_SHELTERS = "Housing Shelters"
    FAMILY_AND_FRIENDS = "Family and Friends"
    SELF = "Self"
    PRIMARY_HEALTHCARE = "Primary Healthcare"
    SOCIAL_SERVICE_AGENCY = "Social Service Agency"
    LINE_988 = "988"
    LINE_911 = "911"
    OTHER = "Other"


class MobileCrisisOutcome(str, Enum):
    STABILIZED_IN_COMMUNITY = "Stabilized in the Community"
    SENT_TO_STABILIZATION_UNIT = "Sent to a Crisis Stabilization Unit"
    EMERGENCY_ROOM = "Sent to the Emergency Room/Called EMS"
    LAW_ENFORCEMENT_CUSTODY = "Law Enforcement Custody"
    INPATIENT_PSYCHIATRIC = "Sent to an Inpatient Psychiatric Facility"
    SUBSTANCE_USE_TREATMENT = "Sent to a Substance Use Treatment Facility"
    OTHER = "Other"


class StabilizationOutcome(str, Enum):
    STABILIZED_IN_COMMUNITY = "Stabilized in the Community"
    EMERGENCY_ROOM = "Sent to the Emergency Room/Called EMS"
    LAW_ENFORCEMENT_CUSTODY = "Law Enforcement Custody"
    INPATIENT_PSYCHIATRIC = "Sent to an Inpatient Psychiatric Facility"
    SUBSTANCE_USE_TREATMENT = "Sent to a Substance Use Treatment Facility"
    OTHER = "Other"


class ReferralType(str, Enum):
    """Kind of referral given at the end of an engagement."""
    SOCIAL_SERVICE_AGENCY = "Social Service Agency"
    MENTAL_HEALTH = "Mental Health Services/Treatment"
    SUBSTANCE_USE_TREATMENT = "Substance Use Treatment"
    PRIMARY_HEALTH_CARE = "Primary Health Care"
    DOMESTIC_VIOLENCE_SUPPORT = "Domestic Violence Support"
    OTHER = "Other"


class PrimaryInsurance(str, Enum):
    MEDICAID = "Medicaid (not dually-eligible)"
    HIP = "HIP"
    MEDICARE = "Medicare (not dually-eligible)"
    DUAL_ELIGIBLE = "Medicaid and Medicare (dually-eligible)"
    COMMERCIAL = "Commercially Insured"
    VHA_TRICARE = "VHA/TRI Care"
    CHIP = "CHIP"
    UNINSURED = "Uninsured"
    OTHER = "Other"


class AgeGroup(str, Enum):
    AGE_0_5 = "0–5 years"
    AGE_6_12 = "6–12 years"
    AGE_13_17 = "13–17 years"
    AGE_18_20 = "18–20 years"
    AGE_21_24 = "21–24 years"
    AGE_25_44 = "25–44 years"
    AGE_45_64 = "45–64 years"
    AGE_65_PLUS = "65 years or over"
    UNKNOWN = "Unknown"


class VeteranStatus(str, Enum):
    YES = "Yes"
    NO = "No"
    NOT_APPLICABLE = "Not Applicable (Client under 18 years of age)"


class MilitaryServiceStatus(str, Enum):
    YES = "Yes"
    NO = "No"
    REFUSED = "Refused"
    NOT_APPLICABLE = "Not Applicable (Client under 18 years of age)"
