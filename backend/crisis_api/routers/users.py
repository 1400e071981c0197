"""
Crisis Reporting API - User Account Router
Handles OTP-verified signup, login, and profile management for field staff.
"""
from uuid import uuid4
from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import NotFound, Unauthorized, ValidationError
from ..models import AccountStatus, UserDB
from ..auth import (
    ROLE_USER, create_access_token, generate_otp, get_current_user,
    hash_password, otp_expiry, verify_otp, verify_password,
)
from ..services.mailer import send_otp_email
from ..services.uploads import save_profile_image

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def clean_name(name: str) -> str:
    """Strip an account name; raises ValueError unless it is 2-50 characters."""
    name = name.strip()
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValueError(f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
    return name


def require_name(name: str) -> str:
    """clean_name for form fields, where a bad name is a 400."""
    try:
        return clean_name(name)
    except ValueError as e:
        raise ValidationError(str(e))


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class EmailRequest(BaseModel):
    email: EmailStr

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class VerifyOtpRequest(EmailRequest):
    otp: str


class SignupRequest(EmailRequest):
    name: str
    password: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        return clean_name(v)

    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v


class LoginRequest(EmailRequest):
    password: str


class UserResponse(BaseModel):
    """Account as exposed to clients; never includes password or OTP."""
    id: str
    name: Optional[str] = None
    email: str
    status: str
    profileImage: Optional[str] = None
    isOtpVerified: bool = False
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserEnvelope(MessageResponse):
    user: UserResponse


class AuthResponse(UserEnvelope):
    token: str


def user_response(user: UserDB) -> UserResponse:
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        status=user.status.value if user.status else AccountStatus.INACTIVE.value,
        profileImage=user.profile_image,
        isOtpVerified=bool(user.is_otp_verified),
        createdAt=user.created_at.isoformat() if user.created_at else None,
        updatedAt=user.updated_at.isoformat() if user.updated_at else None,
    )


def _find_user(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.email == email.lower()).first()


async def _issue_otp(db: Session, user: UserDB) -> None:
    user.otp = generate_otp()
    user.otp_expires_at = otp_expiry()
    db.commit()
    await send_otp_email(user.email, user.otp, "verify")


# =============================================================================
# SIGNUP
# =============================================================================

@router.post("/signup/request-otp", response_model=MessageResponse)
async def request_signup_otp(request: EmailRequest, db: Session = Depends(get_db)):
    """
    Start signup: create a pending (inactive, unverified) account and email
    a verification code. Repeating the request for a pending account just
    issues a new code.
    """
    user = _find_user(db, request.email)
    if user and user.password_hash:
        raise ValidationError("User already exists with this email")

    if user is None:
        user = UserDB(id=str(uuid4()), email=request.email, status=AccountStatus.INACTIVE)
        db.add(user)

    user.is_otp_verified = False
    await _issue_otp(db, user)

    logger.info(f"Signup OTP issued: {request.email}")
    return MessageResponse(message="OTP sent to your email")


@router.post("/verify-otp", response_model=MessageResponse)
async def verify_signup_otp(request: VerifyOtpRequest, db: Session = Depends(get_db)):
    user = _find_user(db, request.email)
    if user is None:
        raise NotFound("User not found")

    if not verify_otp(user, request.otp):
        raise ValidationError("Invalid or expired OTP")

    user.is_otp_verified = True
    user.otp = None
    user.otp_expires_at = None
    db.commit()

    logger.info(f"OTP verified: {request.email}")
    return MessageResponse(message="OTP verified successfully")


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(request: EmailRequest, db: Session = Depends(get_db)):
    user = _find_user(db, request.email)
    if user is None:
        raise NotFound("User not found")
    if user.is_otp_verified:
        raise ValidationError("Email is already verified")

    await _issue_otp(db, user)

    logger.info(f"Signup OTP re-issued: {request.email}")
    return MessageResponse(message="A new OTP has been sent to your email")


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """
    Complete signup for a verified email: set name and password and
    activate the account.
    """
    user = _find_user(db, request.email)
    if user is None:
        raise NotFound("Please request an OTP first")
    if not user.is_otp_verified:
        raise ValidationError("Please verify your email first")
    if user.password_hash:
        raise ValidationError("User already exists with this email")

    user.name = request.name
    user.password_hash = hash_password(request.password)
    user.status = AccountStatus.ACTIVE
    db.commit()
    db.refresh(user)

    logger.info(f"User registered: {request.email}")
    return AuthResponse(
        message="Signup completed successfully",
        token=create_access_token(user.id, user.email, ROLE_USER),
        user=user_response(user),
    )


# =============================================================================
# LOGIN & PROFILE
# =============================================================================

@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate user and return JWT token.
    """
    user = _find_user(db, request.email)

    if not user or not verify_password(request.password, user.password_hash):
        raise Unauthorized("Invalid email or password")

    if not user.is_otp_verified or user.status != AccountStatus.ACTIVE:
        raise Unauthorized("Account is inactive. Please contact the administrator")

    logger.info(f"User logged in: {request.email}")
    return AuthResponse(
        message="Login successful",
        token=create_access_token(user.id, user.email, ROLE_USER),
        user=user_response(user),
    )


@router.get("/me", response_model=UserEnvelope)
async def get_me(current_user: UserDB = Depends(get_current_user)):
    return UserEnvelope(message="Current user", user=user_response(current_user))


@router.put("/update/profile", response_model=UserEnvelope)
async def update_profile(
    request: Request,
    name: Optional[str] = Form(None),
    profileImage: Optional[UploadFile] = File(None),
    current_user: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update name and/or profile image (multipart form).
    Only provided fields are updated.
    """
    if not name and profileImage is None:
        raise ValidationError("No update data provided")

    if name:
        current_user.name = require_name(name)

    if profileImage is not None:
        current_user.profile_image = save_profile_image(profileImage, str(request.base_url), prefix="user")

    db.commit()
    db.refresh(current_user)

    logger.info(f"Profile updated for user: {current_user.email}")
    return UserEnvelope(message="Profile updated successfully", user=user_response(current_user))
