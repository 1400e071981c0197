"""
Crisis Reporting API - Admin Account Router
The single administrator: signup, login, OTP password reset and profile.
"""
from uuid import uuid4
from typing import Optional
import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from pydantic import BaseModel, EmailStr, field_validator
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import NotFound, Unauthorized, ValidationError
from ..models import AdminDB
from ..auth import (
    ROLE_ADMIN, create_access_token, generate_otp, get_current_admin,
    hash_password, otp_expiry, verify_otp, verify_password,
)
from ..services.mailer import send_otp_email
from ..services.uploads import save_profile_image
from .users import clean_name, require_name

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class AdminSignupRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    profileImage: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

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


class AdminLoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    otp: str
    newPassword: str

    @field_validator('newPassword')
    @classmethod
    def validate_password_strength(cls, v):
        if len(v) < 6:
            raise ValueError('Password must be at least 6 characters')
        return v


class AdminResponse(BaseModel):
    id: str
    name: str
    email: str
    profileImage: Optional[str] = None


class AdminEnvelope(BaseModel):
    success: bool = True
    message: str
    admin: AdminResponse


class AdminAuthResponse(AdminEnvelope):
    token: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def admin_response(admin: AdminDB) -> AdminResponse:
    return AdminResponse(id=admin.id, name=admin.name, email=admin.email, profileImage=admin.profile_image)


def _find_admin(db: Session, email: str) -> Optional[AdminDB]:
    return db.query(AdminDB).filter(AdminDB.email == email.lower()).first()


def create_admin(db: Session, name: str, email: str, password: str, profile_image: Optional[str] = None) -> AdminDB:
    """Create the admin account. Raises ValidationError if one already exists."""
    if (db.query(func.count(AdminDB.id)).scalar() or 0) > 0:
        raise ValidationError("Admin already exists. Only one admin allowed.")

    admin = AdminDB(
        id=str(uuid4()),
        name=name,
        email=email.lower(),
        password_hash=hash_password(password),
        profile_image=profile_image,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/signup", response_model=AdminEnvelope, status_code=status.HTTP_201_CREATED)
async def admin_signup(request: AdminSignupRequest, db: Session = Depends(get_db)):
    admin = create_admin(db, request.name, request.email, request.password, request.profileImage)

    logger.info(f"Admin created: {admin.email}")
    return AdminEnvelope(message="Admin created successfully.", admin=admin_response(admin))


@router.post("/login", response_model=AdminAuthResponse)
async def admin_login(request: AdminLoginRequest, db: Session = Depends(get_db)):
    admin = _find_admin(db, request.email)
    if not admin or not verify_password(request.password, admin.password_hash):
        raise Unauthorized("Invalid email or password.")

    logger.info(f"Admin logged in: {admin.email}")
    return AdminAuthResponse(
        message="Login successful.",
        token=create_access_token(admin.id, admin.email, ROLE_ADMIN),
        admin=admin_response(admin),
    )


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(request: ForgotPasswordRequest, db: Session = Depends(get_db)):
    admin = _find_admin(db, request.email)
    if admin is None:
        raise NotFound("Admin not found")

    admin.otp = generate_otp()
    admin.otp_expires_at = otp_expiry()
    admin.is_otp_verified = False
    db.commit()

    await send_otp_email(admin.email, admin.otp, "reset")

    logger.info(f"Admin password reset OTP issued: {admin.email}")
    return MessageResponse(message="OTP sent to your email")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    admin = _find_admin(db, request.email)
    if admin is None:
        raise NotFound("Admin not found")

    if not verify_otp(admin, request.otp):
        raise ValidationError("Invalid or expired OTP")

    admin.password_hash = hash_password(request.newPassword)
    admin.otp = None
    admin.otp_expires_at = None
    admin.is_otp_verified = True
    db.commit()

    logger.info(f"Admin password reset: {admin.email}")
    return MessageResponse(message="Password reset successful")


@router.put("/profile-image", response_model=AdminEnvelope)
async def update_admin_profile(
    request: Request,
    name: Optional[str] = Form(None),
    profileImage: Optional[UploadFile] = File(None),
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if not name and profileImage is None:
        raise ValidationError("No update data provided")

    if name:
        admin.name = require_name(name)
    if profileImage is not None:
        admin.profile_image = save_profile_image(profileImage, str(request.base_url), prefix="admin")

    db.commit()
    db.refresh(admin)

    logger.info(f"Admin profile updated: {admin.email}")
    return AdminEnvelope(message="Profile updated successfully", admin=admin_response(admin))
