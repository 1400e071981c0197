"""
Crisis Reporting API - Authentication Utilities
Password hashing, JWT tokens, OTP codes and auth dependencies
"""
import os
import secrets
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db, utc_now
from .errors import Unauthorized
from .models.db_models import UserDB, AdminDB

# Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "crisis-reporting-secret-key-change-in-production")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
OTP_EXPIRE_MINUTES = int(os.getenv("OTP_EXPIRE_MINUTES", "5"))

ROLE_USER = "user"
ROLE_ADMIN = "admin"

# Bearer token security; a missing header is reported as 401 by the dependencies
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password_bytes, salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash. Accounts without a password never match."""
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(subject_id: str, email: str, role: str = ROLE_USER) -> str:
    """Create a JWT access token with role claim."""
    expire = utc_now() + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode = {
        "sub": subject_id,
        "email": email,
        "role": role,
        "exp": expire
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate a JWT token. Expired or tampered tokens yield None."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


# =============================================================================
# OTP
# =============================================================================

def generate_otp() -> str:
    """Six-digit numeric code."""
    return f"{secrets.randbelow(1_000_000):06d}"


def otp_expiry(now: Optional[datetime] = None) -> datetime:
    return (now or utc_now()) + timedelta(minutes=OTP_EXPIRE_MINUTES)


def verify_otp(account, code: str, now: Optional[datetime] = None) -> bool:
    """True when the account has an unexpired OTP equal to code."""
    if not account.otp or not account.otp_expires_at:
        return False
    if account.otp_expires_at < (now or utc_now()):
        return False
    return secrets.compare_digest(account.otp, str(code))


# =============================================================================
# DEPENDENCIES
# =============================================================================

def _token_payload(credentials: Optional[HTTPAuthorizationCredentials], role: str) -> dict:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Not authorized, no token")

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("sub") is None:
        raise Unauthorized("Not authorized, token failed")
    if payload.get("role") != role:
        raise Unauthorized("Not authorized for this resource")
    return payload


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> UserDB:
    """
    Dependency to get the current authenticated user.
    Validates JWT token and fetches user from database.
    """
    payload = _token_payload(credentials, ROLE_USER)

    user = db.query(UserDB).filter(UserDB.id == payload["sub"]).first()
    if user is None:
        raise Unauthorized("User not found")
    return user


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AdminDB:
    """
    Dependency to require the admin account.
    Use this on admin-only routes.
    """
    payload = _token_payload(credentials, ROLE_ADMIN)

    admin = db.query(AdminDB).filter(AdminDB.id == payload["sub"]).first()
    if admin is None:
        raise Unauthorized("Admin not found")
    return admin
