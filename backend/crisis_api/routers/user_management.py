"""
Crisis Reporting API - User Management Router
Admin-only account administration: create, update, activate/deactivate,
list and delete field staff accounts.
"""
import math
from datetime import timedelta
from uuid import uuid4
from typing import List, Optional
import logging

import pydantic
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from pydantic import BaseModel
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from ..database import get_db, utc_now
from ..errors import NotFound, ValidationError
from ..models import AccountStatus, AdminDB, UserDB
from ..auth import get_current_admin, hash_password
from ..services.aggregation.stats import percentage
from ..services.aggregation.windows import start_of_day
from ..services.uploads import save_profile_image
from .users import EmailRequest, UserEnvelope, UserResponse, require_name, user_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users/management", tags=["user-management"])


# =============================================================================
# PYDANTIC MODELS
# =============================================================================

class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalUsers: int
    limit: int
    hasNextPage: bool
    hasPrevPage: bool


class UserListFilter(BaseModel):
    status: str
    search: str


class UserListResponse(BaseModel):
    """Paginated user list response."""
    success: bool = True
    users: List[UserResponse]
    pagination: Pagination
    filter: UserListFilter


class UserStats(BaseModel):
    totalUsers: int
    activeUsers: int
    inactiveUsers: int
    newUsers: int  # last 30 days
    newUsersToday: int
    newUsersThisWeek: int


class UserPercentages(BaseModel):
    activePercentage: float
    inactivePercentage: float


class UserStatsResponse(BaseModel):
    success: bool = True
    stats: UserStats
    percentages: UserPercentages


class MessageResponse(BaseModel):
    success: bool = True
    message: str


def _normalize_email(email: str) -> str:
    try:
        return EmailRequest(email=email).email
    except pydantic.ValidationError:
        raise ValidationError("Please enter a valid email address")


def _get_user(db: Session, user_id: str) -> UserDB:
    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if user is None:
        raise NotFound("User not found")
    return user


def _escape_like(text: str) -> str:
    # Search text is literal; % and _ are not wildcards
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _email_taken(db: Session, email: str) -> bool:
    return db.query(UserDB).filter(UserDB.email == email).first() is not None


# =============================================================================
# API ENDPOINTS
# =============================================================================

@router.post("/create-user", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: Request,
    name: str = Form(...),
    email: str = Form(...),
    password: str = Form(...),
    profileImage: Optional[UploadFile] = File(None),
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """
    Create an account that is active and verified immediately.
    """
    if not name.strip() or not password:
        raise ValidationError("All fields are required")
    name = require_name(name)
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters")

    email = _normalize_email(email)
    if _email_taken(db, email):
        raise ValidationError("User already exists with this email")

    user = UserDB(
        id=str(uuid4()),
        name=name,
        email=email,
        password_hash=hash_password(password),
        status=AccountStatus.ACTIVE,
        is_otp_verified=True,
    )
    if profileImage is not None:
        user.profile_image = save_profile_image(profileImage, str(request.base_url), prefix="user")

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User created by admin {admin.email}: {email}")
    return UserEnvelope(message="User created successfully by admin", user=user_response(user))


@router.put("/update-user/{user_id}", response_model=UserEnvelope)
async def update_user(
    user_id: str,
    request: Request,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    profileImage: Optional[UploadFile] = File(None),
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    user = _get_user(db, user_id)

    if email:
        email = _normalize_email(email)
        if email != user.email and _email_taken(db, email):
            raise ValidationError("Email already exists")
        user.email = email

    if name and name.strip():
        user.name = require_name(name)

    if password and password.strip():
        if len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")
        user.password_hash = hash_password(password)

    if profileImage is not None:
        user.profile_image = save_profile_image(profileImage, str(request.base_url), prefix="user")

    db.commit()
    db.refresh(user)

    logger.info(f"User {user_id} updated by admin {admin.email}")
    return UserEnvelope(message="User updated successfully", user=user_response(user))


@router.patch("/change-status/{user_id}", response_model=UserEnvelope)
async def change_user_status(
    user_id: str,
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Toggle an account between active and inactive."""
    user = _get_user(db, user_id)

    new_status = AccountStatus.INACTIVE if user.status == AccountStatus.ACTIVE else AccountStatus.ACTIVE
    user.status = new_status
    db.commit()
    db.refresh(user)

    logger.info(f"User {user_id} status changed to {new_status.value} by admin {admin.email}")
    return UserEnvelope(message=f"User status changed to {new_status.value}", user=user_response(user))


@router.get("/all-user", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """
    List accounts, newest first.
    status is active, inactive or all; search matches the name case-insensitively.
    """
    query = db.query(UserDB)

    if status and status != "all":
        try:
            query = query.filter(UserDB.status == AccountStatus(status))
        except ValueError:
            raise ValidationError("status must be one of: all, active, inactive")

    if search and search.strip():
        query = query.filter(UserDB.name.ilike(f"%{_escape_like(search.strip())}%", escape="\\"))

    total = query.count()
    offset = (page - 1) * limit
    users = query.order_by(desc(UserDB.created_at)).offset(offset).limit(limit).all()

    total_pages = math.ceil(total / limit)
    return UserListResponse(
        users=[user_response(u) for u in users],
        pagination=Pagination(
            currentPage=page,
            totalPages=total_pages,
            totalUsers=total,
            limit=limit,
            hasNextPage=page < total_pages,
            hasPrevPage=page > 1,
        ),
        filter=UserListFilter(status=status or "all", search=search or ""),
    )


@router.get("/dashboard/stats", response_model=UserStatsResponse)
async def get_user_stats(
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    now = utc_now()

    def created_since(moment):
        return db.query(func.count(UserDB.id)).filter(UserDB.created_at >= moment).scalar() or 0

    total_users = db.query(func.count(UserDB.id)).scalar() or 0
    active_users = db.query(func.count(UserDB.id)).filter(UserDB.status == AccountStatus.ACTIVE).scalar() or 0
    inactive_users = db.query(func.count(UserDB.id)).filter(UserDB.status == AccountStatus.INACTIVE).scalar() or 0

    return UserStatsResponse(
        stats=UserStats(
            totalUsers=total_users,
            activeUsers=active_users,
            inactiveUsers=inactive_users,
            newUsers=created_since(now - timedelta(days=30)),
            newUsersToday=created_since(start_of_day(now)),
            newUsersThisWeek=created_since(now - timedelta(days=7)),
        ),
        percentages=UserPercentages(
            activePercentage=percentage(active_users, total_users),
            inactivePercentage=percentage(inactive_users, total_users),
        ),
    )


@router.delete("/delete/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: AdminDB = Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Delete an account. Its past submissions stay in the reports."""
    user = _get_user(db, user_id)
    db.delete(user)
    db.commit()

    logger.info(f"User {user_id} deleted by admin {admin.email}")
    return MessageResponse(message="User deleted successfully")
