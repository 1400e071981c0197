"""
Crisis Reporting API - Submission Helpers
Shared by the crisis call, mobile crisis and stabilization routers.
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Optional
from uuid import uuid4
import logging

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from ..models import UserDB

logger = logging.getLogger(__name__)


class SubmissionRequest(BaseModel):
    """Base for submission payloads: snake_case fields, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmissionResponse(BaseModel):
    success: bool = True
    message: str
    data: dict


def _json_value(value):
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def serialize_submission(record, renames: Optional[Dict[str, str]] = None) -> dict:
    """ORM submission → camelCase dict of every column."""
    renames = renames or {}
    return {
        renames.get(column.key, to_camel(column.key)): _json_value(getattr(record, column.key))
        for column in record.__table__.columns
    }


def create_submission(db: Session, model, user: UserDB, payload: SubmissionRequest):
    """Insert one submission owned by user and return the stored record."""
    record = model(id=str(uuid4()), user_id=user.id, **payload.model_dump())
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info(f"{model.__tablename__} record {record.id} created by user {user.id}")
    return record

