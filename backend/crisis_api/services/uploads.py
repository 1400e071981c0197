"""
Crisis Reporting API - Profile Image Uploads

Images are validated by extension and content type, capped in size, and
written under UPLOAD_DIR with a unique name. The app serves that directory
at /uploads.
"""
import logging
import os
import shutil
from uuid import uuid4

from fastapi import UploadFile

from ..errors import ValidationError

logger = logging.getLogger(__name__)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(2 * 1024 * 1024)))

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def validate_image(file: UploadFile) -> str:
    """Check type and size; return the lowercase file extension."""
    ext = os.path.splitext(file.filename or "")[1].lower()
    if ext not in ALLOWED_EXTENSIONS or file.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError("Only image files (jpg, jpeg, png, webp) are allowed!")

    file.file.seek(0, os.SEEK_END)
    size = file.file.tell()
    file.file.seek(0)
    if size > MAX_UPLOAD_BYTES:
        raise ValidationError(f"Image must be at most {MAX_UPLOAD_BYTES // (1024 * 1024)} MB")
    return ext


def save_profile_image(file: UploadFile, base_url: str, prefix: str = "user") -> str:
    """Store an uploaded image and return its public URL."""
    ext = validate_image(file)
    os.makedirs(UPLOAD_DIR, exist_ok=True)

    filename = f"{prefix}-{uuid4().hex}{ext}"
    file_path = os.path.join(UPLOAD_DIR, filename)
    with open(file_path, "wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    logger.info(f"Saved profile image {filename}")
    return f"{base_url.rstrip('/')}/uploads/{filename}"
