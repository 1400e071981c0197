"""
Crisis Reporting API - Exceptions

Routers raise these instead of bare HTTPException so every failure maps to
one status code and one JSON shape ({"success": false, "message": ...}).
The handlers that do the mapping are registered in main.py.
"""
from typing import Any, Dict, Optional


class CrisisAPIError(Exception):
    """Base exception for all API errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "message": self.message,
            "code": self.code,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(CrisisAPIError):
    """Missing or malformed input the client can correct."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="VALIDATION_ERROR", details=details)


class Unauthorized(CrisisAPIError):
    """Missing, invalid or expired bearer credential."""

    status_code = 401

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code="UNAUTHORIZED")


class NotFound(CrisisAPIError):
    """Referenced account does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message, code="NOT_FOUND")


class ServerError(CrisisAPIError):
    """Store failure or unexpected condition."""

    status_code = 500

    def __init__(self, message: str = "Server error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="SERVER_ERROR", details=details)
