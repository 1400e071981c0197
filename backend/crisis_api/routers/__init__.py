"""Crisis Reporting API - API Routers"""
from .users import router as users_router
from .admin import router as admin_router
from .user_management import router as user_management_router
from .user_summary import router as user_summary_router
from .crisis_calls import router as crisis_calls_router
from .mobile_crisis import router as mobile_crisis_router
from .crisis_stabilization import router as crisis_stabilization_router
from .dashboard import router as dashboard_router

__all__ = [
    "users_router",
    "admin_router",
    "user_management_router",
    "user_summary_router",
    "crisis_calls_router",
    "mobile_crisis_router",
    "crisis_stabilization_router",
    "dashboard_router",
]
