"""Crisis Reporting API - Services"""
from .dashboard import DashboardComposer
from .user_summary import UserSummaryComposer

__all__ = ["DashboardComposer", "UserSummaryComposer"]
