"""
Dashboard Composer

Builds the admin dashboard: submission counts for a lookback period, user
totals and growth, newly created accounts, and a day-by-day comparison of
the current and previous week across all three submission types.
"""
import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..database import utc_now
from ..models import AccountStatus, CrisisCallDB, CrisisStabilizationDB, MobileCrisisDB, UserDB
from .aggregation.engine import AggregationEngine
from .aggregation.stats import percent_change
from .aggregation.windows import Window, day_windows

logger = logging.getLogger(__name__)

RECENT_USERS_LIMIT = 10
RECENT_USER_FIELDS = ["id", "name", "email", "status", "profile_image", "created_at"]


def _recent_user(row: dict) -> dict:
    return {
        "id": row["id"],
        "name": row["name"],
        "email": row["email"],
        "status": row["status"],
        "profileImage": row["profile_image"],
        "createdAt": row["created_at"].isoformat() if row["created_at"] else None,
    }


class DashboardComposer:
    """Composes the dashboard summary from the user and submission tables."""

    def __init__(self, session_factory: sessionmaker):
        self.users = AggregationEngine(session_factory, UserDB)
        self.crisis_calls = AggregationEngine(session_factory, CrisisCallDB)
        self.mobile_crisis = AggregationEngine(session_factory, MobileCrisisDB)
        self.stabilization = AggregationEngine(session_factory, CrisisStabilizationDB)

    @property
    def submission_engines(self) -> List[AggregationEngine]:
        return [self.crisis_calls, self.mobile_crisis, self.stabilization]

    async def _day_counts(self, window: Window) -> List[int]:
        return list(await asyncio.gather(*(e.count(window) for e in self.submission_engines)))

    async def weekly_comparison(self, now: Optional[datetime] = None) -> dict:
        """
        Per-day submission counts for the last 7 calendar days (today
        included) and the total for the 7 days before that.
        """
        now = now or utc_now()
        current_days = day_windows(now, days=7)
        previous_days = day_windows(now, days=7, offset_days=7)

        per_day = await asyncio.gather(
            *(self._day_counts(w) for w in current_days + previous_days)
        )
        current_counts, previous_counts = per_day[:7], per_day[7:]

        current_week = []
        for window, (calls, mobile, stabilization) in zip(current_days, current_counts):
            current_week.append({
                "day": window.day_label,
                "date": window.date_label,
                "count": calls + mobile + stabilization,
                "crisisCalls": calls,
                "mobileCrisis": mobile,
                "stabilization": stabilization,
            })

        current_total = sum(day["count"] for day in current_week)
        previous_total = sum(sum(counts) for counts in previous_counts)

        return {
            "currentWeek": current_week,
            "comparison": {
                "currentWeekTotal": current_total,
                "previousWeekTotal": previous_total,
                "percentageChange": percent_change(current_total, previous_total),
            },
        }

    async def new_accounts_since(self, cutoff: datetime, now: Optional[datetime] = None) -> dict:
        """Accounts created in [cutoff, now): count, newest 10, and per-day counts."""
        window = Window(cutoff, now or utc_now())

        count, recent, timestamps = await asyncio.gather(
            self.users.count(window),
            self.users.find_recent(window, RECENT_USER_FIELDS, RECENT_USERS_LIMIT),
            self.users.created_timestamps(window),
        )

        per_day = Counter(ts.strftime("%Y-%m-%d") for ts in timestamps)
        return {
            "count": count,
            "recentUsers": [_recent_user(row) for row in recent],
            "dailyBreakdown": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
        }

    async def dashboard_summary(self, days: int = 7, now: Optional[datetime] = None) -> dict:
        now = now or utc_now()
        cutoff = now - timedelta(days=days)
        window = Window(cutoff, now)

        (
            total_users,
            active_users,
            inactive_users,
            baseline_users,
            crisis_calls,
            mobile_crisis,
            stabilization,
            weekly,
            new_users,
        ) = await asyncio.gather(
            self.users.count(),
            self.users.count(status=AccountStatus.ACTIVE),
            self.users.count(status=AccountStatus.INACTIVE),
            # Cumulative count up to the cutoff, not a windowed count
            self.users.count(created_before=cutoff),
            self.crisis_calls.count(window),
            self.mobile_crisis.count(window),
            self.stabilization.count(window),
            self.weekly_comparison(now),
            self.new_accounts_since(cutoff, now),
        )

        logger.info(
            f"Dashboard summary ({days}d): {crisis_calls + mobile_crisis + stabilization} submissions, "
            f"{total_users} users"
        )

        return {
            "totalFormSubmitted": crisis_calls + mobile_crisis + stabilization,
            "crisisCalls": crisis_calls,
            "mobileCrisis": mobile_crisis,
            "crisisStabilization": stabilization,
            "totalUsers": total_users,
            "activeUsers": active_users,
            "inactiveUsers": inactive_users,
            "userGrowth": percent_change(total_users, baseline_users),
            "newUsers": new_users,
            "weeklySubmissions": weekly,
        }
