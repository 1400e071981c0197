"""
Per-Account Summary

Lifetime submission counts for one account, the time of its most recent
submission, and a 7-day activity series.
"""
import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import sessionmaker

from ..database import utc_now
from ..models import CrisisCallDB, CrisisStabilizationDB, MobileCrisisDB
from .aggregation.engine import AggregationEngine, first_successful
from .aggregation.windows import Window, day_windows

logger = logging.getLogger(__name__)


class UserSummaryComposer:

    def __init__(self, session_factory: sessionmaker):
        self.engines = [
            AggregationEngine(session_factory, CrisisCallDB),
            AggregationEngine(session_factory, MobileCrisisDB),
            AggregationEngine(session_factory, CrisisStabilizationDB),
        ]

    async def _day_total(self, user_id: str, window: Window) -> int:
        counts = await asyncio.gather(*(e.count(window, user_id=user_id) for e in self.engines))
        return sum(counts)

    async def last_submitted_at(self, user_id: str) -> Optional[datetime]:
        """
        Whichever per-type lookup first finds a record wins; None when the
        account has never submitted.

        This is not necessarily the newest submission across all types.
        """
        return await first_successful(e.latest_created_at(user_id=user_id) for e in self.engines)

    async def weekly_insights(self, user_id: str, now: Optional[datetime] = None) -> list:
        windows = day_windows(now or utc_now(), days=7)
        totals = await asyncio.gather(*(self._day_total(user_id, w) for w in windows))
        return [
            {"day": w.day_label, "date": w.date_label, "total": total}
            for w, total in zip(windows, totals)
        ]

    async def summary(self, user_id: str, now: Optional[datetime] = None) -> dict:
        (calls, mobile, stabilization), last_submitted, weekly = await asyncio.gather(
            asyncio.gather(*(e.count(user_id=user_id) for e in self.engines)),
            self.last_submitted_at(user_id),
            self.weekly_insights(user_id, now),
        )

        logger.info(f"User summary for {user_id}: {calls + mobile + stabilization} submissions")

        return {
            "userId": user_id,
            "totalFormsSubmitted": calls + mobile + stabilization,
            "lastSubmittedAt": last_submitted.isoformat() if last_submitted else None,
            "formBreakdown": {
                "crisisCalls": calls,
                "mobileCrisis": mobile,
                "crisisStabilization": stabilization,
            },
            "weeklyInsights": weekly,
        }
