"""
Test Suite: Per-Account Summary

Lifetime counts, last submission time and 7-day insights for one account.
"""
import asyncio
from datetime import datetime
from unittest.mock import patch

from crisis_api.services.aggregation import AggregationEngine
from crisis_api.services.user_summary import UserSummaryComposer

# Wednesday 15 October 2025, 12:00 UTC
NOW = datetime(2025, 10, 15, 12, 0, 0)


def run(coro):
    return asyncio.run(coro)


class TestUserSummary:

    def test_account_without_submissions(self, session_factory):
        data = run(UserSummaryComposer(session_factory).summary("user-1", now=NOW))

        assert data["userId"] == "user-1"
        assert data["totalFormsSubmitted"] == 0
        assert data["lastSubmittedAt"] is None
        assert data["formBreakdown"] == {"crisisCalls": 0, "mobileCrisis": 0, "crisisStabilization": 0}
        assert len(data["weeklyInsights"]) == 7
        assert all(day["total"] == 0 for day in data["weeklyInsights"])
        assert data["weeklyInsights"][-1] == {"day": "Wed", "date": "2025-10-15", "total": 0}

    def test_counts_only_own_submissions(self, session_factory, make_crisis_call, make_mobile_crisis, make_stabilization):
        make_crisis_call(user_id="user-1", created_at=datetime(2025, 10, 14, 9, 0))
        make_crisis_call(user_id="user-1", created_at=datetime(2025, 10, 1, 9, 0))
        make_mobile_crisis(user_id="user-1", created_at=datetime(2025, 10, 14, 10, 0))
        make_stabilization(user_id="user-2", created_at=datetime(2025, 10, 14, 11, 0))

        data = run(UserSummaryComposer(session_factory).summary("user-1", now=NOW))

        assert data["totalFormsSubmitted"] == 3
        assert data["formBreakdown"] == {"crisisCalls": 2, "mobileCrisis": 1, "crisisStabilization": 0}
        by_date = {day["date"]: day["total"] for day in data["weeklyInsights"]}
        assert by_date["2025-10-14"] == 2
        assert sum(by_date.values()) == 2

    def test_last_submitted_from_only_submission_type(self, session_factory, make_stabilization):
        make_stabilization(user_id="user-1", created_at=datetime(2025, 10, 3, 8, 30))

        data = run(UserSummaryComposer(session_factory).summary("user-1", now=NOW))

        assert data["lastSubmittedAt"] == "2025-10-03T08:30:00"

    def test_last_submitted_is_one_of_the_latest(self, session_factory, make_crisis_call, make_mobile_crisis):
        make_crisis_call(user_id="user-1", created_at=datetime(2025, 10, 1))
        make_crisis_call(user_id="user-1", created_at=datetime(2025, 10, 4))
        make_mobile_crisis(user_id="user-1", created_at=datetime(2025, 10, 7))

        last = run(UserSummaryComposer(session_factory).last_submitted_at("user-1"))

        # Whichever type answers first wins, but it is always that type's newest record
        assert last in (datetime(2025, 10, 4), datetime(2025, 10, 7))

    def test_lookup_errors_are_not_fatal(self, session_factory):
        with patch.object(AggregationEngine, "latest_created_at", side_effect=RuntimeError("store down")):
            last = run(UserSummaryComposer(session_factory).last_submitted_at("user-1"))

        assert last is None
