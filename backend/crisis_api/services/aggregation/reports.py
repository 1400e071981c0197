"""
Monthly Summary Reports

One builder per submission type. Each builder issues its whole battery of
aggregates at once, joins them, and reshapes the raw groups into the
response document. If any aggregate fails the join raises and no partial
report is produced.

totalRecords is counted once per report and is the denominator of every
percentage in it.
"""
import asyncio
import logging
from typing import Iterable, List

from sqlalchemy.orm import sessionmaker

from ...models import CrisisCallDB, MobileCrisisDB, CrisisStabilizationDB
from .engine import AggregationEngine, CrossTabCell, GroupCount
from .stats import average_per_record, minutes_to_hours, percentage, round_half_up
from .windows import Window, month_label, month_window

logger = logging.getLogger(__name__)

TOP_COUNTIES_LIMIT = 10


# =============================================================================
# SHAPING HELPERS
# =============================================================================

def flat_counts(groups: Iterable[GroupCount], key: str) -> List[dict]:
    return [{key: g.value, "count": g.count} for g in groups]


def breakdown(groups: List[GroupCount], key: str, total_records: int, list_key: str = "breakdown") -> dict:
    """
    {total, breakdown: [{<key>: value, count, percentage}]}

    total is the sum of the group counts shown, which is less than
    total_records when nulls were excluded or the groups were truncated.
    """
    return {
        "total": sum(g.count for g in groups),
        list_key: [
            {key: g.value, "count": g.count, "percentage": percentage(g.count, total_records)}
            for g in groups
        ],
    }


def cross_tab_rows(cells: Iterable[CrossTabCell], first_key: str, second_key: str) -> List[dict]:
    return [{first_key: c.first, second_key: c.second, "count": c.count} for c in cells]


def _header(window: Window, year: int, month: int) -> dict:
    return {"month": month_label(year, month), "period": window.as_dict()}


# =============================================================================
# CRISIS CALLS
# =============================================================================

async def build_crisis_call_report(session_factory: sessionmaker, year: int, month: int) -> dict:
    window = month_window(year, month)
    engine = AggregationEngine(session_factory, CrisisCallDB)

    total_records, by_county, by_type, type_by_county = await asyncio.gather(
        engine.count(window),
        engine.group_count(window, "call_by_county"),
        engine.group_count(window, "crisis_type"),
        engine.cross_tab(window, "call_by_county", "crisis_type"),
    )

    logger.info(f"Crisis call report {month_label(year, month)}: {total_records} records")

    return {
        **_header(window, year, month),
        "totalRecords": total_records,
        "callsByCounty": flat_counts(by_county, "county"),
        "callsByCrisisType": flat_counts(by_type, "crisisType"),
        "counties": breakdown(by_county, "county", total_records),
        "crisisTypes": breakdown(by_type, "crisisType", total_records),
        "crossTabulations": {
            "crisisTypeByCounty": cross_tab_rows(type_by_county, "county", "crisisType"),
        },
    }


# =============================================================================
# MOBILE CRISIS
# =============================================================================

async def build_mobile_crisis_report(session_factory: sessionmaker, year: int, month: int) -> dict:
    window = month_window(year, month)
    engine = AggregationEngine(session_factory, MobileCrisisDB)

    (
        total_records,
        by_source,
        total_dispatches,
        by_county,
        by_type,
        by_outcome,
        response_time,
        mean_response,
        on_scene_time,
        mean_on_scene,
        referrals_given,
        referrals_by_type,
        naloxone,
        follow_ups,
        individuals,
        insurance,
        age_groups,
        veteran_status,
        military,
        type_by_outcome,
        source_by_type,
    ) = await asyncio.gather(
        engine.count(window),
        engine.group_count(window, "referral_source"),
        engine.sum_stat(window, "total_dispatches"),
        engine.group_count(window, "dispatch_county"),
        engine.group_count(window, "crisis_type"),
        engine.group_count(window, "outcome"),
        engine.numeric_stats(window, "total_response_time"),
        engine.avg_stat(window, "mean_response_time"),
        engine.numeric_stats(window, "total_on_scene_time"),
        engine.avg_stat(window, "mean_on_scene_time"),
        engine.sum_stat(window, "referrals_given"),
        engine.group_count(window, "referral_type", skip_null=True),
        engine.sum_stat(window, "naloxone_dispensations"),
        engine.sum_stat(window, "follow_up_contacts"),
        engine.sum_stat(window, "individuals_served"),
        engine.group_count(window, "primary_insurance"),
        engine.group_count(window, "age_group"),
        engine.group_count(window, "veteran_status"),
        engine.group_count(window, "serving_in_military"),
        engine.cross_tab(window, "crisis_type", "outcome"),
        engine.cross_tab(window, "referral_source", "crisis_type"),
    )

    logger.info(f"Mobile crisis report {month_label(year, month)}: {total_records} records")

    return {
        **_header(window, year, month),
        "totalRecords": total_records,
        "referralsToMobileCrisis": breakdown(by_source, "source", total_records),
        "totalDispatches": total_dispatches,
        "dispatchesByCounty": breakdown(by_county, "county", total_records),
        "dispatchesByCrisisType": breakdown(by_type, "crisisType", total_records),
        "outcomes": breakdown(by_outcome, "outcome", total_records),
        "responseTime": {
            "totalMinutes": response_time.total,
            "totalHours": minutes_to_hours(response_time.total),
            "recordsCount": response_time.count,
        },
        "meanResponseTime": {
            "minutes": round_half_up(mean_response),
            "hours": minutes_to_hours(mean_response),
        },
        "onSceneTime": {
            "totalMinutes": on_scene_time.total,
            "totalHours": minutes_to_hours(on_scene_time.total),
            "recordsCount": on_scene_time.count,
        },
        "meanOnSceneTime": {
            "minutes": round_half_up(mean_on_scene),
            "hours": minutes_to_hours(mean_on_scene),
        },
        "referrals": {
            "totalGiven": referrals_given,
            "averagePerRecord": average_per_record(referrals_given, total_records),
            "byType": [
                {"type": g.value, "count": g.count, "percentage": percentage(g.count, total_records)}
                for g in referrals_by_type
            ],
        },
        "naloxoneDispensations": naloxone,
        "followUpContacts": follow_ups,
        "individualsServed": individuals,
        "demographics": {
            "primaryInsurance": breakdown(insurance, "insurance", total_records),
            "ageGroups": breakdown(age_groups, "ageGroup", total_records),
            "veteranStatus": breakdown(veteran_status, "status", total_records),
            "militaryService": breakdown(military, "status", total_records),
        },
        "crossTabulations": {
            "crisisTypeByOutcome": cross_tab_rows(type_by_outcome, "crisisType", "outcome"),
            "referralSourceByCrisisType": cross_tab_rows(source_by_type, "referralSource", "crisisType"),
        },
    }


# =============================================================================
# CRISIS STABILIZATION
# =============================================================================

async def build_stabilization_report(session_factory: sessionmaker, year: int, month: int) -> dict:
    window = month_window(year, month)
    engine = AggregationEngine(session_factory, CrisisStabilizationDB)

    (
        total_records,
        by_source,
        total_visits,
        by_type,
        by_outcome,
        stabilization,
        mean_stabilization,
        referrals_given,
        referrals_by_type,
        naloxone,
        follow_ups,
        individuals,
        top_counties,
        insurance,
        age_groups,
        veteran_status,
        military,
        type_by_outcome,
        source_by_type,
    ) = await asyncio.gather(
        engine.count(window),
        engine.group_count(window, "referrals_to_crisis_stabilization"),
        engine.sum_stat(window, "number_of_visits"),
        engine.group_count(window, "crisis_types"),
        engine.group_count(window, "outcome"),
        engine.numeric_stats(window, "total_stabilization_time"),
        engine.avg_stat(window, "mean_stabilization_time"),
        engine.sum_stat(window, "referrals_given"),
        engine.group_sum(window, "referrals_by_type", "referrals_given"),
        engine.sum_stat(window, "naloxone_dispensations"),
        engine.sum_stat(window, "follow_up_contacts"),
        engine.sum_stat(window, "individuals_served"),
        engine.group_count(window, "client_county_of_residence", limit=TOP_COUNTIES_LIMIT),
        engine.group_count(window, "client_primary_insurance"),
        engine.group_count(window, "client_age_groups"),
        engine.group_count(window, "client_veteran_status"),
        engine.group_count(window, "client_serving_in_military"),
        engine.cross_tab(window, "crisis_types", "outcome"),
        engine.cross_tab(window, "referrals_to_crisis_stabilization", "crisis_types"),
    )

    logger.info(f"Stabilization report {month_label(year, month)}: {total_records} records")

    return {
        "summary": {
            **_header(window, year, month),
            "totalRecords": total_records,
            "totalIndividualsServed": individuals,
            "totalVisits": total_visits,
            "averageVisitsPerRecord": average_per_record(total_visits, total_records),
        },
        "referralsToCrisisStabilization": breakdown(by_source, "source", total_records),
        "crisisTypes": breakdown(by_type, "type", total_records),
        "outcomes": breakdown(by_outcome, "outcome", total_records),
        "stabilizationTime": {
            "totalMinutes": stabilization.total,
            "totalHours": minutes_to_hours(stabilization.total),
            "averageMinutes": round_half_up(stabilization.average),
            "averageHours": minutes_to_hours(stabilization.average),
            "minMinutes": stabilization.minimum,
            "maxMinutes": stabilization.maximum,
            "recordsCount": stabilization.count,
        },
        "meanStabilizationTime": {
            "minutes": round_half_up(mean_stabilization),
            "hours": minutes_to_hours(mean_stabilization),
        },
        "referrals": {
            "totalGiven": referrals_given,
            "averagePerRecord": average_per_record(referrals_given, total_records),
            "byType": [
                {
                    "type": g.value,
                    "totalReferrals": g.total,
                    "recordCount": g.count,
                    "averagePerRecord": average_per_record(g.total, g.count),
                    "percentage": percentage(g.count, total_records),
                }
                for g in referrals_by_type
            ],
        },
        "naloxoneDispensations": {
            "total": naloxone,
            "averagePerRecord": average_per_record(naloxone, total_records),
        },
        "followUpContacts": {
            "total": follow_ups,
            "averagePerRecord": average_per_record(follow_ups, total_records),
        },
        "clientDemographics": {
            "countyOfResidence": breakdown(top_counties, "county", total_records, list_key="topCounties"),
            "primaryInsurance": breakdown(insurance, "insurance", total_records),
            "ageGroups": breakdown(age_groups, "ageGroup", total_records),
            "veteranStatus": breakdown(veteran_status, "status", total_records),
            "servingInMilitary": breakdown(military, "status", total_records),
        },
        "crossTabulations": {
            "crisisTypeByOutcome": cross_tab_rows(type_by_outcome, "crisisType", "outcome"),
            "referralSourceByCrisisType": cross_tab_rows(source_by_type, "referralSource", "crisisType"),
        },
    }
