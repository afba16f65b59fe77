"""
Recruiter performance summary for a reporting period.

Funnel step percentages, benchmark comparison, daily activity, top
sources, week-over-week trends and suggested action items.
"""

import math
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, List

from ..models.schemas import Lead, MessageEvent, ContactStatus, Tier
from ..models.insights import PerformanceReport, BenchmarkComparison, TrendDelta
from ..config.settings import (
    BENCHMARKS,
    NEAR_TARGET_RATIOS,
    ACTION_ITEM_THRESHOLDS,
    REPORT_LIMITS,
)
from .metrics import percent, round_half_up

CLOSED_STATUSES = (ContactStatus.CONVERTED.value, ContactStatus.UNQUALIFIED.value)


def _benchmark(value: int, target: int, near_ratio: float) -> BenchmarkComparison:
    if value >= target:
        status = "on_target"
    elif value >= target * near_ratio:
        status = "near_target"
    else:
        status = "below_target"
    return BenchmarkComparison(value=value, target=target, status=status)


def _trend(this_week: int, last_week: int) -> TrendDelta:
    if this_week > last_week:
        direction = "up"
    elif this_week < last_week:
        direction = "down"
    else:
        direction = "stable"
    return TrendDelta(
        this_week=this_week,
        last_week=last_week,
        change=percent(this_week - last_week, last_week),
        direction=direction,
    )


class RecruiterPerformanceAnalyzer:
    """
    Summarise recruiting activity against team benchmarks.
    """

    def __init__(
        self,
        benchmarks: Optional[Dict[str, Any]] = None,
        thresholds: Optional[Dict[str, Any]] = None,
    ):
        self.benchmarks = {**BENCHMARKS, **(benchmarks or {})}
        self.thresholds = {**ACTION_ITEM_THRESHOLDS, **(thresholds or {})}

    def process(
        self,
        period: str,
        leads: List[Lead],
        messages: Optional[List[MessageEvent]] = None,
        now: Optional[datetime] = None,
    ) -> PerformanceReport:
        """
        Build the performance report.

        Args:
            period: Period label echoed in the report
            leads: Non-archived leads created within the period
            messages: Message events within the period
            now: Reference time for trends and staleness

        Returns:
            PerformanceReport
        """
        messages = messages or []
        now = now or datetime.now(timezone.utc)

        def count(status: str) -> int:
            return sum(1 for l in leads if l.contact_status == status)

        total = len(leads)
        contacted = sum(1 for l in leads if l.contact_status != ContactStatus.NOT_CONTACTED.value)
        converted = count(ContactStatus.CONVERTED.value)
        qualified = count(ContactStatus.QUALIFIED.value)
        interested = count(ContactStatus.INTERESTED.value)
        referrals = count(ContactStatus.REFERRAL.value)

        funnel = {
            "new_to_contacted": percent(contacted, total),
            "contacted_to_interested": percent(interested, contacted),
            "interested_to_qualified": percent(qualified, interested),
            "qualified_to_converted": percent(converted, qualified),
            "overall_conversion": percent(converted, total),
            "referral_count": referrals,
            "referral_to_contacted": percent(contacted, referrals),
        }

        daily_activity = self._daily_activity(leads, messages)
        avg_messages = round_half_up(len(messages) / max(1, len(daily_activity)))
        contact_rate = percent(contacted, total)

        performance = {
            "contact_rate": _benchmark(
                contact_rate,
                self.benchmarks["contact_rate_target"],
                NEAR_TARGET_RATIOS["contact_rate"],
            ),
            "conversion_rate": _benchmark(
                percent(converted, total),
                self.benchmarks["conversion_rate_target"],
                NEAR_TARGET_RATIOS["conversion_rate"],
            ),
            "activity": _benchmark(
                avg_messages,
                self.benchmarks["messages_per_day_target"],
                NEAR_TARGET_RATIOS["activity"],
            ),
        }

        trends = self._trends(leads, now)

        return PerformanceReport(
            period=period,
            summary={
                "total_leads": total,
                "contacted": contacted,
                "converted": converted,
                "qualified": qualified,
                "interested": interested,
                "messages_sent": len(messages),
            },
            funnel=funnel,
            performance=performance,
            daily_activity=daily_activity,
            top_sources=self._top_sources(leads),
            trends=trends,
            action_items=self._action_items(leads, contact_rate, trends, now),
            generated_at=now,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _daily_activity(
        self,
        leads: List[Lead],
        messages: List[MessageEvent],
    ) -> Dict[str, Dict[str, int]]:
        activity: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"contacts": 0, "conversions": 0, "messages": 0}
        )
        for lead in leads:
            day = activity[lead.created_at.date().isoformat()]
            if lead.contact_status != ContactStatus.NOT_CONTACTED.value:
                day["contacts"] += 1
            if lead.contact_status == ContactStatus.CONVERTED.value:
                day["conversions"] += 1
        for message in messages:
            activity[message.sent_at.date().isoformat()]["messages"] += 1
        return dict(sorted(activity.items()))

    def _top_sources(self, leads: List[Lead]) -> List[Dict[str, Any]]:
        sources: Dict[str, Dict[str, int]] = defaultdict(lambda: {"count": 0, "converted": 0})
        for lead in leads:
            acc = sources[lead.referral_source or lead.campaign or "Direct"]
            acc["count"] += 1
            if lead.contact_status == ContactStatus.CONVERTED.value:
                acc["converted"] += 1

        ranked = sorted(sources.items(), key=lambda item: item[1]["count"], reverse=True)
        return [
            {
                "source": source,
                "count": acc["count"],
                "converted": acc["converted"],
                "conversion_rate": percent(acc["converted"], acc["count"]),
            }
            for source, acc in ranked[: REPORT_LIMITS["top_sources"]]
        ]

    def _trends(self, leads: List[Lead], now: datetime) -> Dict[str, TrendDelta]:
        one_week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)

        this_week = [l for l in leads if l.created_at >= one_week_ago]
        last_week = [l for l in leads if two_weeks_ago <= l.created_at < one_week_ago]

        def conversions(group: List[Lead]) -> int:
            return sum(1 for l in group if l.contact_status == ContactStatus.CONVERTED.value)

        return {
            "leads": _trend(len(this_week), len(last_week)),
            "conversions": _trend(conversions(this_week), conversions(last_week)),
        }

    def _action_items(
        self,
        leads: List[Lead],
        contact_rate: int,
        trends: Dict[str, TrendDelta],
        now: datetime,
    ) -> List[str]:
        items = []

        if contact_rate < self.benchmarks["contact_rate_target"] * self.thresholds["contact_rate_ratio"]:
            items.append("Contact rate is significantly below target - prioritize outreach")

        stale_days = self.thresholds["stale_days"]
        stale = 0
        for lead in leads:
            if lead.contact_status in CLOSED_STATUSES:
                continue
            last_touch = lead.last_contact_date or lead.created_at
            if math.floor((now - last_touch).total_seconds() / 86400) > stale_days:
                stale += 1
        if stale > self.thresholds["stale_leads_min"]:
            items.append(f"{stale} leads haven't been contacted in {stale_days}+ days")

        hot = sum(
            1 for l in leads
            if l.lead_quality == Tier.HOT.value and l.contact_status != ContactStatus.CONVERTED.value
        )
        if hot > 0:
            items.append(f"{hot} hot leads need immediate attention")

        conversions = trends["conversions"]
        if conversions.direction == "down" and conversions.change < self.thresholds["conversion_drop_pct"]:
            items.append("Conversion rate dropped significantly - review follow-up strategy")

        return items
