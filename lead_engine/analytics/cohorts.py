"""
Funnel / Cohort Aggregation
===========================
Group leads, contact history and message events into conversion metrics.

Passes (each a single O(n) sweep with dict-of-accumulator grouping):
- Country: status counts, contact / interest / conversion rates
- Contact method: distinct leads touched per method
- Outcome: distinct leads touched per free-text outcome
- Source: referral source or campaign
- Readiness: latest checklist answers per lead
- Intake: intake label rollup
- Contact timing: hour of day, day of week, heatmap

Passes share no mutable state and may run on a thread pool.
"""

import logging
from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Optional, Dict, Any, List, Iterable, Callable
from datetime import timezone, tzinfo
from zoneinfo import ZoneInfo

from ..models.schemas import Lead, ContactHistoryEntry, MessageEvent, MessageDirection, ContactStatus
from ..models.insights import (
    CohortReport,
    CountryInsight,
    ContactMethodInsight,
    OutcomeInsight,
    SourceInsight,
    ReadinessInsight,
    IntakeInsight,
    ReadinessSummary,
    FunnelTotals,
    TimeBucket,
    HeatmapCell,
    TimeInsights,
)
from ..config.settings import (
    ENGINE_CONFIG,
    UNCONTACTED_STATUSES,
    INTERESTED_OR_BETTER,
    READINESS_FIELDS,
    CONTACT_METHOD_NAMES,
    NON_RESPONSE_OUTCOMES,
    INSIGHT_THRESHOLDS,
    REPORT_LIMITS,
)
from .metrics import percent, mean

logger = logging.getLogger(__name__)

UNKNOWN_COUNTRY = "Unknown"
UNKNOWN_SOURCE = "Direct / Unknown"
NO_OUTCOME = "No outcome recorded"
UNSPECIFIED_INTAKE = "Not specified"

HOUR_LABELS = [
    "12am" if h == 0 else f"{h}am" if h < 12 else "12pm" if h == 12 else f"{h - 12}pm"
    for h in range(24)
]
DAY_LABELS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

CONVERTED = ContactStatus.CONVERTED.value


def resolve_timezone(name: str) -> tzinfo:
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def format_method_name(method: str) -> str:
    return CONTACT_METHOD_NAMES.get(method.lower(), method)


def latest_readiness(contact_history: Iterable[ContactHistoryEntry]) -> Dict[str, ContactHistoryEntry]:
    """
    Current readiness assessment per lead.

    Only entries with at least one non-null checklist answer count; among
    those the latest contacted_at wins.
    """
    latest: Dict[str, ContactHistoryEntry] = {}
    for entry in contact_history:
        if all(getattr(entry, field) is None for field, _ in READINESS_FIELDS):
            continue
        current = latest.get(entry.lead_id)
        if current is None or entry.contacted_at > current.contacted_at:
            latest[entry.lead_id] = entry
    return latest


class CohortAggregationStage:
    """
    Roll lead collections up into per-dimension funnel metrics.
    """

    def __init__(
        self,
        reporting_timezone: Optional[str] = None,
        thresholds: Optional[Dict[str, Any]] = None,
    ):
        self.timezone = resolve_timezone(reporting_timezone or ENGINE_CONFIG["reporting_timezone"])
        self.thresholds = {**INSIGHT_THRESHOLDS, **(thresholds or {})}

    def process(
        self,
        leads: List[Lead],
        contact_history: Optional[List[ContactHistoryEntry]] = None,
        messages: Optional[List[MessageEvent]] = None,
        max_workers: Optional[int] = None,
    ) -> CohortReport:
        """
        Aggregate a lead cohort.

        Args:
            leads: Leads already filtered by period/status
            contact_history: Contact attempts for the cohort
            messages: Message events for the cohort
            max_workers: Run the passes on a thread pool of this size

        Returns:
            CohortReport with every dimension; list dimensions sorted by volume
        """
        contact_history = contact_history or []
        messages = messages or []

        status_by_lead = {lead.id: lead.contact_status for lead in leads}
        readiness = latest_readiness(contact_history)

        passes: Dict[str, Callable[[], Any]] = {
            "summary": lambda: self._summary_pass(leads, messages),
            "country_insights": lambda: self._country_pass(leads),
            "contact_method_insights": lambda: self._method_pass(contact_history, status_by_lead),
            "outcome_insights": lambda: self._outcome_pass(contact_history, status_by_lead),
            "source_insights": lambda: self._source_pass(leads),
            "readiness_insights": lambda: self._readiness_pass(readiness, status_by_lead),
            "intake_insights": lambda: self._intake_pass(leads, readiness),
            "time_insights": lambda: self._timing_pass(contact_history, status_by_lead),
        }

        if max_workers and max_workers > 0:
            results = {}
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                futures = {executor.submit(fn): key for key, fn in passes.items()}
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
        else:
            results = {key: fn() for key, fn in passes.items()}

        results["readiness_summary"] = self._readiness_summary(
            readiness, results["readiness_insights"]
        )

        logger.debug(
            "Aggregated %d leads, %d contacts, %d messages",
            len(leads), len(contact_history), len(messages),
        )
        return CohortReport(**results)

    # =========================================================================
    # Passes
    # =========================================================================

    def _summary_pass(self, leads: List[Lead], messages: List[MessageEvent]) -> FunnelTotals:
        total = len(leads)
        contacted = sum(1 for l in leads if l.contact_status not in UNCONTACTED_STATUSES)
        interested = sum(1 for l in leads if l.contact_status in INTERESTED_OR_BETTER)
        converted = sum(1 for l in leads if l.contact_status == CONVERTED)
        received = sum(1 for m in messages if m.direction == MessageDirection.INBOUND)

        return FunnelTotals(
            total_leads=total,
            total_contacted=contacted,
            total_interested=interested,
            total_converted=converted,
            overall_contact_rate=percent(contacted, total),
            overall_conversion_rate=percent(converted, total),
            messages_sent=len(messages) - received,
            messages_received=received,
        )

    def _country_pass(self, leads: List[Lead]) -> List[CountryInsight]:
        groups: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {"statuses": Counter(), "score_total": 0}
        )
        for lead in leads:
            acc = groups[lead.country or UNKNOWN_COUNTRY]
            acc["statuses"][lead.contact_status] += 1
            acc["score_total"] += lead.lead_score or 0

        insights = []
        for country, acc in groups.items():
            statuses: Counter = acc["statuses"]
            total = sum(statuses.values())
            contacted = sum(n for s, n in statuses.items() if s not in UNCONTACTED_STATUSES)
            interested = statuses.get(ContactStatus.INTERESTED.value, 0)

            insights.append(CountryInsight(
                country=country,
                total_leads=total,
                status_counts=dict(statuses),
                contacted=contacted,
                interested=interested,
                qualified=statuses.get(ContactStatus.QUALIFIED.value, 0),
                converted=statuses.get(CONVERTED, 0),
                contact_rate=percent(contacted, total),
                interest_rate=percent(interested, contacted),
                conversion_rate=percent(statuses.get(CONVERTED, 0), total),
                avg_lead_score=mean(acc["score_total"], total),
            ))

        insights.sort(key=lambda c: c.total_leads, reverse=True)
        return insights

    def _touch_groups(
        self,
        contact_history: List[ContactHistoryEntry],
        status_by_lead: Dict[str, str],
        key: Callable[[ContactHistoryEntry], str],
    ) -> Dict[str, Dict[str, Any]]:
        """Group contacts by key, tracking distinct leads touched / interested / converted."""
        groups: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {"count": 0, "touched": set(), "interested": set(), "converted": set()}
        )
        for entry in contact_history:
            acc = groups[key(entry)]
            acc["count"] += 1
            acc["touched"].add(entry.lead_id)
            status = status_by_lead.get(entry.lead_id)
            if status in INTERESTED_OR_BETTER:
                acc["interested"].add(entry.lead_id)
            if status == CONVERTED:
                acc["converted"].add(entry.lead_id)
        return groups

    def _method_pass(
        self,
        contact_history: List[ContactHistoryEntry],
        status_by_lead: Dict[str, str],
    ) -> List[ContactMethodInsight]:
        groups = self._touch_groups(
            contact_history, status_by_lead, lambda e: e.contact_type or "unknown"
        )
        insights = [
            ContactMethodInsight(
                method=format_method_name(method),
                total_contacts=acc["count"],
                leads_touched=len(acc["touched"]),
                leads_interested=len(acc["interested"]),
                leads_converted=len(acc["converted"]),
                success_rate=percent(len(acc["interested"]), len(acc["touched"])),
                conversion_rate=percent(len(acc["converted"]), len(acc["touched"])),
            )
            for method, acc in groups.items()
        ]
        insights.sort(key=lambda m: m.total_contacts, reverse=True)
        return insights

    def _outcome_pass(
        self,
        contact_history: List[ContactHistoryEntry],
        status_by_lead: Dict[str, str],
    ) -> List[OutcomeInsight]:
        groups = self._touch_groups(
            contact_history, status_by_lead, lambda e: e.outcome or NO_OUTCOME
        )
        insights = [
            OutcomeInsight(
                outcome=outcome,
                count=acc["count"],
                leads_touched=len(acc["touched"]),
                led_to_interested=len(acc["interested"]),
                led_to_converted=len(acc["converted"]),
                success_rate=percent(len(acc["interested"]), len(acc["touched"])),
            )
            for outcome, acc in groups.items()
        ]
        insights.sort(key=lambda o: o.count, reverse=True)
        return insights

    def _source_pass(self, leads: List[Lead]) -> List[SourceInsight]:
        groups: Dict[str, Dict[str, int]] = defaultdict(
            lambda: {"total": 0, "converted": 0, "score_total": 0}
        )
        for lead in leads:
            acc = groups[lead.referral_source or lead.campaign or UNKNOWN_SOURCE]
            acc["total"] += 1
            if lead.contact_status == CONVERTED:
                acc["converted"] += 1
            acc["score_total"] += lead.lead_score or 0

        insights = [
            SourceInsight(
                source=source,
                total_leads=acc["total"],
                converted=acc["converted"],
                conversion_rate=percent(acc["converted"], acc["total"]),
                avg_score=mean(acc["score_total"], acc["total"]),
            )
            for source, acc in groups.items()
        ]
        insights.sort(key=lambda s: s.total_leads, reverse=True)
        return insights

    def _readiness_pass(
        self,
        readiness: Dict[str, ContactHistoryEntry],
        status_by_lead: Dict[str, str],
    ) -> List[ReadinessInsight]:
        insights = []
        for field, label in READINESS_FIELDS:
            positive = negative = converted_positive = converted_negative = 0
            for lead_id, entry in readiness.items():
                value = getattr(entry, field)
                if value is None:
                    continue
                is_converted = status_by_lead.get(lead_id) == CONVERTED
                if value is True:
                    positive += 1
                    converted_positive += is_converted
                else:
                    negative += 1
                    converted_negative += is_converted

            assessed = positive + negative
            if not assessed:
                continue

            insights.append(ReadinessInsight(
                field=field,
                label=label,
                total_assessed=assessed,
                positive_count=positive,
                positive_rate=percent(positive, assessed),
                converted_with_positive=converted_positive,
                conversion_rate_with_positive=percent(converted_positive, positive),
                converted_with_negative=converted_negative,
                conversion_rate_with_negative=percent(converted_negative, negative),
            ))
        return insights

    def _intake_pass(
        self,
        leads: List[Lead],
        readiness: Dict[str, ContactHistoryEntry],
    ) -> List[IntakeInsight]:
        groups: Dict[str, Counter] = defaultdict(Counter)
        for lead in leads:
            acc = groups[lead.intake or UNSPECIFIED_INTAKE]
            acc["total"] += 1
            acc[lead.contact_status] += 1
            entry = readiness.get(lead.id)
            if entry is not None and entry.ready_to_proceed is True:
                acc["ready"] += 1

        min_unspecified = self.thresholds["unspecified_intake_min_leads"]
        insights = [
            IntakeInsight(
                intake=intake,
                total_leads=acc["total"],
                interested=acc[ContactStatus.INTERESTED.value],
                qualified=acc[ContactStatus.QUALIFIED.value],
                converted=acc[CONVERTED],
                conversion_rate=percent(acc[CONVERTED], acc["total"]),
                ready_to_proceed=acc["ready"],
            )
            for intake, acc in groups.items()
            if intake != UNSPECIFIED_INTAKE or acc["total"] > min_unspecified
        ]
        insights.sort(key=lambda i: i.total_leads, reverse=True)
        return insights

    def _timing_pass(
        self,
        contact_history: List[ContactHistoryEntry],
        status_by_lead: Dict[str, str],
    ) -> TimeInsights:
        hours = [Counter() for _ in range(24)]
        days = [Counter() for _ in range(7)]
        heatmap = [[Counter() for _ in range(24)] for _ in range(7)]

        for entry in contact_history:
            local = entry.contacted_at.astimezone(self.timezone)
            hour = local.hour
            day = (local.weekday() + 1) % 7  # Sunday first

            outcome = (entry.outcome or "").lower()
            responded = not any(phrase in outcome for phrase in NON_RESPONSE_OUTCOMES)
            successful = status_by_lead.get(entry.lead_id) in INTERESTED_OR_BETTER

            for acc in (hours[hour], days[day], heatmap[day][hour]):
                acc["contacts"] += 1
                acc["successful"] += successful
            if responded:
                hours[hour]["responses"] += 1
                days[day]["responses"] += 1
            else:
                hours[hour]["voicemails"] += 1
                days[day]["voicemails"] += 1

        total = len(contact_history)

        def bucket(index: int, label: str, acc: Counter) -> TimeBucket:
            return TimeBucket(
                index=index,
                label=label,
                contacts=acc["contacts"],
                successful=acc["successful"],
                responses=acc["responses"],
                voicemails=acc["voicemails"],
                success_rate=percent(acc["successful"], acc["responses"]),
                response_rate=percent(acc["responses"], acc["contacts"]),
                volume_pct=percent(acc["contacts"], total),
            )

        by_hour = [bucket(h, HOUR_LABELS[h], hours[h]) for h in range(24)]
        by_day = [bucket(d, DAY_LABELS[d], days[d]) for d in range(7)]

        min_responses = self.thresholds["timing_min_responses"]

        def success_ratio(b: TimeBucket) -> float:
            return b.successful / b.responses if b.responses else 0.0

        active_hours = [b for b in by_hour if b.responses >= min_responses]
        active_days = [b for b in by_day if b.responses >= min_responses]

        return TimeInsights(
            total_contacts=total,
            by_hour=by_hour,
            by_day=by_day,
            heatmap=[
                HeatmapCell(
                    day=d,
                    hour=h,
                    contacts=heatmap[d][h]["contacts"],
                    successful=heatmap[d][h]["successful"],
                    success_rate=percent(heatmap[d][h]["successful"], heatmap[d][h]["contacts"]),
                )
                for d in range(7)
                for h in range(24)
            ],
            best_hours=sorted(active_hours, key=success_ratio, reverse=True)[:5],
            best_days=sorted(active_days, key=success_ratio, reverse=True)[:3],
            peak_hours=sorted(active_hours, key=lambda b: b.contacts, reverse=True)[:3],
        )

    # =========================================================================
    # Readiness summary
    # =========================================================================

    def _readiness_summary(
        self,
        readiness: Dict[str, ContactHistoryEntry],
        readiness_insights: List[ReadinessInsight],
    ) -> ReadinessSummary:
        assessed = len(readiness)
        ready = sum(1 for entry in readiness.values() if entry.ready_to_proceed is True)

        checks = positives = 0
        for entry in readiness.values():
            for field, _ in READINESS_FIELDS:
                value = getattr(entry, field)
                if value is not None:
                    checks += 1
                    positives += value is True

        return ReadinessSummary(
            total_assessed=assessed,
            ready_to_proceed=ready,
            ready_rate=percent(ready, assessed),
            avg_readiness_score=percent(positives, checks),
            common_blockers=self.find_blockers(readiness_insights),
        )

    def find_blockers(self, readiness_insights: List[ReadinessInsight]) -> List[str]:
        """Labels of the lowest-scoring readiness fields with enough assessments."""
        candidates = [
            r for r in readiness_insights
            if r.positive_rate < self.thresholds["blocker_max_positive_rate"]
            and r.total_assessed >= self.thresholds["blocker_min_assessed"]
        ]
        candidates.sort(key=lambda r: r.positive_rate)
        return [r.label for r in candidates[: self.thresholds["blocker_limit"]]]


def apply_report_limits(report: CohortReport, limits: Optional[Dict[str, int]] = None) -> CohortReport:
    """Truncate the long tails of a report for display."""
    limits = {**REPORT_LIMITS, **(limits or {})}
    return report.model_copy(update={
        "country_insights": report.country_insights[: limits["countries"]],
        "outcome_insights": report.outcome_insights[: limits["outcomes"]],
        "source_insights": report.source_insights[: limits["sources"]],
        "intake_insights": report.intake_insights[: limits["intakes"]],
    })
