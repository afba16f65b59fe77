"""
Lead Intelligence Engine - Main Orchestrator
============================================
Wires the scoring stages and cohort analytics to a lead store:
  Stage 1: Phone Geolocation → Stage 2: Field Quality →
  Stage 3: Composite Score | Stage 4: Rule-Based Tier Score
  Analytics: Cohorts → Insights, Pipeline, Recruiter Performance

Scoring and aggregation are pure; every side effect (store reads and
score write-back) happens here.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Optional, List, Dict, Any, Callable

from .models.schemas import (
    Lead,
    StrategyScore,
    Recommendation,
    ScoreSummary,
    CalculateResult,
    UpdateResult,
    ContactStatus,
    Tier,
)
from .models.insights import RecruitmentInsights, PipelineSnapshot, PerformanceReport
from .models.scoring_config import ScoringConfig, create_default_scoring_config
from .stages import STRATEGIES
from .stages.base import ScoringStrategy, ScoringContext
from .stages.stage2_fields import FieldQualityStage
from .stages.stage3_composite import CompositeScoringStage
from .stages.stage4_rules import RuleBasedScoringStage
from .analytics.cohorts import CohortAggregationStage, apply_report_limits
from .analytics.insights import InsightGenerationStage
from .analytics.pipeline import PipelineAnalyzer
from .analytics.performance import RecruiterPerformanceAnalyzer
from .analytics.periods import period_start
from .analytics.metrics import mean
from .store import LeadStore, InMemoryLeadStore
from .errors import ValidationError, UpstreamStoreError, LeadEngineError
from .config.settings import ENGINE_CONFIG, ARCHIVED_STATUSES, STUCK_THRESHOLD_DAYS

logger = logging.getLogger(__name__)

TIER_PRIORITY = {Tier.HOT.value: 1, Tier.WARM.value: 2, Tier.COLD.value: 3}
STUCK_EXCLUDED_STATUSES = [ContactStatus.CONVERTED.value, ContactStatus.UNQUALIFIED.value]
STUCK_LEADS_LIMIT = 100


class LeadIntelligenceEngine:
    """
    Main engine: score leads, write scores back, and report on the pipeline.
    """

    def __init__(
        self,
        store: Optional[LeadStore] = None,
        scoring_config: Optional[ScoringConfig] = None,
        reporting_timezone: Optional[str] = None,
        cohort_workers: Optional[int] = None,
        bulk_limit: Optional[int] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Lead store (defaults to an empty in-memory store)
            scoring_config: Rule / tier / bucket configuration
            reporting_timezone: IANA zone for hour and weekday bucketing
            cohort_workers: Thread pool size for cohort passes (0 = inline)
            bulk_limit: Max leads scored by calculate() without explicit ids
        """
        self.store = store if store is not None else InMemoryLeadStore()
        self.config = scoring_config or create_default_scoring_config()

        self.fields = FieldQualityStage()
        self.strategies: Dict[str, ScoringStrategy] = {
            CompositeScoringStage.name: CompositeScoringStage(self.config, self.fields),
            RuleBasedScoringStage.name: RuleBasedScoringStage(self.config),
        }

        self.cohorts = CohortAggregationStage(reporting_timezone)
        self.insights = InsightGenerationStage()
        self.pipeline = PipelineAnalyzer()
        self.performance = RecruiterPerformanceAnalyzer()

        self.cohort_workers = (
            cohort_workers if cohort_workers is not None else ENGINE_CONFIG["cohort_workers"]
        )
        self.bulk_limit = bulk_limit or ENGINE_CONFIG["bulk_calculate_limit"]

        self.stats = self._empty_stats()

    # =========================================================================
    # Scoring
    # =========================================================================

    def list_scoring_rules(self) -> Dict[str, Any]:
        """Rules, hot/warm/cold tier bounds and composite bucket thresholds."""
        return {
            "rules": [rule.model_dump() for rule in self.config.rules],
            "tiers": {
                tier.tier: {"min": tier.min, "max": tier.max, "description": tier.description}
                for tier in self.config.tiers
            },
            "quality_buckets": [
                {"label": label, "min": threshold}
                for threshold, label in self.config.quality_buckets
            ],
            "strategies": {name: s.description for name, s in self.strategies.items()},
        }

    def get_strategy(self, strategy: str) -> ScoringStrategy:
        if strategy not in self.strategies:
            raise ValidationError(
                f"Unknown scoring strategy '{strategy}'",
                details={"accepted": sorted(STRATEGIES)},
            )
        return self.strategies[strategy]

    def score_lead(
        self,
        lead: Lead,
        strategy: str = "rules",
        context: Optional[ScoringContext] = None,
    ) -> StrategyScore:
        """
        Score a single lead with the named strategy.

        Args:
            lead: Lead to score
            strategy: "rules" or "composite"
            context: Clock and interaction count (defaults to now, none)

        Returns:
            Strategy-specific StrategyScore
        """
        result = self.get_strategy(strategy).process(lead, context)
        self.stats["leads_scored"] += 1
        return result

    def score_record(self, record: Dict[str, Any], strategy: str = "rules") -> StrategyScore:
        """Score a raw dict without touching the store."""
        return self.score_lead(self._build_lead(record), strategy)

    def calculate(self, lead_ids: Optional[List[str]] = None, strategy: str = "rules") -> CalculateResult:
        """
        Score leads without writing anything back.

        Args:
            lead_ids: Leads to score; None scores the first bulk_limit leads
            strategy: Scoring strategy name

        Returns:
            CalculateResult with per-lead scores, tier counts and average
        """
        self.get_strategy(strategy)
        if lead_ids:
            leads = self._store_call("query_leads", ids=lead_ids)
        else:
            leads = self._store_call("query_leads", limit=self.bulk_limit)

        scores = self._score_many(leads, strategy)

        return CalculateResult(
            strategy=strategy,
            scores=[s.model_dump() for s in scores],
            summary=self._summarize(scores, strategy),
            calculated_at=datetime.now(timezone.utc),
        )

    def update_scores(self, lead_ids: List[str], strategy: str = "rules") -> UpdateResult:
        """
        Score the given leads and write lead_score / lead_quality back.

        Raises:
            ValidationError: lead_ids missing or empty
        """
        if not lead_ids:
            raise ValidationError("Missing leadIds")
        self.get_strategy(strategy)

        leads = self._store_call("query_leads", ids=lead_ids)
        return self._write_scores(leads, strategy)

    def recalculate_all(self, strategy: str = "rules") -> UpdateResult:
        """Rescore every lead in the store and write the results back."""
        self.get_strategy(strategy)
        leads = self._store_call("query_leads")
        return self._write_scores(leads, strategy)

    def get_recommendations(self, lead_ids: List[str]) -> List[Recommendation]:
        """
        Rule-based follow-up suggestions, hottest leads first.

        Raises:
            ValidationError: lead_ids missing or empty
        """
        if not lead_ids:
            raise ValidationError("Missing leadIds")

        leads = self._store_call("query_leads", ids=lead_ids)
        names = {lead.id: lead.prospect_name for lead in leads}

        recommendations = [
            Recommendation(
                lead_id=score.lead_id,
                prospect_name=names.get(score.lead_id),
                score=score.total_score,
                tier=score.quality_tier,
                priority=TIER_PRIORITY.get(score.quality_tier, len(TIER_PRIORITY) + 1),
                recommendations=score.recommendations,
            )
            for score in self._score_many(leads, RuleBasedScoringStage.name)
        ]
        recommendations.sort(key=lambda r: (r.priority, -r.score))
        return recommendations

    # =========================================================================
    # Pipeline
    # =========================================================================

    def pipeline_snapshot(self, include_metrics: bool = False, country: Optional[str] = None) -> PipelineSnapshot:
        if country == "all":
            country = None
        leads = self._store_call("query_leads", country=country)
        return self.pipeline.process(leads, include_metrics=include_metrics)

    def move_leads(self, lead_ids: List[str], target_stage: str, notes: Optional[str] = None) -> Dict[str, Any]:
        """
        Move leads to a pipeline stage and report the automations it queues.

        Raises:
            ValidationError: missing ids/stage or unknown stage
        """
        if not lead_ids or not target_stage:
            raise ValidationError("Missing leadIds or targetStage")

        stage = self.pipeline.get_stage(target_stage)
        if stage is None:
            raise ValidationError(
                "Invalid target stage",
                details={"accepted": [s.id for s in self.pipeline.stages]},
            )

        fields: Dict[str, Any] = {
            "contact_status": stage.id,
            "last_contact_date": datetime.now(timezone.utc),
        }
        if notes:
            fields["notes"] = notes

        moved = self._store_call("update_leads", lead_ids, fields)
        logger.info("Moved %d/%d leads to %s", len(moved), len(lead_ids), stage.id)

        return {
            "moved": len(moved),
            "target_stage": stage.name,
            "auto_actions_triggered": self.pipeline.auto_actions_triggered(stage),
        }

    def get_stage_leads(self, stage_id: str, limit: int = 50, offset: int = 0) -> Dict[str, Any]:
        if not stage_id:
            raise ValidationError("Missing stageId")
        if limit < 1 or offset < 0:
            raise ValidationError("limit must be positive and offset non-negative")

        leads = self._store_call(
            "query_leads",
            statuses=[stage_id],
            limit=limit,
            offset=offset,
            order_by="created_at",
            descending=True,
        )
        total = self._store_call("count_leads", statuses=[stage_id])
        stage = self.pipeline.get_stage(stage_id)

        return {
            "leads": [lead.model_dump() for lead in leads],
            "total": total,
            "stage": stage.model_dump() if stage else None,
        }

    def get_stuck_leads(self, threshold_days: int = STUCK_THRESHOLD_DAYS) -> Dict[str, Any]:
        """Open leads whose last contact is older than threshold_days, grouped by stage."""
        if threshold_days < 0:
            raise ValidationError("thresholdDays must be non-negative")

        threshold = datetime.now(timezone.utc) - timedelta(days=threshold_days)
        leads = self._store_call(
            "query_leads",
            exclude_statuses=STUCK_EXCLUDED_STATUSES,
            last_contact_before=threshold,
            order_by="last_contact_date",
            limit=STUCK_LEADS_LIMIT,
        )
        by_stage = self.pipeline.group_by_stage(leads)

        return {
            "stuck_leads": [lead.model_dump() for lead in leads],
            "by_stage": {
                stage: [lead.model_dump() for lead in stage_leads]
                for stage, stage_leads in by_stage.items()
            },
            "threshold_days": threshold_days,
            "total_stuck": len(leads),
        }

    # =========================================================================
    # Reporting
    # =========================================================================

    def recruiter_performance(self, period: str = "month") -> PerformanceReport:
        now = datetime.now(timezone.utc)
        start = period_start(period, now, allow_all=False)

        leads = self._store_call("query_leads", exclude_statuses=ARCHIVED_STATUSES, created_after=start)
        messages = self._store_call("query_messages", since=start)

        return self.performance.process(period, leads, messages, now=now)

    def recruitment_insights(self, period: str = "all") -> RecruitmentInsights:
        """
        Full cohort analysis plus key insights for a period.

        Args:
            period: day, week, month, quarter or all

        Returns:
            RecruitmentInsights (long lists truncated for display)
        """
        now = datetime.now(timezone.utc)
        start = period_start(period, now)

        leads = self._store_call("query_leads", exclude_statuses=ARCHIVED_STATUSES, created_after=start)
        history = self._store_call("query_contact_history", since=start)
        messages = self._store_call("query_messages", since=start)

        report = self.cohorts.process(leads, history, messages, max_workers=self.cohort_workers)
        key_insights = self.insights.process(report)
        limited = apply_report_limits(report)

        return RecruitmentInsights(
            **limited.model_dump(),
            period=period,
            key_insights=key_insights,
            generated_at=now,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get engine statistics"""
        stats = self.stats.copy()
        attempted = stats["updates_written"] + stats["updates_failed"]
        if attempted > 0:
            stats["update_failure_rate"] = round(stats["updates_failed"] / attempted * 100, 1)
        return stats

    def reset_stats(self):
        """Reset engine statistics"""
        self.stats = self._empty_stats()

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {"leads_scored": 0, "updates_written": 0, "updates_failed": 0}

    def _build_lead(self, record: Dict[str, Any]) -> Lead:
        data = dict(record)
        data.setdefault("id", "")
        try:
            return Lead(**data)
        except ValueError as e:
            raise ValidationError(f"Invalid lead record: {e}") from e

    def _store_call(self, operation: str, *args, **kwargs) -> Any:
        """Invoke a store method, surfacing any backend failure as UpstreamStoreError."""
        method: Callable[..., Any] = getattr(self.store, operation)
        try:
            return method(*args, **kwargs)
        except LeadEngineError:
            raise
        except Exception as e:
            logger.error("Lead store %s failed: %s", operation, e)
            raise UpstreamStoreError(f"Lead store {operation} failed: {e}") from e

    def _interaction_counts(self, lead_ids: List[str]) -> Counter:
        """Contact history entries plus messages, per lead."""
        counts: Counter = Counter()
        if not lead_ids:
            return counts
        for entry in self._store_call("query_contact_history", lead_ids=lead_ids):
            counts[entry.lead_id] += 1
        for message in self._store_call("query_messages", lead_ids=lead_ids):
            counts[message.lead_id] += 1
        return counts

    def _score_many(self, leads: List[Lead], strategy: str) -> List[StrategyScore]:
        now = datetime.now(timezone.utc)
        counts = self._interaction_counts([lead.id for lead in leads])
        return [
            self.score_lead(
                lead,
                strategy,
                ScoringContext(now=now, interaction_count=counts.get(lead.id, 0)),
            )
            for lead in leads
        ]

    def _summarize(self, scores: List[StrategyScore], strategy: str) -> ScoreSummary:
        if strategy == RuleBasedScoringStage.name:
            labels = [t.tier for t in self.config.tiers]
        else:
            labels = [label for _, label in self.config.quality_buckets]

        tiers = {label: 0 for label in labels}
        for score in scores:
            tiers[score.quality_tier] = tiers.get(score.quality_tier, 0) + 1

        return ScoreSummary(
            tiers=tiers,
            average_score=mean(sum(s.total_score for s in scores), len(scores)),
        )

    def _write_scores(self, leads: List[Lead], strategy: str) -> UpdateResult:
        """Sequential write-back; failed updates are logged and not counted."""
        scores = self._score_many(leads, strategy)

        updated = 0
        for score in scores:
            try:
                self._store_call(
                    "update_lead",
                    score.lead_id,
                    {"lead_score": score.total_score, "lead_quality": score.quality_tier},
                )
            except UpstreamStoreError as e:
                self.stats["updates_failed"] += 1
                logger.warning("Score write-back failed for lead %s: %s", score.lead_id, e.message)
                continue
            updated += 1
            self.stats["updates_written"] += 1

        if updated < len(scores):
            logger.warning("Score write-back: %d of %d leads updated", updated, len(scores))
        return UpdateResult(updated=updated, total=len(scores))


# =============================================================================
# Convenience Functions
# =============================================================================

def create_engine(
    store: Optional[LeadStore] = None,
    disabled_rules: Optional[List[str]] = None,
    point_overrides: Optional[Dict[str, int]] = None,
) -> LeadIntelligenceEngine:
    """
    Factory function to create an engine with a customised rule set.

    Args:
        store: Lead store to read and write
        disabled_rules: Rule ids to switch off
        point_overrides: Rule id -> points

    Returns:
        Configured LeadIntelligenceEngine instance
    """
    config = create_default_scoring_config(
        disabled_rules=disabled_rules,
        point_overrides=point_overrides,
    )
    return LeadIntelligenceEngine(store=store, scoring_config=config)


def quick_score(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Score a raw lead dict with both strategies, no store involved.

    Args:
        record: Dictionary with lead fields

    Returns:
        {"composite": {...}, "rules": {...}}
    """
    engine = LeadIntelligenceEngine()
    return {
        name: engine.score_record(record, name).model_dump()
        for name in engine.strategies
    }
