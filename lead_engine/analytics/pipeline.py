"""
Pipeline snapshot: leads per stage, per-stage flow metrics, funnel summary.

Time in stage is measured from created_at; the store keeps no stage
transition history.
"""

import math
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List

from ..models.schemas import Lead, ContactStatus
from ..models.insights import PipelineStageView, PipelineMetrics, FunnelSummary, PipelineSnapshot
from ..config.settings import PIPELINE_STAGES, STUCK_THRESHOLD_DAYS
from .metrics import percent, mean


class PipelineAnalyzer:
    """
    Compute pipeline views over a set of leads.
    """

    def __init__(
        self,
        stages: Optional[List[Dict[str, Any]]] = None,
        stuck_threshold_days: int = STUCK_THRESHOLD_DAYS,
    ):
        self.stages = sorted(
            (PipelineStageView(**s) for s in (stages or PIPELINE_STAGES)),
            key=lambda s: s.order,
        )
        self.stuck_threshold_days = stuck_threshold_days

    def get_stage(self, stage_id: str) -> Optional[PipelineStageView]:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    def process(
        self,
        leads: List[Lead],
        include_metrics: bool = False,
        now: Optional[datetime] = None,
    ) -> PipelineSnapshot:
        """
        Build the pipeline snapshot.

        Args:
            leads: Leads to place in stages
            include_metrics: Add conversion / avg time / stuck counts per stage
            now: Reference time for day counts

        Returns:
            PipelineSnapshot with stages in pipeline order
        """
        now = now or datetime.now(timezone.utc)

        counts = Counter(lead.contact_status for lead in leads)
        by_stage: Dict[str, List[Lead]] = defaultdict(list)
        for lead in leads:
            by_stage[lead.contact_status].append(lead)

        stages = [s.model_copy(update={"count": counts.get(s.id, 0)}) for s in self.stages]

        metrics = None
        if include_metrics:
            metrics = [self._stage_metrics(s, by_stage.get(s.id, []), counts, now) for s in self.stages]

        total = len(leads)
        converted = counts.get(ContactStatus.CONVERTED.value, 0)
        qualified = counts.get(ContactStatus.QUALIFIED.value, 0)
        interested = counts.get(ContactStatus.INTERESTED.value, 0)

        summary = FunnelSummary(
            total_leads=total,
            conversion_rate=percent(converted, total),
            qualification_rate=percent(qualified + converted, total),
            interest_rate=percent(interested + qualified + converted, total),
            stages_breakdown=dict(counts),
        )

        return PipelineSnapshot(stages=stages, metrics=metrics, summary=summary)

    def _stage_metrics(
        self,
        stage: PipelineStageView,
        stage_leads: List[Lead],
        counts: Counter,
        now: datetime,
    ) -> PipelineMetrics:
        total_days = 0
        stuck = 0
        for lead in stage_leads:
            days = math.floor((now - lead.created_at).total_seconds() / 86400)
            total_days += days
            if days > self.stuck_threshold_days:
                stuck += 1

        count = len(stage_leads)
        # Share of leads at or past this stage that moved beyond it
        later = sum(counts.get(s.id, 0) for s in self.stages if s.order > stage.order)

        return PipelineMetrics(
            stage_id=stage.id,
            count=count,
            conversion_rate=percent(later, count + later),
            avg_time_in_stage=mean(total_days, count),
            stuck_leads=stuck,
        )

    def auto_actions_triggered(self, stage: PipelineStageView) -> List[str]:
        """Human-readable list of the automations a move into stage queues."""
        actions = []
        if stage.auto_actions:
            if stage.auto_actions.get("send_template"):
                actions.append(f'Template "{stage.auto_actions["send_template"]}" queued')
            if stage.auto_actions.get("add_tag"):
                actions.append(f'Tag "{stage.auto_actions["add_tag"]}" added')
        return actions

    @staticmethod
    def group_by_stage(leads: List[Lead]) -> Dict[str, List[Lead]]:
        grouped: Dict[str, List[Lead]] = defaultdict(list)
        for lead in leads:
            grouped[lead.contact_status].append(lead)
        return dict(grouped)
