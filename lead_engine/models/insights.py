"""
Cohort and reporting schemas
"""

from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field
from datetime import datetime


# =============================================================================
# COHORT INSIGHTS
# =============================================================================

class CountryInsight(BaseModel):
    country: str
    total_leads: int = 0
    status_counts: Dict[str, int] = Field(default_factory=dict)
    contacted: int = 0
    interested: int = 0
    qualified: int = 0
    converted: int = 0
    contact_rate: int = 0
    interest_rate: int = 0
    conversion_rate: int = 0
    avg_lead_score: int = 0


class ContactMethodInsight(BaseModel):
    method: str
    total_contacts: int = 0
    leads_touched: int = 0
    leads_interested: int = 0
    leads_converted: int = 0
    success_rate: int = 0
    conversion_rate: int = 0


class OutcomeInsight(BaseModel):
    outcome: str
    count: int = 0
    leads_touched: int = 0
    led_to_interested: int = 0
    led_to_converted: int = 0
    success_rate: int = 0


class SourceInsight(BaseModel):
    source: str
    total_leads: int = 0
    converted: int = 0
    conversion_rate: int = 0
    avg_score: int = 0


class ReadinessInsight(BaseModel):
    field: str
    label: str
    total_assessed: int = 0
    positive_count: int = 0
    positive_rate: int = 0
    converted_with_positive: int = 0
    conversion_rate_with_positive: int = 0
    converted_with_negative: int = 0
    conversion_rate_with_negative: int = 0


class IntakeInsight(BaseModel):
    intake: str
    total_leads: int = 0
    interested: int = 0
    qualified: int = 0
    converted: int = 0
    conversion_rate: int = 0
    ready_to_proceed: int = 0


class ReadinessSummary(BaseModel):
    total_assessed: int = 0
    ready_to_proceed: int = 0
    ready_rate: int = 0
    avg_readiness_score: int = 0
    common_blockers: List[str] = Field(default_factory=list)


class FunnelTotals(BaseModel):
    total_leads: int = 0
    total_contacted: int = 0
    total_interested: int = 0
    total_converted: int = 0
    overall_contact_rate: int = 0
    overall_conversion_rate: int = 0
    messages_sent: int = 0
    messages_received: int = 0


class TimeBucket(BaseModel):
    """Contact activity for one hour of day or one day of week"""
    index: int
    label: str
    contacts: int = 0
    successful: int = 0
    responses: int = 0
    voicemails: int = 0
    success_rate: int = 0
    response_rate: int = 0
    volume_pct: int = 0


class HeatmapCell(BaseModel):
    day: int
    hour: int
    contacts: int = 0
    successful: int = 0
    success_rate: int = 0


class TimeInsights(BaseModel):
    total_contacts: int = 0
    by_hour: List[TimeBucket] = Field(default_factory=list)
    by_day: List[TimeBucket] = Field(default_factory=list)
    heatmap: List[HeatmapCell] = Field(default_factory=list)
    best_hours: List[TimeBucket] = Field(default_factory=list)
    best_days: List[TimeBucket] = Field(default_factory=list)
    peak_hours: List[TimeBucket] = Field(default_factory=list)


class CohortReport(BaseModel):
    """Everything the cohort aggregator produces in one call"""
    summary: FunnelTotals
    readiness_summary: ReadinessSummary
    country_insights: List[CountryInsight] = Field(default_factory=list)
    contact_method_insights: List[ContactMethodInsight] = Field(default_factory=list)
    outcome_insights: List[OutcomeInsight] = Field(default_factory=list)
    source_insights: List[SourceInsight] = Field(default_factory=list)
    readiness_insights: List[ReadinessInsight] = Field(default_factory=list)
    intake_insights: List[IntakeInsight] = Field(default_factory=list)
    time_insights: TimeInsights = Field(default_factory=TimeInsights)


class RecruitmentInsights(CohortReport):
    """Cohort report plus generated findings, as served to recruiters"""
    period: str
    key_insights: List[str] = Field(default_factory=list)
    generated_at: datetime


# =============================================================================
# PIPELINE
# =============================================================================

class PipelineStageView(BaseModel):
    id: str
    name: str
    order: int
    color: str
    description: str
    auto_actions: Optional[Dict[str, str]] = None
    exit_criteria: Optional[List[str]] = None
    conversion_target: Optional[int] = None
    count: int = 0


class PipelineMetrics(BaseModel):
    stage_id: str
    count: int = 0
    conversion_rate: int = 0
    avg_time_in_stage: int = 0
    stuck_leads: int = 0


class FunnelSummary(BaseModel):
    total_leads: int = 0
    conversion_rate: int = 0
    qualification_rate: int = 0
    interest_rate: int = 0
    stages_breakdown: Dict[str, int] = Field(default_factory=dict)


class PipelineSnapshot(BaseModel):
    stages: List[PipelineStageView] = Field(default_factory=list)
    metrics: Optional[List[PipelineMetrics]] = None
    summary: FunnelSummary


# =============================================================================
# RECRUITER PERFORMANCE
# =============================================================================

class BenchmarkComparison(BaseModel):
    value: int
    target: int
    status: str  # on_target, near_target, below_target


class TrendDelta(BaseModel):
    this_week: int = 0
    last_week: int = 0
    change: int = 0
    direction: str = "stable"


class PerformanceReport(BaseModel):
    period: str
    summary: Dict[str, int] = Field(default_factory=dict)
    funnel: Dict[str, int] = Field(default_factory=dict)
    performance: Dict[str, BenchmarkComparison] = Field(default_factory=dict)
    daily_activity: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    top_sources: List[Dict[str, Any]] = Field(default_factory=list)
    trends: Dict[str, TrendDelta] = Field(default_factory=dict)
    action_items: List[str] = Field(default_factory=list)
    generated_at: datetime
