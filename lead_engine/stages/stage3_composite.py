"""
Stage 3: Composite Score
========================
Field-quality score: sum the five component scores, clamp to 0-100 and
map to a quality bucket.

Component maxima add up to 115, so the clamp is load-bearing: a lead that
maxes every component still scores 100.

Buckets:
- High (>= 85)
- Medium (>= 55)
- Low (>= 35)
- Very Low
"""

from datetime import datetime
from typing import Optional, List, Tuple

from ..models.schemas import Lead, CompositeScoreResult
from ..models.scoring_config import ScoringConfig
from ..config.calling_codes import UNKNOWN_COUNTRY
from ..config.settings import QUALITY_BUCKETS
from .base import ScoringStrategy, ScoringContext
from .stage2_fields import FieldQualityStage


def get_quality_bucket(score: int, buckets: Optional[List[Tuple[int, str]]] = None) -> str:
    for threshold, label in (buckets or QUALITY_BUCKETS):
        if score >= threshold:
            return label
    return QUALITY_BUCKETS[-1][1]


class CompositeScoringStage(ScoringStrategy):
    """
    Stage 3: Aggregate field scores into a composite quality score.
    """

    name = "composite"
    description = "Field quality composite (name, email, phone, recency, intake)"

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        fields: Optional[FieldQualityStage] = None,
    ):
        """
        Initialize with scoring configuration or use defaults.
        """
        self.buckets = config.quality_buckets if config else QUALITY_BUCKETS
        self.fields = fields or FieldQualityStage()

    def process(self, lead: Lead, context: Optional[ScoringContext] = None) -> CompositeScoreResult:
        """
        Calculate the composite score for a lead.

        Args:
            lead: Lead to score
            context: Supplies the reference clock for intake proximity

        Returns:
            CompositeScoreResult with every component, raw and clamped totals
        """
        context = context or ScoringContext()
        components = self.fields.process(lead, context.now)

        result = self.combine(
            name=components["name_score"],
            email=components["email"].score,
            phone=components["phone"].score,
            recency=components["recency_score"],
            intake=components["intake_score"],
            email_valid=components["email"].valid,
            phone_valid=components["phone"].valid,
            detected_country=components["phone"].country,
        )
        result.lead_id = lead.id
        return result

    def combine(
        self,
        name: int,
        email: int,
        phone: int,
        recency: int,
        intake: int,
        email_valid: bool = False,
        phone_valid: bool = False,
        detected_country: str = UNKNOWN_COUNTRY,
    ) -> CompositeScoreResult:
        """Aggregate pre-computed component scores."""
        raw_total = name + email + phone + recency + intake
        total = max(0, min(100, raw_total))

        return CompositeScoreResult(
            total_score=total,
            quality_tier=get_quality_bucket(total, self.buckets),
            name_score=name,
            email_score=email,
            email_valid=email_valid,
            phone_score=phone,
            phone_valid=phone_valid,
            recency_score=recency,
            intake_score=intake,
            raw_total=raw_total,
            detected_country=detected_country,
        )


def calculate_lead_score(
    name: Optional[str],
    email: Optional[str],
    phone: Optional[str],
    intake: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CompositeScoreResult:
    """Composite score for loose field values, without building a Lead first."""
    lead = Lead(id="", prospect_name=name, prospect_email=email, phone=phone, intake=intake)
    context = ScoringContext(now=now) if now else None
    result = CompositeScoringStage().process(lead, context)
    result.lead_id = None
    return result
