"""
Stage 4: Rule-Based Tier Scoring
================================
Named condition -> points rules grouped in four categories, producing a
hot/warm/cold tier plus follow-up recommendations.

Categories:
- Engagement: responded, multiple interactions, recent activity
- Profile: valid email, valid phone, quality name
- Behavior: intake timeline, referral
- Timing: fresh lead bonus, staleness penalty

Half of any previously stored score (capped) is blended in before the
0-100 clamp. This scheme is independent of the composite score.
"""

import logging
import math
from datetime import datetime
from typing import Optional, Dict, Any, List, Callable

from ..models.schemas import Lead, RuleScoreResult, RuleMatch, ContactStatus, Tier
from ..models.scoring_config import ScoringConfig, ScoringRule
from ..config.settings import (
    RESPONDED_STATUSES,
    MULTI_INTERACTION_MIN,
    NAME_QUALITY_MIN,
)
from .base import ScoringStrategy, ScoringContext
from .stage2_fields import score_name, score_email, score_phone

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_DAYS = 7
FRESH_LEAD_DAYS = 14
FOLLOW_UP_DAYS = 14
STALE_DAYS = 30
URGENT_TIMELINE_MONTHS = 3
SOON_TIMELINE_MONTHS = 6


def _days_since(then: Optional[datetime], now: datetime) -> Optional[int]:
    if then is None:
        return None
    return math.floor((now - then).total_seconds() / 86400)


# Rule id -> predicate over the per-lead facts dict
RULE_PREDICATES: Dict[str, Callable[[Dict[str, Any]], bool]] = {
    "eng_responded": lambda f: f["status"] in RESPONDED_STATUSES,
    "eng_multi_interaction": lambda f: f["interaction_count"] >= MULTI_INTERACTION_MIN,
    "eng_recent_activity": lambda f: (
        f["last_contact_days"] is not None and f["last_contact_days"] <= RECENT_ACTIVITY_DAYS
    ),
    "prof_email_valid": lambda f: f["email_valid"],
    "prof_phone_valid": lambda f: f["phone_valid"],
    "prof_name_quality": lambda f: f["name_score"] >= NAME_QUALITY_MIN,
    "beh_timeline_urgent": lambda f: (
        f["timeline"] is not None and f["timeline"] <= URGENT_TIMELINE_MONTHS
    ),
    "beh_timeline_soon": lambda f: (
        f["timeline"] is not None and URGENT_TIMELINE_MONTHS < f["timeline"] <= SOON_TIMELINE_MONTHS
    ),
    "beh_referral": lambda f: f["has_referral"],
    "time_fresh_lead": lambda f: f["created_days"] <= FRESH_LEAD_DAYS,
    "time_stale": lambda f: (
        f["status"] == ContactStatus.NOT_CONTACTED.value and f["stale_days"] > STALE_DAYS
    ),
}


class RuleBasedScoringStage(ScoringStrategy):
    """
    Stage 4: Evaluate the rule registry against a lead.
    """

    name = "rules"
    description = "Rule-based engagement score with hot/warm/cold tiers"

    def __init__(self, config: Optional[ScoringConfig] = None):
        """
        Initialize with scoring configuration or use defaults.
        """
        self.config = config or ScoringConfig()

    def process(self, lead: Lead, context: Optional[ScoringContext] = None) -> RuleScoreResult:
        """
        Calculate the rule-based score for a lead.

        Args:
            lead: Lead to score
            context: Reference clock and interaction count for the lead

        Returns:
            RuleScoreResult with tier, matched rules and recommendations
        """
        context = context or ScoringContext()
        facts = self._collect_facts(lead, context)

        breakdown: List[RuleMatch] = []
        rule_points = 0
        for rule in self.config.active_rules():
            if self._rule_applies(rule, facts):
                breakdown.append(RuleMatch(
                    rule_id=rule.id,
                    category=rule.category,
                    rule=rule.name,
                    points=rule.points,
                ))
                rule_points += rule.points

        prior_bonus = self._prior_score_bonus(lead.lead_score)
        total = max(0, min(100, rule_points + prior_bonus))
        tier = self.map_to_tier(total)

        return RuleScoreResult(
            lead_id=lead.id,
            total_score=total,
            quality_tier=tier,
            rule_points=rule_points,
            prior_score_bonus=prior_bonus,
            breakdown=breakdown,
            recommendations=self._recommendations(facts, tier),
        )

    def map_to_tier(self, score: int) -> str:
        for tier in sorted(self.config.tiers, key=lambda t: t.min, reverse=True):
            if score >= tier.min:
                return tier.tier
        return Tier.COLD.value

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _collect_facts(self, lead: Lead, context: ScoringContext) -> Dict[str, Any]:
        created_days = _days_since(lead.created_at, context.now) or 0
        last_contact_days = _days_since(lead.last_contact_date, context.now)
        phone = score_phone(lead.phone)

        return {
            "status": lead.contact_status,
            "interaction_count": context.interaction_count,
            "created_days": created_days,
            "last_contact_days": last_contact_days,
            # Never-contacted leads go stale from their creation date
            "stale_days": last_contact_days if last_contact_days is not None else created_days,
            "email_valid": score_email(lead.prospect_email).valid,
            "phone_valid": phone.valid or lead.phone_valid is True,
            "name_score": score_name(lead.prospect_name, lead.prospect_email or ""),
            "timeline": lead.barcelona_timeline,
            "has_referral": bool(lead.referral_source and lead.referral_source.strip()),
        }

    def _rule_applies(self, rule: ScoringRule, facts: Dict[str, Any]) -> bool:
        predicate = RULE_PREDICATES.get(rule.id)
        if predicate is None:
            logger.debug("No predicate registered for rule %s, skipping", rule.id)
            return False
        return predicate(facts)

    def _prior_score_bonus(self, lead_score: Optional[int]) -> int:
        if not lead_score or lead_score <= 0:
            return 0
        blend = self.config.prior_score
        return min(blend.cap, math.floor(blend.weight * lead_score))

    def _recommendations(self, facts: Dict[str, Any], tier: str) -> List[str]:
        recommendations = []
        status = facts["status"]

        if not facts["phone_valid"]:
            recommendations.append("Verify phone number to improve contact rate")
        if status == ContactStatus.NOT_CONTACTED.value:
            recommendations.append("Make initial contact - lead hasn't been reached")
        last_contact_days = facts["last_contact_days"]
        if (
            last_contact_days is not None
            and last_contact_days > FOLLOW_UP_DAYS
            and status != ContactStatus.CONVERTED.value
        ):
            recommendations.append(f"Follow up - no contact in {last_contact_days} days")
        if facts["timeline"] is not None and facts["timeline"] <= URGENT_TIMELINE_MONTHS:
            recommendations.append("PRIORITY: Urgent timeline - prioritize conversion")
        if tier == Tier.COLD.value and status == ContactStatus.CONTACTED.value:
            recommendations.append("Consider re-engagement campaign")

        return recommendations
