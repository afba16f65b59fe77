"""
Scoring Configuration Models
"""

from typing import List, Optional, Tuple
from pydantic import BaseModel, Field

from ..config.settings import (
    RULE_LIBRARY,
    TIER_MAPPING,
    QUALITY_BUCKETS,
    PRIOR_SCORE_WEIGHT,
    PRIOR_SCORE_CAP,
)


class ScoringRule(BaseModel):
    """A named condition -> points rule"""
    id: str
    name: str
    category: str  # engagement, profile, behavior, timing
    condition: str
    points: int
    is_active: bool = True


class TierDefinition(BaseModel):
    """Score range for a tier"""
    tier: str
    min: int
    max: int
    description: str


class PriorScoreBlend(BaseModel):
    """How much of a previously stored score carries into the rule score"""
    weight: float = PRIOR_SCORE_WEIGHT
    cap: int = PRIOR_SCORE_CAP


class ScoringConfig(BaseModel):
    """Complete configuration for both scoring strategies"""
    name: str = "Default scoring"
    rules: List[ScoringRule] = Field(
        default_factory=lambda: [ScoringRule(**r) for r in RULE_LIBRARY]
    )
    tiers: List[TierDefinition] = Field(
        default_factory=lambda: [
            TierDefinition(tier=tier, min=low, max=high, description=description)
            for low, high, tier, description in TIER_MAPPING
        ]
    )
    prior_score: PriorScoreBlend = Field(default_factory=PriorScoreBlend)
    quality_buckets: List[Tuple[int, str]] = Field(
        default_factory=lambda: list(QUALITY_BUCKETS)
    )

    def active_rules(self) -> List[ScoringRule]:
        return [r for r in self.rules if r.is_active]

    def get_rule(self, rule_id: str) -> Optional[ScoringRule]:
        for rule in self.rules:
            if rule.id == rule_id:
                return rule
        return None


def create_default_scoring_config(
    disabled_rules: Optional[List[str]] = None,
    point_overrides: Optional[dict] = None,
) -> ScoringConfig:
    """
    Factory function to create a scoring config with sensible defaults
    """
    config = ScoringConfig()

    for rule in config.rules:
        if disabled_rules and rule.id in disabled_rules:
            rule.is_active = False
        if point_overrides and rule.id in point_overrides:
            rule.points = point_overrides[rule.id]

    return config
