# Scoring stages module
from .base import ScoringStrategy, ScoringContext
from .stage1_geolocation import PhoneGeolocator, normalize_phone, detect_country_from_phone
from .stage2_fields import FieldQualityStage, FixedRecencyScorer
from .stage3_composite import CompositeScoringStage
from .stage4_rules import RuleBasedScoringStage

STRATEGIES = {
    CompositeScoringStage.name: CompositeScoringStage,
    RuleBasedScoringStage.name: RuleBasedScoringStage,
}
