"""
Pydantic schemas for the Lead Intelligence Engine
"""

from enum import Enum
from typing import List, Dict, Optional, Any
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so store rows compare safely."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def phone_text(value: Any) -> Any:
    """Numeric phones (spreadsheet imports) become their digit string."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return value


# =============================================================================
# ENUMS
# =============================================================================

class ContactStatus(str, Enum):
    """Pipeline stage a lead currently occupies"""
    NOT_CONTACTED = "not_contacted"
    CONTACTED = "contacted"
    INTERESTED = "interested"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    UNQUALIFIED = "unqualified"
    REFERRAL = "referral"
    ARCHIVED = "archived"
    ARCHIVED_REFERRAL = "archived_referral"


class QualityBucket(str, Enum):
    """Composite score quality bucket"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"


class Tier(str, Enum):
    """Rule-based score tier"""
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class MessageDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


# =============================================================================
# STORE RECORDS
# =============================================================================

class Lead(BaseModel):
    """A prospective student as held by the lead store"""
    id: str
    prospect_name: Optional[str] = None
    prospect_email: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    # Plain string: the store carries statuses beyond ContactStatus
    contact_status: str = ContactStatus.NOT_CONTACTED.value
    lead_score: Optional[int] = None
    lead_quality: Optional[str] = None
    intake: Optional[str] = None
    barcelona_timeline: Optional[int] = None
    referral_source: Optional[str] = None
    campaign: Optional[str] = None
    phone_valid: Optional[bool] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_contact_date: Optional[datetime] = None

    class Config:
        extra = "allow"

    @field_validator("phone", mode="before")
    @classmethod
    def _phone_as_text(cls, value):
        return phone_text(value)

    @field_validator("created_at", "last_contact_date")
    @classmethod
    def _normalize_datetime(cls, value):
        return _as_utc(value)

    @field_validator("contact_status", mode="before")
    @classmethod
    def _default_status(cls, value):
        if isinstance(value, Enum):
            return value.value
        return value or ContactStatus.NOT_CONTACTED.value


class ContactHistoryEntry(BaseModel):
    """One logged contact attempt, with optional readiness checklist answers"""
    id: Optional[str] = None
    lead_id: str
    contact_type: Optional[str] = None
    outcome: Optional[str] = None
    notes: Optional[str] = None
    contacted_at: datetime

    # Readiness checklist (None = not asked)
    has_funds: Optional[bool] = None
    meets_age_requirements: Optional[bool] = None
    has_valid_passport: Optional[bool] = None
    can_obtain_visa: Optional[bool] = None
    can_start_intake: Optional[bool] = None
    discussed_with_family: Optional[bool] = None
    needs_housing_support: Optional[bool] = None
    understands_work_rules: Optional[bool] = None
    has_realistic_expectations: Optional[bool] = None
    ready_to_proceed: Optional[bool] = None
    intake_period: Optional[str] = None

    class Config:
        extra = "allow"

    @field_validator("contacted_at")
    @classmethod
    def _normalize_datetime(cls, value):
        return _as_utc(value)


class MessageEvent(BaseModel):
    """A sent or received message, used only for activity counts"""
    id: Optional[str] = None
    lead_id: Optional[str] = None
    direction: MessageDirection = MessageDirection.OUTBOUND
    status: Optional[str] = None
    sent_at: datetime

    class Config:
        extra = "allow"

    @field_validator("sent_at")
    @classmethod
    def _normalize_datetime(cls, value):
        return _as_utc(value)


# =============================================================================
# FIELD SCORE RESULTS
# =============================================================================

class EmailScore(BaseModel):
    score: int = 0
    valid: bool = False


class PhoneScore(BaseModel):
    score: int = 0
    valid: bool = False
    country: str = "Unknown"


# =============================================================================
# STRATEGY RESULTS
# =============================================================================

class StrategyScore(BaseModel):
    """Common shape returned by every scoring strategy"""
    lead_id: Optional[str] = None
    strategy: str
    total_score: int
    quality_tier: str


class CompositeScoreResult(StrategyScore):
    """Field-quality composite score with every component exposed"""
    strategy: str = "composite"
    name_score: int
    email_score: int
    email_valid: bool
    phone_score: int
    phone_valid: bool
    recency_score: int
    intake_score: int
    raw_total: int
    detected_country: str


class RuleMatch(BaseModel):
    """A rule that fired for a lead"""
    rule_id: str
    category: str
    rule: str
    points: int


class RuleScoreResult(StrategyScore):
    """Rule-based tier score with matched rules and recommendations"""
    strategy: str = "rules"
    rule_points: int = 0
    prior_score_bonus: int = 0
    breakdown: List[RuleMatch] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class Recommendation(BaseModel):
    """Prioritised recommendation entry for a single lead"""
    lead_id: str
    prospect_name: Optional[str] = None
    score: int
    tier: str
    priority: int
    recommendations: List[str] = Field(default_factory=list)


class ScoreSummary(BaseModel):
    """Tier counts and average score for a calculate run"""
    tiers: Dict[str, int] = Field(default_factory=dict)
    average_score: int = 0


class CalculateResult(BaseModel):
    strategy: str
    scores: List[Dict[str, Any]] = Field(default_factory=list)
    summary: ScoreSummary
    calculated_at: datetime


class UpdateResult(BaseModel):
    """Batch write-back tally; failures only show up as updated < total"""
    updated: int
    total: int
