"""
Stage 2: Field Quality Scoring
==============================
Score the completeness and plausibility of individual lead fields.

Components (max points):
- Name (40): token count, length, capitalization, email corroboration
- Email (30): conventional address shape
- Phone (20): digit count, priority market bonus
- Recency (10): fixed placeholder, see FixedRecencyScorer
- Intake proximity (20): months until the intended intake

Every scorer is total: missing or garbage input scores 0.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Dict, Any, List, Tuple, Union

from ..models.schemas import Lead, EmailScore, PhoneScore
from ..config.calling_codes import UNKNOWN_COUNTRY
from ..config.settings import (
    COMPONENT_MAXIMA,
    PRIORITY_AREA_CODES,
    PRIORITY_COUNTRY,
    INTAKE_MONTH_KEYWORDS,
    INTAKE_PROXIMITY_BANDS,
)
from .stage1_geolocation import PhoneGeolocator, normalize_phone

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_LETTERS_ONLY = re.compile(r"^[a-z]+$")
_REPEATED_CHAR = re.compile(r"(.)\1{2,}")
_ANY_DIGIT = re.compile(r"[0-9]")
_NUMERIC_INTAKE = re.compile(r"(\d{4})[-/](\d{1,2})|(\d{1,2})[-/](\d{4})", re.ASCII)
_INTAKE_YEAR = re.compile(r"(20\d{2})", re.ASCII)

_default_geolocator = PhoneGeolocator()


# =============================================================================
# NAME
# =============================================================================

def _is_title_case(token: str) -> bool:
    if not token:
        return False
    return token[0] == token[0].upper() and (len(token) == 1 or token[1:] == token[1:].lower())


def score_name(name: Optional[str], email: Optional[str] = "") -> int:
    """
    Score a prospect name (max 40).

    Single-token names can be corroborated by the email local-part:
    "maria@x.com" backs up "Maria" (+10), "maria.garcia@x.com" suggests a
    full name exists (+6).
    """
    if not name or not name.strip():
        return 0

    trimmed = name.strip()
    tokens = trimmed.split()
    num_tokens = len(tokens)

    score = 0

    if num_tokens >= 2:
        score += 28
    elif num_tokens == 1:
        score += 12

    if len("".join(tokens)) >= 6:
        score += 6

    title_case_tokens = sum(1 for t in tokens if _is_title_case(t))
    if num_tokens >= 2 and title_case_tokens >= 2:
        score += 4
    elif num_tokens == 1 and title_case_tokens == 1:
        score += 2

    if email and num_tokens == 1:
        local = email.split("@")[0].lower() if "@" in email else ""
        if local == trimmed.lower() and _LETTERS_ONLY.match(local):
            score += 10
        else:
            segments = [p for p in re.split(r"[._]", local) if p]
            if len(segments) >= 2 and all(_LETTERS_ONLY.match(p) for p in segments):
                score += 6

    # Penalties
    if _REPEATED_CHAR.search(trimmed):
        score -= 4
    if _ANY_DIGIT.search(trimmed):
        score -= 4
    letters = re.sub(r"[^a-zA-Z]", "", trimmed)
    if letters and (letters == letters.upper() or letters == letters.lower()):
        score -= 2

    return max(0, min(COMPONENT_MAXIMA["name"], score))


# =============================================================================
# EMAIL / PHONE
# =============================================================================

def score_email(email: Optional[str]) -> EmailScore:
    if not email or not email.strip():
        return EmailScore(score=0, valid=False)
    if EMAIL_PATTERN.match(email.strip().lower()):
        return EmailScore(score=COMPONENT_MAXIMA["email"], valid=True)
    return EmailScore(score=0, valid=False)


def score_phone(phone: Optional[str], geolocator: Optional[PhoneGeolocator] = None) -> PhoneScore:
    """
    Score a phone number (max 20).

    11-digit NANP numbers in the priority market get the full 20 points;
    anything else with at least 10 digits is valid at 15.
    """
    geolocator = geolocator or _default_geolocator
    digits = normalize_phone(phone)

    if not digits:
        return PhoneScore(score=0, valid=False, country=UNKNOWN_COUNTRY)

    if len(digits) == 11 and digits.startswith("1") and digits[1:4] in PRIORITY_AREA_CODES:
        return PhoneScore(score=COMPONENT_MAXIMA["phone"], valid=True, country=PRIORITY_COUNTRY)

    if len(digits) >= 10:
        return PhoneScore(score=15, valid=True, country=geolocator.detect(digits))

    return PhoneScore(score=0, valid=False, country=UNKNOWN_COUNTRY)


# =============================================================================
# RECENCY
# =============================================================================

class FixedRecencyScorer:
    """
    Recency placeholder: every lead gets the same mid-range value.

    Open gap. Imported leads carry no reliable activity timestamps, so no
    decay curve has been defined yet. Swap in a real scorer through
    FieldQualityStage(recency_scorer=...) once one exists.
    """

    value = 5

    def score(self, lead: Optional[Lead] = None, now: Optional[datetime] = None) -> int:
        return self.value


def score_recency(lead: Optional[Lead] = None, now: Optional[datetime] = None) -> int:
    return FixedRecencyScorer().score(lead, now)


# =============================================================================
# INTAKE PROXIMITY
# =============================================================================

def _parse_intake(intake: str) -> Tuple[Optional[int], Optional[int]]:
    """Return (month, year) from free text; either may be None."""
    lowered = intake.lower()
    month = None
    year = None

    for keyword, keyword_month in INTAKE_MONTH_KEYWORDS:
        if keyword in lowered:
            month = keyword_month
            break
    else:
        match = _NUMERIC_INTAKE.search(intake)
        if match:
            if match.group(1) and match.group(2):
                year, month = int(match.group(1)), int(match.group(2))
            else:
                month, year = int(match.group(3)), int(match.group(4))

    if year is None:
        year_match = _INTAKE_YEAR.search(intake)
        if year_match:
            year = int(year_match.group(1))

    return month, year


def score_intake_proximity(
    intake: Optional[str],
    today: Optional[Union[date, datetime]] = None,
    bands: Optional[List[Tuple[int, int, int]]] = None,
) -> int:
    """
    Score how soon the intended intake is (max 20).

    Args:
        intake: Free text such as "February 2026", "Oct", "2026-05", "05/2026"
        today: Reference date, defaults to the current UTC date
        bands: (min_months, max_months, points) ranges, first match wins

    Returns:
        Points for the first band containing target - current months, else 0
    """
    if not intake:
        return 0

    month, year = _parse_intake(str(intake))
    if not month or not 1 <= month <= 12:
        return 0

    if today is None:
        today = datetime.now(timezone.utc).date()

    if year is None:
        # Next occurrence of that month; the current month counts as this year
        year = today.year if month >= today.month else today.year + 1

    months_until = (year - today.year) * 12 + (month - today.month)

    for low, high, points in (bands or INTAKE_PROXIMITY_BANDS):
        if low <= months_until <= high:
            return points
    return 0


# =============================================================================
# STAGE
# =============================================================================

class FieldQualityStage:
    """
    Stage 2: Run every field scorer over a lead.
    """

    def __init__(
        self,
        geolocator: Optional[PhoneGeolocator] = None,
        recency_scorer: Optional[FixedRecencyScorer] = None,
        intake_bands: Optional[List[Tuple[int, int, int]]] = None,
    ):
        self.geolocator = geolocator or _default_geolocator
        self.recency_scorer = recency_scorer or FixedRecencyScorer()
        self.intake_bands = intake_bands or INTAKE_PROXIMITY_BANDS

    def score_name(self, name: Optional[str], email: Optional[str] = "") -> int:
        return score_name(name, email)

    def score_email(self, email: Optional[str]) -> EmailScore:
        return score_email(email)

    def score_phone(self, phone: Optional[str]) -> PhoneScore:
        return score_phone(phone, self.geolocator)

    def score_recency(self, lead: Optional[Lead] = None, now: Optional[datetime] = None) -> int:
        return self.recency_scorer.score(lead, now)

    def score_intake(self, intake: Optional[str], today: Optional[Union[date, datetime]] = None) -> int:
        return score_intake_proximity(intake, today, self.intake_bands)

    def process(self, lead: Lead, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Score every field of a lead.

        Args:
            lead: Lead to score
            now: Reference time for intake proximity

        Returns:
            Dict with name_score, email (EmailScore), phone (PhoneScore),
            recency_score and intake_score
        """
        now = now or datetime.now(timezone.utc)
        return {
            "name_score": self.score_name(lead.prospect_name, lead.prospect_email or ""),
            "email": self.score_email(lead.prospect_email),
            "phone": self.score_phone(lead.phone),
            "recency_score": self.score_recency(lead, now),
            "intake_score": self.score_intake(lead.intake, now.date()),
        }
