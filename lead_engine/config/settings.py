"""
Configuration settings for the Lead Intelligence Engine
"""

from typing import Dict, List, Any
import os

# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

ENGINE_CONFIG = {
    "service_name": os.getenv("ENGINE_SERVICE_NAME", "Lead Intelligence Engine"),
    "version": "1.0.0",
    # Bulk "calculate" without explicit ids only looks at this many leads
    "bulk_calculate_limit": int(os.getenv("BULK_CALCULATE_LIMIT", "500")),
    # Hour/day-of-week contact analysis is bucketed in this timezone
    "reporting_timezone": os.getenv("REPORTING_TIMEZONE", "UTC"),
    # 0 runs cohort passes inline, >0 fans them out to a thread pool
    "cohort_workers": int(os.getenv("COHORT_WORKERS", "0")),
}

AUTH_CONFIG = {
    "role_header": os.getenv("ROLE_HEADER", "X-User-Role"),
    "required_role": os.getenv("REQUIRED_ROLE", "recruiter"),
}

LOGGING_CONFIG = {
    "level": os.getenv("LOG_LEVEL", "INFO"),
    "format": os.getenv("LOG_FORMAT", "text"),
}

# =============================================================================
# COMPOSITE SCORE (field quality scheme)
# =============================================================================

COMPONENT_MAXIMA = {
    "name": 40,
    "email": 30,
    "phone": 20,
    "recency": 10,
    "intake": 20,
}

# Dominican Republic is the priority market and gets the full phone score
PRIORITY_AREA_CODES = ("809", "829", "849")
PRIORITY_COUNTRY = "Dominican Republic"

# Program intake months, matched by keyword in free-text intake fields
INTAKE_MONTH_KEYWORDS = [
    ("feb", 2),
    ("may", 5),
    ("oct", 10),
]

# (min_months, max_months, points); first match wins
INTAKE_PROXIMITY_BANDS = [
    (-2, 0, 15),
    (1, 2, 20),
    (3, 4, 15),
    (5, 6, 10),
    (7, 9, 5),
]

QUALITY_BUCKETS = [
    (85, "High"),
    (55, "Medium"),
    (35, "Low"),
    (0, "Very Low"),
]

# =============================================================================
# RULE-BASED TIER SCORE
# =============================================================================

TIER_MAPPING = [
    (70, 100, "hot", "High priority - ready to convert"),
    (40, 69, "warm", "Engaged - needs nurturing"),
    (0, 39, "cold", "Cold lead - consider re-activation"),
]

PRIOR_SCORE_WEIGHT = 0.5
PRIOR_SCORE_CAP = 25

RULE_LIBRARY = [
    # Engagement
    {
        "id": "eng_responded",
        "name": "Responded to outreach",
        "category": "engagement",
        "condition": "contact_status IN (interested, qualified, converted, referral)",
        "points": 20,
    },
    {
        "id": "eng_multi_interaction",
        "name": "Multiple interactions",
        "category": "engagement",
        "condition": "interaction_count >= 3",
        "points": 10,
    },
    {
        "id": "eng_recent_activity",
        "name": "Active in last 7 days",
        "category": "engagement",
        "condition": "last_contact_days <= 7",
        "points": 10,
    },
    # Profile completeness
    {
        "id": "prof_email_valid",
        "name": "Valid email",
        "category": "profile",
        "condition": "email_valid = true",
        "points": 10,
    },
    {
        "id": "prof_phone_valid",
        "name": "Valid phone number",
        "category": "profile",
        "condition": "phone_valid = true",
        "points": 10,
    },
    {
        "id": "prof_name_quality",
        "name": "Quality name data",
        "category": "profile",
        "condition": "name_score >= 28",
        "points": 5,
    },
    # Behavioral signals
    {
        "id": "beh_timeline_urgent",
        "name": "Urgent timeline (1-3 months)",
        "category": "behavior",
        "condition": "barcelona_timeline <= 3",
        "points": 25,
    },
    {
        "id": "beh_timeline_soon",
        "name": "Near timeline (4-6 months)",
        "category": "behavior",
        "condition": "3 < barcelona_timeline <= 6",
        "points": 15,
    },
    {
        "id": "beh_referral",
        "name": "Referred lead",
        "category": "behavior",
        "condition": "referral_source IS NOT NULL",
        "points": 10,
    },
    # Timing factors
    {
        "id": "time_fresh_lead",
        "name": "Fresh lead (< 14 days)",
        "category": "timing",
        "condition": "created_days <= 14",
        "points": 10,
    },
    {
        "id": "time_stale",
        "name": "Stale lead (> 30 days uncontacted)",
        "category": "timing",
        "condition": "contact_status = not_contacted AND last_contact_days > 30",
        "points": -10,
    },
]

RESPONDED_STATUSES = ["interested", "qualified", "converted", "referral"]
MULTI_INTERACTION_MIN = 3
NAME_QUALITY_MIN = 28

# =============================================================================
# COHORT ANALYTICS
# =============================================================================

# Statuses removed from every analytics read
ARCHIVED_STATUSES = ["archived", "archived_referral"]

# Statuses that do not count as "contacted"
UNCONTACTED_STATUSES = ["not_contacted", "referral"]

INTERESTED_OR_BETTER = ["interested", "qualified", "converted"]

READINESS_FIELDS = [
    ("has_funds", "Has Funds"),
    ("meets_age_requirements", "Meets Age Requirements"),
    ("has_valid_passport", "Valid Passport"),
    ("can_obtain_visa", "Can Obtain Visa"),
    ("can_start_intake", "Can Start Intake"),
    ("discussed_with_family", "Discussed With Family"),
    ("needs_housing_support", "Needs Housing Support"),
    ("understands_work_rules", "Understands Work Rules"),
    ("has_realistic_expectations", "Realistic Expectations"),
    ("ready_to_proceed", "Ready To Proceed"),
]

CONTACT_METHOD_NAMES = {
    "call": "Phone Call",
    "whatsapp": "WhatsApp",
    "email": "Email",
    "sms": "SMS",
    "meeting": "Meeting",
    "unknown": "Other",
}

# Outcomes containing these phrases are not counted as responses
NON_RESPONSE_OUTCOMES = ["voicemail", "no answer"]

INSIGHT_THRESHOLDS = {
    "best_country_min_leads": 5,
    "best_method_min_contacts": 10,
    "blocker_max_positive_rate": 50,
    "blocker_min_assessed": 5,
    "blocker_limit": 3,
    "opportunity_min_avg_score": 60,
    "opportunity_max_conversion": 10,
    "opportunity_min_leads": 5,
    "opportunity_limit": 3,
    "unspecified_intake_min_leads": 5,
    "timing_min_responses": 3,
}

REPORT_LIMITS = {
    "countries": 20,
    "outcomes": 15,
    "sources": 15,
    "intakes": 10,
    "top_sources": 10,
}

# =============================================================================
# PIPELINE STAGES
# =============================================================================

PIPELINE_STAGES: List[Dict[str, Any]] = [
    {
        "id": "referral",
        "name": "Referral",
        "order": 0,
        "color": "#EC4899",
        "description": "Referred leads - high priority",
        "auto_actions": {"add_tag": "referral_priority"},
        "conversion_target": 40,
    },
    {
        "id": "not_contacted",
        "name": "New Leads",
        "order": 1,
        "color": "#6B7280",
        "description": "Fresh leads that haven't been contacted yet",
        "auto_actions": {"send_template": "welcome_message"},
        "exit_criteria": ["Make first contact within 24 hours"],
        "conversion_target": 80,
    },
    {
        "id": "contacted",
        "name": "Contacted",
        "order": 2,
        "color": "#3B82F6",
        "description": "Initial contact made, awaiting response",
        "exit_criteria": ["Receive response", "Schedule follow-up if no response in 3 days"],
        "conversion_target": 60,
    },
    {
        "id": "interested",
        "name": "Interested",
        "order": 3,
        "color": "#8B5CF6",
        "description": "Lead has shown interest, needs nurturing",
        "auto_actions": {"send_template": "program_details"},
        "exit_criteria": ["Answer all questions", "Send application link"],
        "conversion_target": 50,
    },
    {
        "id": "qualified",
        "name": "Qualified",
        "order": 4,
        "color": "#F59E0B",
        "description": "Lead is qualified and ready for conversion",
        "auto_actions": {"send_template": "application_assistance"},
        "exit_criteria": ["Complete application", "Submit documents"],
        "conversion_target": 70,
    },
    {
        "id": "converted",
        "name": "Converted",
        "order": 5,
        "color": "#10B981",
        "description": "Successfully enrolled",
        "auto_actions": {"send_template": "welcome_student"},
    },
    {
        "id": "unqualified",
        "name": "Unqualified",
        "order": 6,
        "color": "#EF4444",
        "description": "Lead does not meet criteria or not interested",
    },
]

STUCK_THRESHOLD_DAYS = 7

# =============================================================================
# RECRUITER PERFORMANCE
# =============================================================================

BENCHMARKS = {
    "contact_rate_target": 80,
    "conversion_rate_target": 15,
    "response_time_target_hours": 2,
    "messages_per_day_target": 20,
}

# Fraction of a target that still counts as "near_target"
NEAR_TARGET_RATIOS = {
    "contact_rate": 0.8,
    "conversion_rate": 0.8,
    "activity": 0.7,
}

ACTION_ITEM_THRESHOLDS = {
    "contact_rate_ratio": 0.7,
    "stale_days": 7,
    "stale_leads_min": 10,
    "conversion_drop_pct": -20,
}
