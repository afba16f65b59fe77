"""
Lead Intelligence Engine - Usage Examples
=========================================
This file demonstrates how to use the Lead Intelligence Engine
both programmatically and via the API.
"""

from datetime import datetime, timedelta, timezone


# =============================================================================
# EXAMPLE 1: Direct Scoring (no store)
# =============================================================================

def example_direct_scoring():
    """Score a single raw lead with both strategies"""
    from lead_engine.engine import LeadIntelligenceEngine
    from lead_engine.stages.stage3_composite import calculate_lead_score

    # Composite score straight from field values
    result = calculate_lead_score(
        name="Maria Garcia",
        email="maria.garcia@example.com",
        phone="+1 (809) 555-1234",
        intake="October 2026",
    )

    print("=" * 60)
    print("COMPOSITE SCORE: Maria Garcia")
    print("=" * 60)
    print(f"  Name:     {result.name_score}/40")
    print(f"  Email:    {result.email_score}/30")
    print(f"  Phone:    {result.phone_score}/20 ({result.detected_country})")
    print(f"  Recency:  {result.recency_score}/10")
    print(f"  Intake:   {result.intake_score}/20")
    print(f"  Total:    {result.total_score}/100 (raw {result.raw_total}) -> {result.quality_tier}")

    # Rule-based tier score for the same person, already in conversation
    engine = LeadIntelligenceEngine()
    rules = engine.score_record({
        "id": "demo-1",
        "prospect_name": "Maria Garcia",
        "prospect_email": "maria.garcia@example.com",
        "phone": "+1 (809) 555-1234",
        "contact_status": "interested",
        "barcelona_timeline": 2,
        "last_contact_date": datetime.now(timezone.utc) - timedelta(days=3),
    }, strategy="rules")

    print("\n--- Rule-based score ---")
    print(f"  Score: {rules.total_score} ({rules.quality_tier})")
    for match in rules.breakdown:
        print(f"    {match.points:+d}  {match.rule}")
    for rec in rules.recommendations:
        print(f"  * {rec}")

    return result, rules


# =============================================================================
# EXAMPLE 2: Engine with an in-memory store
# =============================================================================

def example_store_usage():
    """Load leads into a store, score them and pull the cohort report"""
    from lead_engine.engine import LeadIntelligenceEngine
    from lead_engine.store import InMemoryLeadStore

    now = datetime.now(timezone.utc)
    store = InMemoryLeadStore(
        leads=[
            {"id": "l1", "prospect_name": "Ana Perez", "phone": "18095551234",
             "country": "Dominican Republic", "contact_status": "converted",
             "intake": "October 2026", "created_at": now - timedelta(days=20)},
            {"id": "l2", "prospect_name": "Luis Gomez", "phone": "573001234567",
             "country": "Colombia", "contact_status": "interested",
             "barcelona_timeline": 3, "created_at": now - timedelta(days=5)},
            {"id": "l3", "prospect_name": "carla", "prospect_email": "carla.ruiz@example.com",
             "country": "Colombia", "contact_status": "not_contacted",
             "created_at": now - timedelta(days=45)},
        ],
        contact_history=[
            {"lead_id": "l1", "contact_type": "whatsapp", "outcome": "Interested",
             "contacted_at": now - timedelta(days=10), "has_funds": True, "ready_to_proceed": True},
            {"lead_id": "l2", "contact_type": "call", "outcome": "Voicemail",
             "contacted_at": now - timedelta(days=2)},
        ],
    )

    engine = LeadIntelligenceEngine(store=store)

    calculated = engine.calculate(strategy="rules")
    print("\n" + "=" * 60)
    print("CALCULATE (rules)")
    print("=" * 60)
    for score in calculated.scores:
        print(f"  {score['lead_id']}: {score['total_score']} ({score['quality_tier']})")
    print(f"  Tiers: {calculated.summary.tiers}  Avg: {calculated.summary.average_score}")

    written = engine.update_scores(["l1", "l2", "l3"])
    print(f"\nWrote scores: {written.updated}/{written.total}")

    for rec in engine.get_recommendations(["l1", "l2", "l3"]):
        print(f"  P{rec.priority} {rec.lead_id} [{rec.tier}] {rec.recommendations}")

    insights = engine.recruitment_insights("all")
    print("\n--- Key insights ---")
    for line in insights.key_insights or ["(not enough data)"]:
        print(f"  * {line}")

    return engine


# =============================================================================
# EXAMPLE 3: API Usage (via HTTP requests)
# =============================================================================

def example_api_usage():
    """Example of calling the API with requests"""
    example_code = '''
import requests

API_URL = "http://localhost:8000"
HEADERS = {"X-User-Role": "recruiter"}

# Quick score a raw record (both strategies)
response = requests.post(
    f"{API_URL}/api/score/quick",
    headers=HEADERS,
    json={
        "prospect_name": "Maria Garcia",
        "prospect_email": "maria.garcia@example.com",
        "phone": "+1 809 555 1234",
        "intake": "October 2026",
    },
)
print(response.json()["data"]["composite"]["quality_tier"])

# Score stored leads
response = requests.post(
    f"{API_URL}/api/recruiter/lead-scoring",
    headers=HEADERS,
    json={"action": "calculate", "leadIds": ["lead-1", "lead-2"]},
)

# Recruitment insights for the last quarter
response = requests.get(
    f"{API_URL}/api/recruiter/recruitment-insights",
    headers=HEADERS,
    params={"period": "quarter"},
)
for line in response.json()["data"]["key_insights"]:
    print(line)
'''
    print(example_code)


if __name__ == "__main__":
    example_direct_scoring()
    example_store_usage()
    example_api_usage()
