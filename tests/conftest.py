"""Shared test fixtures."""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from lead_engine.engine import LeadIntelligenceEngine
from lead_engine.models.schemas import Lead, ContactHistoryEntry, MessageEvent
from lead_engine.store import InMemoryLeadStore


# Fixed clock for the pure stages; store-backed tests use times relative to now
FIXED_NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


def days_ago(days, now=None):
    return (now or datetime.now(timezone.utc)) - timedelta(days=days)


# ── Builders ─────────────────────────────────────────────────────────────────

@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def make_lead():
    """Factory fixture for Lead models with sensible defaults."""
    counter = {'n': 0}

    def _make(**overrides):
        counter['n'] += 1
        defaults = dict(
            id=f'lead-{counter["n"]}',
            contact_status='not_contacted',
            created_at=FIXED_NOW - timedelta(days=60),
        )
        defaults.update(overrides)
        return Lead(**defaults)
    return _make


@pytest.fixture
def make_contact():
    def _make(lead_id, **overrides):
        defaults = dict(lead_id=lead_id, contact_type='call', contacted_at=FIXED_NOW)
        defaults.update(overrides)
        return ContactHistoryEntry(**defaults)
    return _make


@pytest.fixture
def make_message():
    def _make(lead_id, **overrides):
        defaults = dict(lead_id=lead_id, direction='outbound', sent_at=FIXED_NOW)
        defaults.update(overrides)
        return MessageEvent(**defaults)
    return _make


# ── Store / engine ───────────────────────────────────────────────────────────

@pytest.fixture
def seeded_store():
    """Small store with leads across stages, countries and sources."""
    return InMemoryLeadStore(
        leads=[
            {'id': 'lead-maria', 'prospect_name': 'Maria Garcia',
             'prospect_email': 'maria.garcia@example.com', 'phone': '+1 809 555 1234',
             'country': 'Dominican Republic', 'contact_status': 'interested',
             'barcelona_timeline': 2, 'referral_source': 'Alumni',
             'created_at': days_ago(3), 'last_contact_date': days_ago(1)},
            {'id': 'lead-luis', 'prospect_name': 'Luis Gomez', 'phone': '573001234567',
             'country': 'Colombia', 'contact_status': 'contacted',
             'created_at': days_ago(20), 'last_contact_date': days_ago(10)},
            {'id': 'lead-x', 'prospect_name': 'x', 'country': 'Colombia',
             'contact_status': 'not_contacted', 'created_at': days_ago(60)},
            {'id': 'lead-ana', 'prospect_name': 'Ana Perez', 'country': 'Dominican Republic',
             'contact_status': 'converted', 'campaign': 'Spring Fair',
             'created_at': days_ago(40), 'last_contact_date': days_ago(30)},
            {'id': 'lead-old', 'prospect_name': 'Old Lead', 'country': 'Peru',
             'contact_status': 'archived', 'created_at': days_ago(90)},
        ],
        contact_history=[
            {'lead_id': 'lead-maria', 'contact_type': 'whatsapp', 'outcome': 'Interested',
             'contacted_at': days_ago(1), 'has_funds': True, 'ready_to_proceed': True},
            {'lead_id': 'lead-luis', 'contact_type': 'call', 'outcome': 'Voicemail',
             'contacted_at': days_ago(10)},
            {'lead_id': 'lead-ana', 'contact_type': 'call', 'outcome': 'Enrolled',
             'contacted_at': days_ago(30), 'has_funds': True, 'ready_to_proceed': True},
        ],
        messages=[
            {'lead_id': 'lead-maria', 'direction': 'outbound', 'sent_at': days_ago(2)},
            {'lead_id': 'lead-maria', 'direction': 'inbound', 'sent_at': days_ago(1)},
        ],
    )


@pytest.fixture
def engine(seeded_store):
    return LeadIntelligenceEngine(store=seeded_store)


# ── API ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def api_app(engine):
    """FastAPI app with the engine dependency pointed at the seeded store."""
    from lead_engine.api.endpoints import app, get_engine
    app.dependency_overrides[get_engine] = lambda: engine
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    with TestClient(api_app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def recruiter_headers():
    return {'X-User-Role': 'recruiter'}
