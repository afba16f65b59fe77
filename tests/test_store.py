"""Tests for lead_engine.store: in-memory lead store."""
from datetime import timedelta
from unittest.mock import MagicMock

import pytest

from lead_engine.errors import UpstreamStoreError
from lead_engine.models.schemas import Lead
from lead_engine.store import InMemoryLeadStore


@pytest.fixture
def store(now):
    return InMemoryLeadStore(
        leads=[
            {'id': 'a', 'country': 'Colombia', 'contact_status': 'contacted',
             'created_at': now - timedelta(days=10), 'last_contact_date': now - timedelta(days=9)},
            {'id': 'b', 'country': 'Colombia', 'contact_status': 'not_contacted',
             'created_at': now - timedelta(days=5)},
            Lead(id='c', country='Peru', contact_status='archived',
                 created_at=now - timedelta(days=1), last_contact_date=now - timedelta(days=1)),
        ],
        contact_history=[
            {'lead_id': 'a', 'contacted_at': now - timedelta(days=9)},
            {'lead_id': 'c', 'contacted_at': now - timedelta(days=1)},
        ],
        messages=[
            {'lead_id': 'a', 'sent_at': now - timedelta(days=9)},
        ],
    )


def _ids(leads):
    return [l.id for l in leads]


class TestQueryLeads:

    def test_all(self, store):
        assert sorted(_ids(store.query_leads())) == ['a', 'b', 'c']

    def test_by_ids_ignores_unknown(self, store):
        assert _ids(store.query_leads(ids=['b', 'zzz'])) == ['b']

    def test_status_filters(self, store):
        assert _ids(store.query_leads(statuses=['contacted'])) == ['a']
        assert sorted(_ids(store.query_leads(exclude_statuses=['archived']))) == ['a', 'b']

    def test_country(self, store):
        assert sorted(_ids(store.query_leads(country='Colombia'))) == ['a', 'b']

    def test_created_after_is_inclusive(self, store, now):
        assert sorted(_ids(store.query_leads(created_after=now - timedelta(days=5)))) == ['b', 'c']

    def test_created_before_is_exclusive(self, store, now):
        assert _ids(store.query_leads(created_before=now - timedelta(days=5))) == ['a']

    def test_last_contact_before_skips_never_contacted(self, store, now):
        assert _ids(store.query_leads(last_contact_before=now - timedelta(days=2))) == ['a']

    def test_order_limit_offset(self, store):
        ordered = store.query_leads(order_by='created_at', descending=True)
        assert _ids(ordered) == ['c', 'b', 'a']
        assert _ids(store.query_leads(order_by='created_at', limit=1, offset=1)) == ['b']

    def test_order_puts_missing_values_last(self, store):
        assert _ids(store.query_leads(order_by='last_contact_date')) == ['a', 'c', 'b']

    def test_unknown_order_column(self, store):
        with pytest.raises(UpstreamStoreError):
            store.query_leads(order_by='shoe_size')

    def test_results_are_copies(self, store):
        store.query_leads(ids=['a'])[0].country = 'Mars'
        assert store.query_leads(ids=['a'])[0].country == 'Colombia'

    def test_count(self, store):
        assert store.count_leads() == 3
        assert store.count_leads(statuses=['contacted', 'archived']) == 2
        assert store.count_leads(country='Peru') == 1


class TestUpdates:

    def test_update_lead(self, store):
        updated = store.update_lead('a', {'lead_score': 55, 'lead_quality': 'warm'})
        assert updated.lead_score == 55
        assert store.query_leads(ids=['a'])[0].lead_quality == 'warm'

    def test_update_missing_lead(self, store):
        with pytest.raises(UpstreamStoreError) as exc_info:
            store.update_lead('zzz', {'lead_score': 1})
        assert exc_info.value.details == {'lead_id': 'zzz'}

    def test_rejected_value(self, store):
        with pytest.raises(UpstreamStoreError):
            store.update_lead('a', {'lead_score': 'lots'})
        assert store.query_leads(ids=['a'])[0].lead_score is None

    def test_update_leads_skips_unknown(self, store):
        updated = store.update_leads(['a', 'zzz', 'b'], {'contact_status': 'interested'})
        assert _ids(updated) == ['a', 'b']
        assert store.count_leads(statuses=['interested']) == 2

    def test_update_leads_checks_membership_under_lock(self, store):
        store._lock = MagicMock()
        store.update_leads(['zzz'], {'contact_status': 'interested'})
        assert store._lock.__enter__.call_count == 1

    def test_numeric_phone_is_stored_as_text(self, store):
        store.add_leads([{'id': 'd', 'phone': 18091234567}])
        assert store.query_leads(ids=['d'])[0].phone == '18091234567'


class TestActivityQueries:

    def test_contact_history(self, store, now):
        assert len(store.query_contact_history()) == 2
        assert len(store.query_contact_history(lead_ids=['a'])) == 1
        assert len(store.query_contact_history(since=now - timedelta(days=2))) == 1

    def test_messages(self, store, now):
        assert len(store.query_messages(lead_ids=['a'])) == 1
        assert store.query_messages(lead_ids=['b']) == []
        assert store.query_messages(since=now) == []

    def test_naive_datetimes_are_treated_as_utc(self, now):
        store = InMemoryLeadStore(leads=[{'id': 'n', 'created_at': now.replace(tzinfo=None)}])
        assert store.query_leads(created_after=now) != []
