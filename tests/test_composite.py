"""Tests for lead_engine.stages.stage3_composite: field-quality composite score."""
import pytest

from lead_engine.models.scoring_config import ScoringConfig
from lead_engine.stages.base import ScoringContext
from lead_engine.stages.stage3_composite import (
    CompositeScoringStage,
    calculate_lead_score,
    get_quality_bucket,
)


# ── Buckets ──────────────────────────────────────────────────────────────────

class TestQualityBucket:

    @pytest.mark.parametrize('score,bucket', [
        (100, 'High'),
        (85, 'High'),
        (84, 'Medium'),
        (55, 'Medium'),
        (54, 'Low'),
        (35, 'Low'),
        (34, 'Very Low'),
        (0, 'Very Low'),
    ])
    def test_boundaries(self, score, bucket):
        assert get_quality_bucket(score) == bucket

    def test_custom_buckets(self):
        buckets = [(50, 'Good'), (0, 'Bad')]
        assert get_quality_bucket(50, buckets) == 'Good'
        assert get_quality_bucket(49, buckets) == 'Bad'


# ── combine ──────────────────────────────────────────────────────────────────

class TestCombine:

    def test_total_is_clamped_to_100(self):
        result = CompositeScoringStage().combine(name=40, email=30, phone=20, recency=5, intake=20)
        assert result.raw_total == 115
        assert result.total_score == 100
        assert result.quality_tier == 'High'

    def test_sum_below_cap(self):
        result = CompositeScoringStage().combine(name=38, email=0, phone=15, recency=5, intake=0)
        assert result.total_score == 58
        assert result.quality_tier == 'Medium'

    def test_never_negative(self):
        result = CompositeScoringStage().combine(name=0, email=0, phone=0, recency=-10, intake=0)
        assert result.total_score == 0

    def test_uses_configured_buckets(self):
        config = ScoringConfig(quality_buckets=[(10, 'Good'), (0, 'Bad')])
        result = CompositeScoringStage(config).combine(name=12, email=0, phone=0, recency=0, intake=0)
        assert result.quality_tier == 'Good'


# ── process ──────────────────────────────────────────────────────────────────

class TestCompositeProcess:

    def test_complete_lead(self, make_lead, now):
        lead = make_lead(
            id='lead-42',
            prospect_name='Maria Garcia',
            prospect_email='maria.garcia@example.com',
            phone='+1 809 555 1234',
            intake='May 2026',
        )
        result = CompositeScoringStage().process(lead, ScoringContext(now=now))

        assert result.lead_id == 'lead-42'
        assert result.strategy == 'composite'
        assert result.name_score == 38
        assert result.email_score == 30
        assert result.phone_score == 20
        assert result.recency_score == 5
        assert result.intake_score == 20
        assert result.raw_total == 113
        assert result.total_score == 100
        assert result.quality_tier == 'High'
        assert result.detected_country == 'Dominican Republic'
        assert result.email_valid is True
        assert result.phone_valid is True

    def test_empty_lead_only_gets_recency(self, make_lead, now):
        result = CompositeScoringStage().process(make_lead(), ScoringContext(now=now))
        assert result.total_score == 5
        assert result.quality_tier == 'Very Low'
        assert result.detected_country == 'Unknown'

    def test_garbage_fields_do_not_raise(self, make_lead, now):
        lead = make_lead(prospect_name='???', prospect_email='@@', phone='abc', intake='soon')
        result = CompositeScoringStage().process(lead, ScoringContext(now=now))
        assert 0 <= result.total_score <= 100


class TestCalculateLeadScore:

    def test_loose_fields(self, now):
        result = calculate_lead_score(
            'Luis Gomez', 'luis@example.com', '+57 300 123 4567', 'October 2026', now=now,
        )
        # 38 + 30 + 15 + 5 + 5
        assert result.total_score == 93
        assert result.quality_tier == 'High'
        assert result.detected_country == 'Colombia'
        assert result.lead_id is None
