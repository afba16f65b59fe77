"""Tests for lead_engine.stages.stage4_rules: rule-based hot/warm/cold scoring."""
from datetime import timedelta

import pytest

from lead_engine.models.scoring_config import ScoringConfig, create_default_scoring_config
from lead_engine.stages.base import ScoringContext
from lead_engine.stages import STRATEGIES
from lead_engine.stages.stage4_rules import RuleBasedScoringStage


def _matched(result):
    return {m.rule_id for m in result.breakdown}


@pytest.fixture
def scorer():
    return RuleBasedScoringStage()


@pytest.fixture
def ctx(now):
    return ScoringContext(now=now)


# ── Tiers ────────────────────────────────────────────────────────────────────

class TestTierExamples:
    """Worked examples at and around the tier boundaries."""

    def test_stale_uncontacted_lead_is_cold(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(), ctx)

        assert _matched(result) == {'time_stale'}
        assert result.rule_points == -10
        assert result.total_score == 0
        assert result.quality_tier == 'cold'

    def test_interested_with_urgent_timeline_is_warm(self, scorer, make_lead, ctx):
        lead = make_lead(contact_status='interested', barcelona_timeline=2)
        result = scorer.process(lead, ctx)

        assert _matched(result) == {'eng_responded', 'beh_timeline_urgent'}
        assert result.total_score == 45
        assert result.quality_tier == 'warm'

    def test_prior_score_pushes_to_hot_at_70(self, scorer, make_lead, ctx):
        lead = make_lead(contact_status='interested', barcelona_timeline=2, lead_score=50)
        result = scorer.process(lead, ctx)

        assert result.prior_score_bonus == 25
        assert result.total_score == 70
        assert result.quality_tier == 'hot'

    def test_one_point_below_hot_is_warm(self, scorer, make_lead, ctx):
        lead = make_lead(contact_status='interested', barcelona_timeline=2, lead_score=48)
        result = scorer.process(lead, ctx)

        assert result.prior_score_bonus == 24
        assert result.total_score == 69
        assert result.quality_tier == 'warm'

    @pytest.mark.parametrize('score,tier', [(100, 'hot'), (70, 'hot'), (69, 'warm'), (40, 'warm'), (39, 'cold'), (0, 'cold')])
    def test_map_to_tier(self, scorer, score, tier):
        assert scorer.map_to_tier(score) == tier


# ── Individual rules ─────────────────────────────────────────────────────────

class TestRules:

    def test_every_rule_fires_and_total_is_clamped(self, scorer, make_lead, now):
        lead = make_lead(
            prospect_name='Maria Garcia',
            prospect_email='maria.garcia@example.com',
            phone='+1 809 555 1234',
            contact_status='interested',
            barcelona_timeline=2,
            referral_source='Alumni',
            created_at=now - timedelta(days=5),
            last_contact_date=now - timedelta(days=2),
        )
        result = scorer.process(lead, ScoringContext(now=now, interaction_count=3))

        assert _matched(result) == {
            'eng_responded', 'eng_multi_interaction', 'eng_recent_activity',
            'prof_email_valid', 'prof_phone_valid', 'prof_name_quality',
            'beh_timeline_urgent', 'beh_referral', 'time_fresh_lead',
        }
        assert result.rule_points == 110
        assert result.total_score == 100
        assert result.quality_tier == 'hot'

    def test_breakdown_carries_rule_metadata(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(referral_source='Alumni'), ctx)
        match = next(m for m in result.breakdown if m.rule_id == 'beh_referral')
        assert match.category == 'behavior'
        assert match.rule == 'Referred lead'
        assert match.points == 10

    def test_referral_status_counts_as_responded(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(contact_status='referral'), ctx)
        assert 'eng_responded' in _matched(result)

    def test_contacted_does_not_count_as_responded(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(contact_status='contacted'), ctx)
        assert 'eng_responded' not in _matched(result)

    def test_two_interactions_are_not_enough(self, scorer, make_lead, now):
        result = scorer.process(make_lead(), ScoringContext(now=now, interaction_count=2))
        assert 'eng_multi_interaction' not in _matched(result)

    def test_near_timeline(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(barcelona_timeline=5), ctx)
        assert 'beh_timeline_soon' in _matched(result)
        assert 'beh_timeline_urgent' not in _matched(result)

    def test_distant_timeline(self, scorer, make_lead, ctx):
        matched = _matched(scorer.process(make_lead(barcelona_timeline=9), ctx))
        assert not matched & {'beh_timeline_soon', 'beh_timeline_urgent'}

    def test_blank_referral_source_ignored(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(referral_source='   '), ctx)
        assert 'beh_referral' not in _matched(result)

    def test_stored_phone_flag_counts_as_valid(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(phone_valid=True), ctx)
        assert 'prof_phone_valid' in _matched(result)
        assert 'Verify phone number to improve contact rate' not in result.recommendations

    def test_never_contacted_goes_stale_from_creation(self, scorer, make_lead, now):
        ctx = ScoringContext(now=now)
        young = make_lead(created_at=now - timedelta(days=20))
        old = make_lead(created_at=now - timedelta(days=31))
        assert 'time_stale' not in _matched(scorer.process(young, ctx))
        assert 'time_stale' in _matched(scorer.process(old, ctx))

    def test_stale_only_applies_to_uncontacted(self, scorer, make_lead, now):
        lead = make_lead(contact_status='contacted', last_contact_date=now - timedelta(days=40))
        assert 'time_stale' not in _matched(scorer.process(lead, ScoringContext(now=now)))

    def test_prior_bonus_is_capped(self, scorer, make_lead, ctx):
        assert scorer.process(make_lead(lead_score=100), ctx).prior_score_bonus == 25

    def test_no_prior_score_no_bonus(self, scorer, make_lead, ctx):
        assert scorer.process(make_lead(lead_score=None), ctx).prior_score_bonus == 0
        assert scorer.process(make_lead(lead_score=0), ctx).prior_score_bonus == 0


# ── Recommendations ──────────────────────────────────────────────────────────

class TestRecommendations:

    def test_new_lead(self, scorer, make_lead, ctx):
        result = scorer.process(make_lead(), ctx)
        assert result.recommendations == [
            'Verify phone number to improve contact rate',
            "Make initial contact - lead hasn't been reached",
        ]

    def test_contacted_cold_lead_needs_follow_up(self, scorer, make_lead, now):
        lead = make_lead(contact_status='contacted', last_contact_date=now - timedelta(days=20))
        result = scorer.process(lead, ScoringContext(now=now))

        assert result.quality_tier == 'cold'
        assert result.recommendations == [
            'Verify phone number to improve contact rate',
            'Follow up - no contact in 20 days',
            'Consider re-engagement campaign',
        ]

    def test_converted_lead_gets_no_follow_up(self, scorer, make_lead, now):
        lead = make_lead(
            contact_status='converted',
            phone='+1 809 555 1234',
            last_contact_date=now - timedelta(days=20),
        )
        assert scorer.process(lead, ScoringContext(now=now)).recommendations == []

    def test_urgent_timeline(self, scorer, make_lead, ctx):
        lead = make_lead(contact_status='interested', phone='+1 809 555 1234', barcelona_timeline=1)
        assert scorer.process(lead, ctx).recommendations == [
            'PRIORITY: Urgent timeline - prioritize conversion',
        ]


# ── Configuration ────────────────────────────────────────────────────────────

class TestScoringConfig:

    def test_disabled_rule_is_skipped(self, make_lead, ctx):
        config = create_default_scoring_config(disabled_rules=['time_stale'])
        result = RuleBasedScoringStage(config).process(make_lead(), ctx)
        assert result.breakdown == []
        assert result.rule_points == 0

    def test_point_override(self, make_lead, ctx):
        config = create_default_scoring_config(point_overrides={'eng_responded': 30})
        result = RuleBasedScoringStage(config).process(make_lead(contact_status='interested'), ctx)
        assert result.total_score == 30

    def test_default_config_has_all_rules(self):
        config = ScoringConfig()
        assert len(config.rules) == 11
        assert config.get_rule('time_stale').points == -10
        assert config.get_rule('nope') is None

    def test_strategy_registry(self):
        assert STRATEGIES['rules'] is RuleBasedScoringStage
        assert set(STRATEGIES) == {'rules', 'composite'}
