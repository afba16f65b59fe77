"""Tests for lead_engine.analytics.insights: key insight sentences."""
import pytest

from lead_engine.analytics.insights import InsightGenerationStage
from lead_engine.models.insights import (
    CohortReport,
    CountryInsight,
    ContactMethodInsight,
    FunnelTotals,
    ReadinessSummary,
)


def _report(countries=None, methods=None, readiness=None):
    return CohortReport(
        summary=FunnelTotals(),
        readiness_summary=readiness or ReadinessSummary(),
        country_insights=countries or [],
        contact_method_insights=methods or [],
    )


@pytest.fixture
def generator():
    return InsightGenerationStage()


# ── Individual heuristics ────────────────────────────────────────────────────

class TestBestCountry:

    def test_small_countries_are_ignored(self, generator):
        countries = [
            CountryInsight(country='Big', total_leads=10, conversion_rate=20),
            CountryInsight(country='Tiny', total_leads=4, conversion_rate=100),
            CountryInsight(country='Mid', total_leads=6, conversion_rate=50),
        ]
        assert generator.process(_report(countries)) == [
            'Mid has the highest conversion rate at 50%',
        ]

    def test_tie_keeps_first(self, generator):
        countries = [
            CountryInsight(country='First', total_leads=8, conversion_rate=25),
            CountryInsight(country='Second', total_leads=5, conversion_rate=25),
        ]
        assert generator.best_country(countries).country == 'First'

    def test_zero_conversion_says_nothing(self, generator):
        countries = [CountryInsight(country='A', total_leads=10, conversion_rate=0)]
        assert generator.process(_report(countries)) == []


class TestBestMethod:

    def test_needs_minimum_contacts(self, generator):
        methods = [
            ContactMethodInsight(method='Phone Call', total_contacts=12, success_rate=40),
            ContactMethodInsight(method='WhatsApp', total_contacts=5, success_rate=90),
        ]
        assert generator.process(_report(methods=methods)) == [
            'Phone Call is most effective with 40% success rate',
        ]

    def test_no_eligible_method(self, generator):
        methods = [ContactMethodInsight(method='SMS', total_contacts=9, success_rate=90)]
        assert generator.best_method(methods) is None


class TestReadinessInsights:

    def test_ready_and_blockers(self, generator):
        readiness = ReadinessSummary(
            total_assessed=4,
            ready_to_proceed=3,
            common_blockers=['Can Obtain Visa', 'Has Funds'],
        )
        assert generator.process(_report(readiness=readiness)) == [
            '3 leads are ready to proceed (75% of assessed)',
            'Common blockers: Can Obtain Visa, Has Funds',
        ]


class TestOpportunities:

    def test_high_score_low_conversion(self, generator):
        countries = [
            CountryInsight(country='A', total_leads=8, avg_lead_score=70, conversion_rate=5),
            CountryInsight(country='B', total_leads=8, avg_lead_score=60, conversion_rate=5),
            CountryInsight(country='C', total_leads=4, avg_lead_score=90, conversion_rate=0),
            CountryInsight(country='D', total_leads=9, avg_lead_score=80, conversion_rate=10),
        ]
        assert [c.country for c in generator.opportunity_countries(countries)] == ['A']

    def test_capped_at_three(self, generator):
        countries = [
            CountryInsight(country=f'C{i}', total_leads=5, avg_lead_score=75, conversion_rate=0)
            for i in range(5)
        ]
        insights = generator.process(_report(countries))
        assert insights == ['Opportunity: C0, C1, C2 have high-quality leads but low conversion']


# ── Ordering ─────────────────────────────────────────────────────────────────

class TestOrdering:

    def test_full_report_order(self, generator):
        report = _report(
            countries=[
                CountryInsight(country='Dominican Republic', total_leads=20, conversion_rate=30, avg_lead_score=50),
                CountryInsight(country='Colombia', total_leads=10, conversion_rate=5, avg_lead_score=72),
            ],
            methods=[ContactMethodInsight(method='WhatsApp', total_contacts=30, success_rate=45)],
            readiness=ReadinessSummary(total_assessed=10, ready_to_proceed=4, common_blockers=['Valid Passport']),
        )
        assert generator.process(report) == [
            'Dominican Republic has the highest conversion rate at 30%',
            'WhatsApp is most effective with 45% success rate',
            '4 leads are ready to proceed (40% of assessed)',
            'Common blockers: Valid Passport',
            'Opportunity: Colombia have high-quality leads but low conversion',
        ]

    def test_empty_report(self, generator):
        assert generator.process(_report()) == []

    def test_custom_thresholds(self):
        generator = InsightGenerationStage({'best_country_min_leads': 1})
        countries = [CountryInsight(country='Tiny', total_leads=1, conversion_rate=100)]
        assert generator.best_country(countries).country == 'Tiny'
