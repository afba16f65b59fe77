"""
Insight Generation
==================
Turn a cohort report into short, ordered findings for recruiters.

Heuristics (in output order):
1. Best converting country
2. Most effective contact method
3. Leads ready to proceed
4. Common readiness blockers
5. Countries with good leads but weak conversion
"""

from typing import Optional, Dict, Any, List

from ..models.insights import CohortReport, CountryInsight, ContactMethodInsight
from ..config.settings import INSIGHT_THRESHOLDS
from .metrics import percent


class InsightGenerationStage:
    """
    Produce natural-language findings from aggregated cohort metrics.
    """

    def __init__(self, thresholds: Optional[Dict[str, Any]] = None):
        self.thresholds = {**INSIGHT_THRESHOLDS, **(thresholds or {})}

    def process(self, report: CohortReport) -> List[str]:
        """
        Generate key insights.

        Args:
            report: Untruncated cohort report

        Returns:
            Insight sentences; heuristics with nothing to say are skipped
        """
        insights = []

        best_country = self.best_country(report.country_insights)
        if best_country and best_country.conversion_rate > 0:
            insights.append(
                f"{best_country.country} has the highest conversion rate at "
                f"{best_country.conversion_rate}%"
            )

        best_method = self.best_method(report.contact_method_insights)
        if best_method and best_method.success_rate > 0:
            insights.append(
                f"{best_method.method} is most effective with "
                f"{best_method.success_rate}% success rate"
            )

        summary = report.readiness_summary
        if summary.ready_to_proceed > 0:
            insights.append(
                f"{summary.ready_to_proceed} leads are ready to proceed "
                f"({percent(summary.ready_to_proceed, summary.total_assessed)}% of assessed)"
            )

        if summary.common_blockers:
            insights.append(f"Common blockers: {', '.join(summary.common_blockers)}")

        opportunities = self.opportunity_countries(report.country_insights)
        if opportunities:
            names = ", ".join(c.country for c in opportunities)
            insights.append(
                f"Opportunity: {names} have high-quality leads but low conversion"
            )

        return insights

    def best_country(self, countries: List[CountryInsight]) -> Optional[CountryInsight]:
        eligible = [c for c in countries if c.total_leads >= self.thresholds["best_country_min_leads"]]
        if not eligible:
            return None
        # max() keeps the first of equal rates, i.e. the larger country
        return max(eligible, key=lambda c: c.conversion_rate)

    def best_method(self, methods: List[ContactMethodInsight]) -> Optional[ContactMethodInsight]:
        eligible = [m for m in methods if m.total_contacts >= self.thresholds["best_method_min_contacts"]]
        if not eligible:
            return None
        return max(eligible, key=lambda m: m.success_rate)

    def opportunity_countries(self, countries: List[CountryInsight]) -> List[CountryInsight]:
        matches = [
            c for c in countries
            if c.avg_lead_score > self.thresholds["opportunity_min_avg_score"]
            and c.conversion_rate < self.thresholds["opportunity_max_conversion"]
            and c.total_leads >= self.thresholds["opportunity_min_leads"]
        ]
        return matches[: self.thresholds["opportunity_limit"]]
