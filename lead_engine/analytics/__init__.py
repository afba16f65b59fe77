# Cohort analytics module
from .cohorts import CohortAggregationStage, apply_report_limits, latest_readiness
from .insights import InsightGenerationStage
from .pipeline import PipelineAnalyzer
from .performance import RecruiterPerformanceAnalyzer
from .periods import period_start
