"""
Lead Intelligence Engine
========================
Lead scoring and recruitment analytics for a student-recruitment CRM:
  Stage 1: Phone Geolocation (country from phone number)
  Stage 2: Field Quality (name, email, phone, recency, intake proximity)
  Stage 3: Composite Score (High / Medium / Low / Very Low)
  Stage 4: Rule-Based Tier Score (hot / warm / cold + recommendations)
  Analytics: cohort rollups, key insights, pipeline, recruiter performance
"""

__version__ = "1.0.0"
__author__ = "Lead Intelligence Team"
