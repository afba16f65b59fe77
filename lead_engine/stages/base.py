"""
Scoring strategy contract.

Both scoring schemes implement ScoringStrategy.process() and return a
StrategyScore subclass. The engine keeps a name -> strategy registry and
never reconciles the two schemes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from ..models.schemas import Lead, StrategyScore


@dataclass
class ScoringContext:
    """Per-call inputs a strategy may need beyond the lead itself."""
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    interaction_count: int = 0


class ScoringStrategy(ABC):
    """
    Base class for lead scoring strategies.

    A strategy is a pure function of (lead, context). It must not raise
    on malformed lead data: missing or garbage fields score zero.
    """
    name: str = ''
    description: str = ''

    @abstractmethod
    def process(self, lead: Lead, context: Optional[ScoringContext] = None) -> StrategyScore:
        """
        Score a single lead.

        Args:
            lead:    Lead record from the store (or built from raw input).
            context: Clock and interaction counts; defaults to "now, no history".

        Returns:
            StrategyScore subclass carrying total_score and quality_tier.
        """
        ...
