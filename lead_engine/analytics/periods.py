"""
Reporting periods.

A period name resolves to the start of a trailing window ending now.
"all" means no lower bound.
"""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional

from ..errors import ValidationError

PERIODS = ("day", "week", "month", "quarter")
ALL_TIME = "all"


def subtract_months(moment: datetime, months: int) -> datetime:
    """Step back whole calendar months, clamping the day to the target month."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(
    period: str,
    now: Optional[datetime] = None,
    allow_all: bool = True,
) -> Optional[datetime]:
    """
    Resolve a period name to its window start.

    Args:
        period: day, week, month, quarter (or "all" when allow_all)
        now: End of the window, defaults to current UTC time
        allow_all: Whether "all" (no bound) is accepted

    Returns:
        Window start datetime, or None for "all"

    Raises:
        ValidationError: unknown period name
    """
    now = now or datetime.now(timezone.utc)

    if period == ALL_TIME and allow_all:
        return None
    if period == "day":
        return now - timedelta(days=1)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return subtract_months(now, 1)
    if period == "quarter":
        return subtract_months(now, 3)

    accepted = list(PERIODS) + ([ALL_TIME] if allow_all else [])
    raise ValidationError(
        f"Invalid period '{period}'",
        details={"accepted": accepted},
    )
