"""Overdue fine arithmetic. Pure functions, no store or app access."""
from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

ONE_DAY = timedelta(days=1)
DEFAULT_FINE_RATE = Decimal("1.00")
CENTS = Decimal("0.01")


def compute_overdue_days(due_date: datetime, returned_at: datetime) -> int:
    """
    Whole days late, any started day counts as a full one:
    one millisecond past the due instant is already one day.
    """
    late = returned_at - due_date
    if late <= timedelta(0):
        return 0
    days, rest = divmod(late, ONE_DAY)
    return days + (1 if rest else 0)


def compute_fine(due_date: datetime, returned_at: datetime, rate_per_day=DEFAULT_FINE_RATE) -> Decimal:
    days = compute_overdue_days(due_date, returned_at)
    if days == 0:
        return Decimal("0.00")
    return (Decimal(str(rate_per_day)) * days).quantize(CENTS)
