"""Overdue fine schedule.

Every function here is a pure function of a loan and an instant expressed in
milliseconds since the epoch. Callers supply "now" so results do not depend
on the wall clock; ``now_ms`` is only the default time source handed to
``Library``.
"""

from __future__ import annotations

import time

from loan import Loan

MS_PER_DAY = 86_400_000

# First GRACE_PERIOD_DAYS days are free; every day after that costs FINE_PER_DAY.
GRACE_PERIOD_DAYS = 30
FINE_PER_DAY = 2
CURRENCY_SYMBOL = "₹"

# Loans with this many grace days left (or fewer) are flagged as due soon.
DUE_SOON_DAYS = 5


def now_ms() -> int:
    return int(time.time() * 1000)


def elapsed_days(loan: Loan, now: int) -> int:
    """Whole days since the loan was issued, truncated toward zero."""
    diff = now - loan.issue_date
    days = abs(diff) // MS_PER_DAY
    return days if diff >= 0 else -days


def grace_days_left(loan: Loan, now: int, grace_days: int = GRACE_PERIOD_DAYS) -> int:
    """Days remaining in the grace period. Negative once the loan is overdue."""
    return grace_days - elapsed_days(loan, now)


def fine(loan: Loan, now: int, grace_days: int = GRACE_PERIOD_DAYS, rate: int = FINE_PER_DAY) -> int:
    """Fine owed on the loan. Charging starts strictly after the grace period."""
    overdue_days = elapsed_days(loan, now) - grace_days
    return max(0, overdue_days) * rate


def is_overdue(loan: Loan, now: int, grace_days: int = GRACE_PERIOD_DAYS) -> bool:
    return grace_days_left(loan, now, grace_days) < 0


def is_due_soon(loan: Loan, now: int, grace_days: int = GRACE_PERIOD_DAYS) -> bool:
    left = grace_days_left(loan, now, grace_days)
    return 0 <= left <= DUE_SOON_DAYS
