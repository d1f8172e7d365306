#!/usr/bin/env python

"""
    Fine accrual for overdue loans.

    A loan due on day D owes nothing through the end of D; returning it at any
    time on D+1 owes one full day. Both arguments may be dates or datetimes,
    they are compared as calendar dates.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from decimal import Decimal

from circulation.core.utils import to_date

ZERO = Decimal("0")


def whole_days_between(start, end) -> int:
    return (to_date(end) - to_date(start)).days


def days_overdue(due_date, as_of) -> int:
    """Whole days past due, never negative."""
    return max(0, whole_days_between(due_date, as_of))


def calculate_fine(due_date, as_of, fine_per_day) -> Decimal:
    """Amount owed on a loan due `due_date` when settled at `as_of`."""
    rate = Decimal(str(fine_per_day))
    if rate < 0:
        raise ValueError("fine_per_day must be >= 0")
    days = days_overdue(due_date, as_of)
    if not days:
        return ZERO
    return rate * days
