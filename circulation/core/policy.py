#!/usr/bin/env python

"""
    Loan policy for Circulation: the institution's lending rules.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, Optional, Tuple

from circulation import configs


@dataclass(frozen=True)
class LoanPolicy:
    loan_period_options_days: FrozenSet[int] = frozenset({7, 14, 21, 30})
    default_loan_period_days: int = 14
    max_renewals: int = 2
    renewal_extension_days: int = 7
    fine_per_day: Decimal = Decimal("5.00")
    max_books_per_borrower: int = 5
    max_books_by_role: Dict[str, int] = field(default_factory=dict)
    reservation_hold_days: int = 7
    due_soon_days: int = 2
    reminder_days: Tuple[int, ...] = (1, 3, 7)

    def __post_init__(self):
        # Coerce loose inputs (lists, floats) into the frozen representation
        object.__setattr__(self, "loan_period_options_days",
                           frozenset(self.loan_period_options_days))
        object.__setattr__(self, "fine_per_day", Decimal(str(self.fine_per_day)))
        object.__setattr__(self, "reminder_days",
                           tuple(sorted(set(self.reminder_days), reverse=True)))
        object.__setattr__(self, "max_books_by_role", dict(self.max_books_by_role))

        if not self.loan_period_options_days or min(self.loan_period_options_days) <= 0:
            raise ValueError("loan_period_options_days must hold positive day counts")
        if self.default_loan_period_days not in self.loan_period_options_days:
            raise ValueError("default_loan_period_days must be one of the options")
        if self.max_renewals < 0:
            raise ValueError("max_renewals must be >= 0")
        if self.renewal_extension_days <= 0:
            raise ValueError("renewal_extension_days must be > 0")
        if self.fine_per_day < 0:
            raise ValueError("fine_per_day must be >= 0")
        if self.max_books_per_borrower <= 0 or any(
                limit <= 0 for limit in self.max_books_by_role.values()):
            raise ValueError("borrow limits must be > 0")
        if self.reservation_hold_days < 0:
            raise ValueError("reservation_hold_days must be >= 0")

    def max_books_for(self, role: Optional[str] = None) -> int:
        return self.max_books_by_role.get(role, self.max_books_per_borrower)

    @classmethod
    def from_configs(cls):
        return cls(
            loan_period_options_days=configs.LOAN_PERIODS,
            default_loan_period_days=configs.DEFAULT_LOAN_PERIOD,
            max_renewals=configs.MAX_RENEWALS,
            renewal_extension_days=configs.RENEWAL_DAYS,
            fine_per_day=configs.FINE_PER_DAY,
            max_books_per_borrower=configs.MAX_BOOKS,
            max_books_by_role=configs.MAX_BOOKS_BY_ROLE,
            reservation_hold_days=configs.HOLD_DAYS,
            due_soon_days=configs.DUE_SOON_DAYS,
            reminder_days=configs.REMINDER_DAYS,
        )
