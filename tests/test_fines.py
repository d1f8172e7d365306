#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_fines
    ~~~~~~~~~~~~~~~~

    Fine accrual and loan policy validation.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
from decimal import Decimal

import pytest

from circulation.core.fines import calculate_fine, days_overdue
from circulation.core.policy import LoanPolicy

DUE = datetime.date(2025, 1, 15)


def test_no_fine_on_or_before_due_date():
    assert calculate_fine(DUE, DUE, 2.0) == 0
    assert calculate_fine(DUE, DUE - datetime.timedelta(days=1), 2.0) == 0


def test_fine_three_days_late():
    assert calculate_fine(DUE, datetime.date(2025, 1, 18), 2.0) == Decimal("6.0")


def test_any_time_on_next_day_is_one_day():
    early = datetime.datetime(2025, 1, 16, 0, 1)
    late = datetime.datetime(2025, 1, 16, 23, 59)
    assert days_overdue(DUE, early) == days_overdue(DUE, late) == 1
    assert days_overdue(DUE, datetime.datetime(2025, 1, 15, 23, 59)) == 0


def test_fine_is_non_decreasing():
    fines = [calculate_fine(DUE, DUE + datetime.timedelta(days=d), "5.00")
             for d in range(-5, 30)]
    assert fines == sorted(fines)


def test_negative_rate_rejected():
    with pytest.raises(ValueError):
        calculate_fine(DUE, datetime.date(2025, 2, 1), -1)


def test_zero_rate_never_fines():
    assert calculate_fine(DUE, datetime.date(2025, 3, 1), 0) == 0


def test_policy_defaults_and_roles():
    policy = LoanPolicy(max_books_by_role={"faculty": 10})
    assert policy.fine_per_day == Decimal("5.00")
    assert policy.max_books_for("student") == 5
    assert policy.max_books_for("faculty") == 10


@pytest.mark.parametrize("kwargs", [
    {"default_loan_period_days": 10},
    {"loan_period_options_days": []},
    {"max_renewals": -1},
    {"fine_per_day": "-0.5"},
    {"max_books_per_borrower": 0},
])
def test_policy_rejects_bad_values(kwargs):
    with pytest.raises(ValueError):
        LoanPolicy(**kwargs)
