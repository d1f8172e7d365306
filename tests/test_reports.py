#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_reports
    ~~~~~~~~~~~~~~~~~~

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime
from decimal import Decimal

from circulation.core.reports import defaulters, fine_summary


def test_fine_summary(engine, make_borrower, make_title, clock):
    loans = [engine.issue_book(make_borrower().id, make_title(title=f"Book {n}").copies[0].id).loan
             for n in range(4)]

    engine.renew_loan(loans[3].id)
    clock.set(datetime.date(2025, 1, 17))
    engine.return_book(loans[0].id, fine_paid=True)
    clock.set(datetime.date(2025, 1, 18))
    engine.return_book(loans[1].id, waive_fine=True)

    summary = fine_summary(engine, as_of=datetime.date(2025, 1, 20))
    assert summary.assessed == Decimal("10.0")
    assert summary.collected == Decimal("4.0")
    assert summary.waived == Decimal("6.0")
    assert summary.accruing == Decimal("10.0")
    assert summary.overdue_loans == 1
    assert summary.returned_late == 2


def test_defaulters(engine, make_borrower, make_title, clock):
    steady, late, later = make_borrower(), make_borrower(), make_borrower()
    engine.issue_book(steady.id, make_title(title="On time").copies[0].id, period_days=30)
    engine.issue_book(late.id, make_title(title="A").copies[0].id)
    engine.issue_book(later.id, make_title(title="B").copies[0].id, period_days=7)
    clock.advance(days=2)
    engine.issue_book(later.id, make_title(title="C").copies[0].id, period_days=7)
    returned = engine.issue_book(late.id, make_title(title="D").copies[0].id, period_days=7).loan
    engine.return_book(returned.id)

    report = defaulters(engine, as_of=datetime.date(2025, 1, 20))
    assert [d.borrower_id for d in report] == [later.id, late.id]

    first = report[0]
    assert first.overdue_books == 2
    assert first.total_overdue_days == 12 + 10
    assert first.total_fine == Decimal("44.0")
    assert first.oldest_due_date == datetime.date(2025, 1, 8)

    second = report[1]
    assert second.overdue_books == 1
    assert second.total_overdue_days == 5
    assert second.total_fine == Decimal("10.0")
