#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
    tests.test_reservations
    ~~~~~~~~~~~~~~~~~~~~~~~

    Reservation queue ordering, promotion and hold expiry.

    :copyright: (c) 2015 by Authors.
    :license: see LICENSE for more details.
"""

import datetime

import pytest

from circulation.core.exceptions import (
    AlreadyReserved,
    InvalidPriority,
    ReservationNotFound,
    TitleNotFound,
)
from circulation.core.models import ReservationStatus
from circulation.core.notifications import ReservationReady


@pytest.fixture
def checked_out(engine, make_borrower, make_title):
    """A single-copy title that is out on loan."""
    book = make_title()
    loan = engine.issue_book(make_borrower().id, book.copies[0].id).loan
    return book, loan


def queue_of(engine, book):
    return [(p.reservation.borrower_id, p.position) for p in engine.reservations.queue(book.id)]


def test_return_promotes_head(engine, make_borrower, checked_out, clock, notifier):
    book, loan = checked_out
    a, b = make_borrower(), make_borrower()
    engine.reservations.reserve(a.id, book.id)
    clock.advance(hours=1)
    engine.reservations.reserve(b.id, book.id)
    assert queue_of(engine, book) == [(a.id, 1), (b.id, 2)]

    result = engine.return_book(loan.id)
    assert result.promoted.borrower_id == a.id
    assert result.promoted.held_copy_id == book.copies[0].id
    assert queue_of(engine, book) == [(a.id, 0), (b.id, 1)]
    assert [e.borrower_id for e in notifier.of_type(ReservationReady)] == [a.id]


def test_high_priority_goes_first(engine, make_borrower, checked_out, clock):
    book, _ = checked_out
    a, b, c = make_borrower(), make_borrower(), make_borrower()
    engine.reservations.reserve(a.id, book.id)
    clock.advance(hours=1)
    engine.reservations.reserve(b.id, book.id, priority="low")
    clock.advance(hours=1)
    engine.reservations.reserve(c.id, book.id, priority="high")
    assert queue_of(engine, book) == [(c.id, 1), (a.id, 2), (b.id, 3)]


def test_same_request_time_keeps_registration_order(engine, make_borrower, checked_out):
    book, _ = checked_out
    when = datetime.datetime(2025, 1, 1, 9, 30)
    first, second = make_borrower(), make_borrower()
    engine.reservations.reserve(first.id, book.id, requested_at=when)
    engine.reservations.reserve(second.id, book.id, requested_at=when)
    assert queue_of(engine, book) == [(first.id, 1), (second.id, 2)]


def test_cancel_and_reserve_again_goes_to_back(engine, make_borrower, checked_out, clock):
    book, _ = checked_out
    a, b, c = make_borrower(), make_borrower(), make_borrower()
    entry = engine.reservations.reserve(a.id, book.id).reservation
    engine.reservations.reserve(b.id, book.id)
    engine.reservations.reserve(c.id, book.id)

    engine.reservations.cancel(entry.id)
    clock.advance(minutes=5)
    engine.reservations.reserve(a.id, book.id)
    assert queue_of(engine, book) == [(b.id, 1), (c.id, 2), (a.id, 3)]


def test_cancel_is_idempotent(engine, make_borrower, checked_out):
    book, _ = checked_out
    entry = engine.reservations.reserve(make_borrower().id, book.id).reservation
    engine.reservations.cancel(entry.id)
    engine.reservations.cancel(entry.id)
    assert entry.status == ReservationStatus.CANCELLED
    assert engine.reservations.position(entry.id).position is None


def test_cancel_ready_passes_hold_on(engine, make_borrower, checked_out):
    book, loan = checked_out
    a, b = make_borrower(), make_borrower()
    first = engine.reservations.reserve(a.id, book.id).reservation
    second = engine.reservations.reserve(b.id, book.id).reservation
    engine.return_book(loan.id)

    engine.reservations.cancel(first.id)
    assert second.status == ReservationStatus.READY
    assert second.held_copy_id == book.copies[0].id


def test_duplicate_reservation(engine, make_borrower, checked_out):
    book, _ = checked_out
    borrower = make_borrower()
    engine.reservations.reserve(borrower.id, book.id)
    with pytest.raises(AlreadyReserved):
        engine.reservations.reserve(borrower.id, book.id)


def test_bad_reservation_requests(engine, make_borrower, checked_out):
    book, _ = checked_out
    with pytest.raises(InvalidPriority):
        engine.reservations.reserve(make_borrower().id, book.id, priority="urgent")
    with pytest.raises(TitleNotFound):
        engine.reservations.reserve(make_borrower().id, 999)
    with pytest.raises(ReservationNotFound):
        engine.reservations.cancel(999)


def test_reserve_with_copy_on_shelf_is_ready(engine, make_borrower, make_title):
    book = make_title()
    position = engine.reservations.reserve(make_borrower().id, book.id)
    assert position.position == 0
    assert position.reservation.status == ReservationStatus.READY
    assert position.reservation.held_copy_id == book.copies[0].id


def test_expired_hold_moves_to_next(engine, make_borrower, checked_out, clock):
    book, loan = checked_out
    a, b = make_borrower(), make_borrower()
    first = engine.reservations.reserve(a.id, book.id).reservation
    engine.reservations.reserve(b.id, book.id)
    engine.return_book(loan.id)

    clock.advance(days=7)
    assert engine.reservations.expire_ready(first.id) is False

    clock.advance(days=1)
    assert queue_of(engine, book) == [(b.id, 0)]
    assert first.status == ReservationStatus.CANCELLED


def test_estimated_availability(engine, make_borrower, checked_out):
    book, _ = checked_out
    a, b = make_borrower(), make_borrower()
    engine.reservations.reserve(a.id, book.id)
    engine.reservations.reserve(b.id, book.id)
    estimates = [p.estimated_available for p in engine.reservations.queue(book.id)]
    assert estimates == [datetime.date(2025, 1, 15), datetime.date(2025, 1, 29)]


def test_promote_head_without_free_copy(engine, make_borrower, checked_out):
    book, _ = checked_out
    engine.reservations.reserve(make_borrower().id, book.id)
    assert engine.reservations.promote_head(book.id) is None
