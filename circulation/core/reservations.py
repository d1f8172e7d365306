#!/usr/bin/env python

"""
    Reservation queues, one per book title.

    Waiting entries are ranked by priority (high first), then request time,
    then registration order. When a copy frees up the best-ranked entry
    becomes Ready and the copy is held for it; a title has at most one Ready
    entry at a time. Holds expire `reservation_hold_days` after promotion.
    Expiry is pull-based: it is evaluated whenever the queue is touched.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from dataclasses import dataclass
from typing import List, Optional

from circulation.core.db import transaction
from circulation.core.exceptions import AlreadyReserved, ReservationNotFound
from circulation.core.models import (
    Loan,
    LoanStatus,
    BookCopy,
    Priority,
    Reservation,
    ReservationStatus,
)
from circulation.core.notifications import ReservationReady
from circulation.core.utils import add_days, naive_utc, to_date

logger = logging.getLogger(__name__)

OPEN = (ReservationStatus.WAITING, ReservationStatus.READY)


@dataclass
class QueuePosition:
    reservation: Reservation
    position: Optional[int]  # 0 while Ready, None once closed
    estimated_available: Optional[datetime.date]


class ReservationQueue:

    def __init__(self, db, policy, clock, notifier, inventory, directory, locks):
        self.db = db
        self.policy = policy
        self.clock = clock
        self.notifier = notifier
        self.inventory = inventory
        self.directory = directory
        self.locks = locks

    def _now(self, now=None):
        return naive_utc(now or self.clock.now())

    def _get(self, reservation_id) -> Reservation:
        if entry := self.db.get(Reservation, reservation_id):
            return entry
        raise ReservationNotFound(
            f"Reservation {reservation_id} not found.", reservation_id=reservation_id)

    def open_entries(self, title_id) -> List[Reservation]:
        return self.db.query(Reservation).filter(
            Reservation.title_id == title_id,
            Reservation.status.in_(OPEN),
        ).populate_existing().all()

    def waiting(self, title_id) -> List[Reservation]:
        entries = [e for e in self.open_entries(title_id)
                   if e.status == ReservationStatus.WAITING]
        return sorted(entries, key=lambda e: e.queue_key)

    def ready(self, title_id) -> Optional[Reservation]:
        return next((e for e in self.open_entries(title_id)
                     if e.status == ReservationStatus.READY), None)

    def free_copies(self, title_id):
        """Available copies of the title not held for a Ready entry."""
        held = {e.held_copy_id for e in self.open_entries(title_id)
                if e.status == ReservationStatus.READY}
        copies = self.db.query(BookCopy).filter(
            BookCopy.title_id == title_id).order_by(BookCopy.id).populate_existing().all()
        return [c for c in copies if c.available and c.id not in held]

    def free_copy(self, title_id, prefer=None):
        free = self.free_copies(title_id)
        for copy in free:
            if copy.id == prefer:
                return copy
        return free[0] if free else None

    # Mutations below do not commit; public wrappers and the loan engine do.

    def _promote(self, title_id, now, copy_id=None):
        if self.ready(title_id):
            return None
        waiting = self.waiting(title_id)
        if not waiting:
            return None
        copy = self.free_copy(title_id, prefer=copy_id)
        if copy is None:
            return None
        head = waiting[0]
        head.status = ReservationStatus.READY
        head.ready_at = now
        head.held_copy_id = copy.id
        self.db.add(head)
        self.db.flush()
        hold_until = now + datetime.timedelta(days=self.policy.reservation_hold_days)
        logger.info(f"Reservation {head.id} ready; holding copy {copy.accession_number}")
        self.notifier.emit(ReservationReady(
            borrower_id=head.borrower_id,
            reservation_id=head.id,
            title_id=title_id,
            hold_until=hold_until,
        ))
        return head

    def _close(self, entry, status, now):
        was_ready = entry.status == ReservationStatus.READY
        held = entry.held_copy_id
        entry.status = status
        entry.closed_at = now
        self.db.add(entry)
        self.db.flush()
        if was_ready:
            # Hand the hold on to whoever is next
            self._promote(entry.title_id, now, copy_id=held)

    def _is_expired(self, entry, now):
        return (entry.status == ReservationStatus.READY and entry.ready_at is not None
                and entry.ready_at + datetime.timedelta(days=self.policy.reservation_hold_days) < now)

    def _expire_stale(self, title_id, now):
        expired = []
        entry = self.ready(title_id)
        while entry is not None and self._is_expired(entry, now):
            logger.info(f"Reservation {entry.id} hold expired")
            self._close(entry, ReservationStatus.CANCELLED, now)
            expired.append(entry)
            entry = self.ready(title_id)
        return expired

    def _fulfill(self, borrower_id, title_id, now):
        for entry in self.open_entries(title_id):
            if entry.borrower_id == borrower_id:
                self._close(entry, ReservationStatus.FULFILLED, now)
                return entry
        return None

    # Public operations

    def reserve(self, borrower_id, title_id, requested_at=None, priority="normal") -> QueuePosition:
        priority = Priority.parse(priority)
        self.directory.get(borrower_id)
        self.inventory.title(title_id)
        with self.locks.hold(("title", title_id), ("borrower", borrower_id)), transaction(self.db):
            now = self._now()
            self._expire_stale(title_id, now)
            if any(e.borrower_id == borrower_id for e in self.open_entries(title_id)):
                raise AlreadyReserved(
                    f"Borrower {borrower_id} is already queued for title {title_id}.",
                    borrower_id=borrower_id, title_id=title_id)
            entry = Reservation(
                borrower_id=borrower_id,
                title_id=title_id,
                requested_at=self._now(requested_at),
                priority=priority,
                status=ReservationStatus.WAITING,
            )
            self.db.add(entry)
            self.db.flush()
            self._promote(title_id, now)
        logger.info(f"Borrower {borrower_id} reserved title {title_id} ({priority.value})")
        return self._position_of(entry, now)

    def cancel(self, reservation_id) -> Reservation:
        """Cancel a Waiting or Ready entry. Closed entries are left as they are."""
        entry = self._get(reservation_id)
        with self.locks.hold(("title", entry.title_id)), transaction(self.db):
            if entry.status in OPEN:
                self._close(entry, ReservationStatus.CANCELLED, self._now())
                logger.info(f"Reservation {entry.id} cancelled")
        return entry

    def promote_head(self, title_id, copy_id=None, now=None) -> Optional[Reservation]:
        with self.locks.hold(("title", title_id)), transaction(self.db):
            return self._promote(title_id, self._now(now), copy_id=copy_id)

    def expire_ready(self, reservation_id, now=None) -> bool:
        entry = self._get(reservation_id)
        with self.locks.hold(("title", entry.title_id)), transaction(self.db):
            if not self._is_expired(entry, self._now(now)):
                return False
            self._close(entry, ReservationStatus.CANCELLED, self._now(now))
            return True

    def expire_stale(self, title_id, now=None) -> List[Reservation]:
        with self.locks.hold(("title", title_id)), transaction(self.db):
            return self._expire_stale(title_id, self._now(now))

    # Reads

    def _estimates(self, title_id, count, today):
        """Expected availability for the first `count` waiting entries.

        Free copies are available today; otherwise copies come back in due
        date order, and a queue longer than the copies on loan wraps around
        one default loan period later.
        """
        free = len(self.free_copies(title_id))
        dues = sorted(
            loan.due_date for loan in self.db.query(Loan).join(BookCopy).filter(
                BookCopy.title_id == title_id,
                Loan.status != LoanStatus.RETURNED,
            ))
        slots = [today] * free + [max(due, today) for due in dues]
        if not slots:
            return [None] * count
        period = self.policy.default_loan_period_days
        return [add_days(slots[i % len(slots)], period * (i // len(slots)))
                for i in range(count)]

    def _snapshot(self, title_id, now) -> List[QueuePosition]:
        today = to_date(now)
        result = []
        if ready := self.ready(title_id):
            result.append(QueuePosition(ready, 0, to_date(ready.ready_at)))
        waiting = self.waiting(title_id)
        for n, (entry, eta) in enumerate(zip(waiting, self._estimates(title_id, len(waiting), today))):
            result.append(QueuePosition(entry, n + 1, eta))
        return result

    def _position_of(self, entry, now) -> QueuePosition:
        if entry.status not in OPEN:
            return QueuePosition(entry, None, None)
        return next(p for p in self._snapshot(entry.title_id, now)
                    if p.reservation.id == entry.id)

    def queue(self, title_id, now=None) -> List[QueuePosition]:
        self.inventory.title(title_id)
        now = self._now(now)
        self.expire_stale(title_id, now)
        return self._snapshot(title_id, now)

    def position(self, reservation_id, now=None) -> QueuePosition:
        entry = self._get(reservation_id)
        now = self._now(now)
        self.expire_stale(entry.title_id, now)
        return self._position_of(entry, now)
