#!/usr/bin/env python

"""
    Domain events emitted by the loan engine and the notifiers that
    receive them. The engine never sends email or SMS itself; a notifier
    records the event and an external service decides what to do with it.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import List

from circulation.core.models import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    borrower_id: int

    @property
    def type(self):
        return type(self).__name__

    def message(self):
        return self.type

    def to_dict(self):
        data = {k: (str(v) if isinstance(v, (Decimal, datetime.date)) else v)
                for k, v in asdict(self).items()}
        return {"type": self.type, **data}


@dataclass(frozen=True)
class LoanIssued(Event):
    loan_id: int
    copy_id: int
    due_date: datetime.date

    def message(self):
        return f"Loan {self.loan_id} issued, due {self.due_date.isoformat()}."


@dataclass(frozen=True)
class LoanOverdue(Event):
    loan_id: int
    due_date: datetime.date
    days_overdue: int
    fine: Decimal

    def message(self):
        return (f"Loan {self.loan_id} is {self.days_overdue} day(s) overdue; "
                f"fine so far {self.fine}.")


@dataclass(frozen=True)
class LoanDueSoon(Event):
    loan_id: int
    due_date: datetime.date
    days_left: int

    def message(self):
        return f"Loan {self.loan_id} is due in {self.days_left} day(s) on {self.due_date.isoformat()}."


@dataclass(frozen=True)
class ReservationReady(Event):
    reservation_id: int
    title_id: int
    hold_until: datetime.datetime

    def message(self):
        return (f"Reservation {self.reservation_id} is ready for pickup "
                f"until {self.hold_until.date().isoformat()}.")


@dataclass(frozen=True)
class FineAssessed(Event):
    loan_id: int
    amount: Decimal
    settled: bool

    def message(self):
        state = "settled" if self.settled else "outstanding"
        return f"Fine of {self.amount} assessed on loan {self.loan_id} ({state})."


class Notifier:

    def emit(self, event: Event) -> None:
        logger.info(f"{event.type} for borrower {event.borrower_id}: {event.message()}")


class MemoryNotifier(Notifier):
    """Keeps emitted events in order; useful for callers that poll."""

    def __init__(self):
        self.events: List[Event] = []

    def emit(self, event):
        super().emit(event)
        self.events.append(event)

    def of_type(self, event_cls):
        return [e for e in self.events if isinstance(e, event_cls)]


class DatabaseNotifier(Notifier):
    """Stores each event as a Notification row in the caller's transaction."""

    def __init__(self, db):
        self.db = db

    def emit(self, event):
        super().emit(event)
        self.db.add(Notification(
            borrower_id=event.borrower_id,
            type=event.type,
            message=event.message(),
        ))
