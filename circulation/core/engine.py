#!/usr/bin/env python

"""
    Loan lifecycle engine for Circulation.

    Loans move Active -> Returned by explicit action and Active -> Overdue
    with the passage of time. Overdue is never stored: every read projects
    it from the due date against a single `now` taken at the start of the
    call. Renewal is an Active -> Active self transition.

    Blocking failures are raised as `CirculationError` subclasses after the
    session is rolled back. Advisories (`HasOverdueWarning`,
    `ClockSkewWarning`) are attached to otherwise successful results.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import datetime
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from circulation.core import db as database
from circulation.core.clock import SystemClock
from circulation.core.db import transaction
from circulation.core.directory import BorrowerDirectory
from circulation.core.exceptions import (
    AlreadyBorrowed,
    AlreadyReturned,
    BookReserved,
    BorrowLimitExceeded,
    BorrowerSuspended,
    ClockSkewWarning,
    CirculationWarning,
    FineUnpaid,
    HasOverdueWarning,
    InvalidBookCondition,
    InvalidLoanPeriod,
    InvalidTransition,
    LoanNotFound,
    LoanOverdue,
    RenewalLimitReached,
    ReservedForOther,
)
from circulation.core.fines import calculate_fine, days_overdue
from circulation.core.inventory import Inventory
from circulation.core.locks import LOCKS
from circulation.core.models import BOOK_CONDITIONS, Loan, LoanStatus, Reservation
from circulation.core.notifications import (
    DatabaseNotifier,
    FineAssessed,
    LoanDueSoon,
    LoanIssued,
    LoanOverdue as LoanOverdueEvent,
)
from circulation.core.policy import LoanPolicy
from circulation.core.reservations import ReservationQueue
from circulation.core.utils import add_days, naive_utc, to_date

logger = logging.getLogger(__name__)


@dataclass
class IssueResult:
    loan: Loan
    warnings: List[CirculationWarning] = field(default_factory=list)


@dataclass
class ReturnResult:
    loan: Loan
    fine: Decimal
    promoted: Optional[Reservation] = None
    warnings: List[CirculationWarning] = field(default_factory=list)


@dataclass
class LoanView:
    """A loan as seen at one instant: projected status and fine included."""
    loan_id: int
    borrower_id: int
    copy_id: int
    title_id: int
    issue_date: datetime.date
    due_date: datetime.date
    return_date: Optional[datetime.date]
    status: LoanStatus
    renewal_count: int
    renewals_left: int
    days_overdue: int
    fine: Decimal
    fine_settled: bool
    fine_waived: bool
    due_soon: bool
    book_condition: Optional[str]


class LoanLifecycleEngine:

    def __init__(self, db=None, policy=None, clock=None, notifier=None,
                 locks=None, inventory=None, directory=None):
        self.db = db or database.session
        self.policy = policy or LoanPolicy.from_configs()
        self.clock = clock or SystemClock()
        self.notifier = notifier or DatabaseNotifier(self.db)
        self.locks = locks or LOCKS
        self.inventory = inventory or Inventory(self.db)
        self.directory = directory or BorrowerDirectory(self.db)
        self.reservations = ReservationQueue(
            self.db, self.policy, self.clock, self.notifier,
            self.inventory, self.directory, self.locks)

    def _loan(self, loan_id) -> Loan:
        if loan := self.db.get(Loan, loan_id):
            return loan
        raise LoanNotFound(f"Loan {loan_id} not found.", loan_id=loan_id)

    def fine_for(self, loan, as_of) -> Decimal:
        """Fine owed on `loan`: frozen at its return date once returned."""
        settled_on = loan.return_date if loan.is_returned else as_of
        return calculate_fine(loan.due_date, settled_on, self.policy.fine_per_day)

    # Commands

    def issue_book(self, borrower_id, copy_id, issue_date=None, period_days=None) -> IssueResult:
        now = naive_utc(self.clock.now())
        today = to_date(now)
        issue_date = to_date(issue_date) if issue_date else today
        if period_days is None:
            period_days = self.policy.default_loan_period_days
        self.directory.get(borrower_id)
        title_id = self.inventory.title_of(copy_id)

        with self.locks.hold(("borrower", borrower_id), ("title", title_id)), transaction(self.db):
            self.reservations._expire_stale(title_id, now)
            borrower = self.directory.lookup(borrower_id, today)

            if period_days not in self.policy.loan_period_options_days:
                raise InvalidLoanPeriod(
                    f"Loan period {period_days} is not one of "
                    f"{sorted(self.policy.loan_period_options_days)}.",
                    period_days=period_days)
            if not borrower.is_active:
                raise BorrowerSuspended(f"Borrower {borrower_id} is suspended.",
                                        borrower_id=borrower_id)
            limit = self.policy.max_books_for(borrower.role)
            if borrower.current_loan_count >= limit:
                raise BorrowLimitExceeded(
                    f"Borrower {borrower_id} cannot hold more than {limit} books.",
                    borrower_id=borrower_id, limit=limit)
            ready = self.reservations.ready(title_id)
            if ready and ready.held_copy_id == copy_id and ready.borrower_id != borrower_id:
                raise ReservedForOther(
                    f"Copy {copy_id} is held for reservation {ready.id}.",
                    copy_id=copy_id, reservation_id=ready.id)
            if any(loan.title_id == title_id
                   for loan in self.directory.active_loans(borrower_id)):
                raise AlreadyBorrowed(
                    f"Borrower {borrower_id} already has title {title_id} issued.",
                    borrower_id=borrower_id, title_id=title_id)
            self.inventory.decrement_available(copy_id)

            loan = Loan(
                borrower_id=borrower_id,
                copy_id=copy_id,
                issue_date=issue_date,
                due_date=add_days(issue_date, period_days),
                period_days=period_days,
                renewal_count=0,
                status=LoanStatus.ACTIVE,
            )
            self.db.add(loan)
            self.db.flush()
            self.reservations._fulfill(borrower_id, title_id, now)

            warnings = []
            if borrower.overdue_count:
                warnings.append(HasOverdueWarning(
                    f"Borrower {borrower_id} has {borrower.overdue_count} overdue loan(s)."))
            if issue_date > today:
                warnings.append(ClockSkewWarning(
                    f"Issue date {issue_date} is after today ({today})."))
            self.notifier.emit(LoanIssued(
                borrower_id=borrower_id, loan_id=loan.id,
                copy_id=copy_id, due_date=loan.due_date))

        logger.info(f"Loan {loan.id}: copy {copy_id} issued to borrower {borrower_id}, due {loan.due_date}")
        return IssueResult(loan=loan, warnings=warnings)

    def renew_loan(self, loan_id, as_of=None) -> Loan:
        loan = self._loan(loan_id)
        title_id = loan.title_id
        with self.locks.hold(("borrower", loan.borrower_id), ("title", title_id)), transaction(self.db):
            self.db.refresh(loan)
            now = naive_utc(self.clock.now())
            today = to_date(now)
            if as_of and to_date(as_of) < today:
                # Renewals are never evaluated before today
                logger.warning(f"Renewal of loan {loan_id} dated {as_of} is before {today}; using {today}")
            elif as_of:
                today = to_date(as_of)
            if loan.is_returned:
                raise InvalidTransition(f"Loan {loan_id} has been returned.", loan_id=loan_id)
            if loan.is_overdue(today):
                raise LoanOverdue(
                    f"Loan {loan_id} was due {loan.due_date}; return it first.", loan_id=loan_id)
            if loan.renewal_count >= self.policy.max_renewals:
                raise RenewalLimitReached(
                    f"Loan {loan_id} has used all {self.policy.max_renewals} renewals.",
                    loan_id=loan_id)
            self.reservations._expire_stale(title_id, now)
            if any(e.borrower_id != loan.borrower_id
                   for e in self.reservations.open_entries(title_id)):
                raise BookReserved(
                    f"Title {title_id} has a reservation queue.", title_id=title_id)
            loan.due_date = add_days(loan.due_date, self.policy.renewal_extension_days)
            loan.renewal_count += 1
            loan.last_reminder_days = None
            self.db.add(loan)

        logger.info(f"Loan {loan_id} renewed ({loan.renewal_count}), now due {loan.due_date}")
        return loan

    def return_book(self, loan_id, return_date=None, book_condition="good",
                    fine_paid=False, waive_fine=False) -> ReturnResult:
        if book_condition not in BOOK_CONDITIONS:
            raise InvalidBookCondition(
                f"Book condition must be one of {', '.join(BOOK_CONDITIONS)}.",
                book_condition=book_condition)
        loan = self._loan(loan_id)
        title_id = loan.title_id
        with self.locks.hold(("borrower", loan.borrower_id), ("title", title_id)), transaction(self.db):
            self.db.refresh(loan)
            if loan.is_returned:
                raise AlreadyReturned(f"Loan {loan_id} was returned on {loan.return_date}.",
                                      loan_id=loan_id)
            now = naive_utc(self.clock.now())
            returned_on = to_date(return_date) if return_date else to_date(now)
            warnings = []
            if returned_on < loan.issue_date or returned_on > to_date(now):
                warnings.append(ClockSkewWarning(
                    f"Return date {returned_on} is outside {loan.issue_date}..{to_date(now)}."))

            fine = calculate_fine(loan.due_date, returned_on, self.policy.fine_per_day)
            if fine > 0 and not (fine_paid or waive_fine):
                raise FineUnpaid(
                    f"Fine of {fine} must be collected before loan {loan_id} is returned.",
                    loan_id=loan_id, amount=str(fine))

            loan.status = LoanStatus.RETURNED
            loan.return_date = returned_on
            loan.book_condition = book_condition
            loan.fine_settled = fine == 0 or fine_paid or waive_fine
            loan.fine_waived = fine > 0 and waive_fine and not fine_paid
            self.db.add(loan)
            self.inventory.increment_available(loan.copy_id)
            if fine > 0:
                self.notifier.emit(FineAssessed(
                    borrower_id=loan.borrower_id, loan_id=loan.id,
                    amount=fine, settled=loan.fine_settled))
            promoted = self.reservations._promote(title_id, now, copy_id=loan.copy_id)

        logger.info(f"Loan {loan_id} returned on {returned_on} ({book_condition}), fine {fine}")
        return ReturnResult(loan=loan, fine=fine, promoted=promoted, warnings=warnings)

    def send_notices(self, as_of=None):
        """Emit overdue notices and due-date reminders not yet sent.

        Each overdue loan is reported once. Reminders go out when the days
        left drop to or below a `reminder_days` threshold, once per threshold.
        """
        today = to_date(as_of or self.clock.now())
        emitted = []
        with transaction(self.db):
            loans = self.db.query(Loan).filter(Loan.status != LoanStatus.RETURNED).all()
            for loan in loans:
                if loan.is_overdue(today):
                    if loan.overdue_notified:
                        continue
                    event = LoanOverdueEvent(
                        borrower_id=loan.borrower_id, loan_id=loan.id,
                        due_date=loan.due_date,
                        days_overdue=days_overdue(loan.due_date, today),
                        fine=self.fine_for(loan, today))
                    loan.overdue_notified = True
                else:
                    days_left = (loan.due_date - today).days
                    due = [d for d in self.policy.reminder_days if days_left <= d]
                    if not due:
                        continue
                    threshold = min(due)
                    if loan.last_reminder_days is not None and loan.last_reminder_days <= threshold:
                        continue
                    event = LoanDueSoon(
                        borrower_id=loan.borrower_id, loan_id=loan.id,
                        due_date=loan.due_date, days_left=days_left)
                    loan.last_reminder_days = threshold
                self.db.add(loan)
                self.notifier.emit(event)
                emitted.append(event)
        return emitted

    # Reads

    def _view(self, loan, today) -> LoanView:
        status = loan.status_on(today)
        return LoanView(
            loan_id=loan.id,
            borrower_id=loan.borrower_id,
            copy_id=loan.copy_id,
            title_id=loan.title_id,
            issue_date=loan.issue_date,
            due_date=loan.due_date,
            return_date=loan.return_date,
            status=status,
            renewal_count=loan.renewal_count,
            renewals_left=max(0, self.policy.max_renewals - loan.renewal_count),
            days_overdue=days_overdue(loan.due_date, loan.return_date or today),
            fine=self.fine_for(loan, today),
            fine_settled=loan.fine_settled,
            fine_waived=loan.fine_waived,
            due_soon=(status == LoanStatus.ACTIVE
                      and (loan.due_date - today).days <= self.policy.due_soon_days),
            book_condition=loan.book_condition,
        )

    def loan_status(self, loan_id, as_of=None) -> LoanStatus:
        return self._loan(loan_id).status_on(to_date(as_of or self.clock.now()))

    def view_loan(self, loan_id, as_of=None) -> LoanView:
        return self._view(self._loan(loan_id), to_date(as_of or self.clock.now()))

    def borrower_history(self, borrower_id, as_of=None) -> List[LoanView]:
        today = to_date(as_of or self.clock.now())
        self.directory.get(borrower_id)
        loans = self.db.query(Loan).filter(Loan.borrower_id == borrower_id).order_by(
            Loan.issue_date.desc(), Loan.id.desc()).all()
        return [self._view(loan, today) for loan in loans]

    def overdue_loans(self, as_of=None) -> List[LoanView]:
        today = to_date(as_of or self.clock.now())
        loans = self.db.query(Loan).filter(
            Loan.status != LoanStatus.RETURNED,
            Loan.due_date < today,
        ).order_by(Loan.due_date.asc(), Loan.id.asc()).all()
        return [self._view(loan, today) for loan in loans]
