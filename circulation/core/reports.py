import datetime
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from circulation.core.fines import ZERO, days_overdue
from circulation.core.models import Loan, LoanStatus
from circulation.core.utils import to_date

logger = logging.getLogger(__name__)


@dataclass
class FineSummary:
    assessed: Decimal
    collected: Decimal
    waived: Decimal
    accruing: Decimal
    overdue_loans: int
    returned_late: int


def fine_summary(engine, as_of=None) -> FineSummary:
    """Fines across all loans at one instant.

    `assessed` covers returned loans; `accruing` is what open overdue loans
    would owe if returned today.
    """
    today = to_date(as_of or engine.clock.now())
    summary = FineSummary(ZERO, ZERO, ZERO, ZERO, 0, 0)
    for loan in engine.db.query(Loan).all():
        fine = engine.fine_for(loan, today)
        if not fine:
            continue
        if loan.status == LoanStatus.RETURNED:
            summary.assessed += fine
            summary.returned_late += 1
            if loan.fine_waived:
                summary.waived += fine
            elif loan.fine_settled:
                summary.collected += fine
        else:
            summary.accruing += fine
            summary.overdue_loans += 1
    logger.debug(f"Fine summary as of {today}: {summary}")
    return summary


@dataclass
class Defaulter:
    borrower_id: int
    name: str
    overdue_books: int
    total_overdue_days: int
    total_fine: Decimal
    oldest_due_date: datetime.date


def defaulters(engine, as_of=None) -> List[Defaulter]:
    """Borrowers holding overdue loans, largest accrued fine first."""
    today = to_date(as_of or engine.clock.now())
    by_borrower = {}
    for loan in engine.db.query(Loan).filter(
            Loan.status != LoanStatus.RETURNED, Loan.due_date < today).all():
        entry = by_borrower.get(loan.borrower_id)
        if entry is None:
            entry = by_borrower[loan.borrower_id] = Defaulter(
                loan.borrower_id, loan.borrower.name, 0, 0, ZERO, loan.due_date)
        entry.overdue_books += 1
        entry.total_overdue_days += days_overdue(loan.due_date, today)
        entry.total_fine += engine.fine_for(loan, today)
        entry.oldest_due_date = min(entry.oldest_due_date, loan.due_date)
    return sorted(by_borrower.values(), key=lambda d: (-d.total_fine, d.borrower_id))
