from dataclasses import dataclass

from circulation.core.exceptions import BorrowerNotFound
from circulation.core.models import Borrower, BorrowerStatus, Loan, LoanStatus


@dataclass(frozen=True)
class BorrowerInfo:
    id: int
    role: str
    status: BorrowerStatus
    current_loan_count: int
    overdue_count: int

    @property
    def is_active(self):
        return self.status == BorrowerStatus.ACTIVE


class BorrowerDirectory:
    """Read-only view of borrowers; loan counts are derived, not stored."""

    def __init__(self, db):
        self.db = db

    def get(self, borrower_id) -> Borrower:
        if borrower := self.db.get(Borrower, borrower_id):
            return borrower
        raise BorrowerNotFound(f"Borrower {borrower_id} not found.", borrower_id=borrower_id)

    def active_loans(self, borrower_id):
        return self.db.query(Loan).filter(
            Loan.borrower_id == borrower_id,
            Loan.status != LoanStatus.RETURNED,
        ).populate_existing().all()

    def lookup(self, borrower_id, today) -> BorrowerInfo:
        borrower = self.get(borrower_id)
        loans = self.active_loans(borrower_id)
        return BorrowerInfo(
            id=borrower.id,
            role=borrower.role,
            status=borrower.status,
            current_loan_count=len(loans),
            overdue_count=sum(1 for loan in loans if loan.is_overdue(today)),
        )

    def add(self, name, email, role="student"):
        borrower = Borrower(name=name, email=email, role=role)
        self.db.add(borrower)
        self.db.flush()
        return borrower

    def set_status(self, borrower_id, status: BorrowerStatus):
        borrower = self.get(borrower_id)
        borrower.status = status
        self.db.add(borrower)
        return borrower
