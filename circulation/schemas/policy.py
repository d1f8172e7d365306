from pydantic import BaseModel
from typing import Dict, List
from decimal import Decimal
from datetime import date

class Policy(BaseModel):
    loan_period_options_days: List[int]
    default_loan_period_days: int
    max_renewals: int
    renewal_extension_days: int
    fine_per_day: Decimal
    max_books_per_borrower: int
    max_books_by_role: Dict[str, int]
    reservation_hold_days: int
    due_soon_days: int
    reminder_days: List[int]

    @classmethod
    def from_policy(cls, policy):
        return cls(
            loan_period_options_days=sorted(policy.loan_period_options_days),
            default_loan_period_days=policy.default_loan_period_days,
            max_renewals=policy.max_renewals,
            renewal_extension_days=policy.renewal_extension_days,
            fine_per_day=policy.fine_per_day,
            max_books_per_borrower=policy.max_books_per_borrower,
            max_books_by_role=policy.max_books_by_role,
            reservation_hold_days=policy.reservation_hold_days,
            due_soon_days=policy.due_soon_days,
            reminder_days=sorted(policy.reminder_days),
        )

class FineSummary(BaseModel):
    assessed: Decimal
    collected: Decimal
    waived: Decimal
    accruing: Decimal
    overdue_loans: int
    returned_late: int

    class Config:
        from_attributes = True

class Defaulter(BaseModel):
    borrower_id: int
    name: str
    overdue_books: int
    total_overdue_days: int
    total_fine: Decimal
    oldest_due_date: date

    class Config:
        from_attributes = True
