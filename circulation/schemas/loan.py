#!/usr/bin/env python
"""
    Loan Schema for Circulation,
    the read model of one loan with its projected status and fine.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from decimal import Decimal

class Loan(BaseModel):
    loan_id: int
    borrower_id: int
    copy_id: int
    title_id: int
    issue_date: date
    due_date: date
    return_date: Optional[date] = None
    status: str
    renewal_count: int
    renewals_left: int
    days_overdue: int
    fine: Decimal
    fine_settled: bool
    fine_waived: bool
    due_soon: bool
    book_condition: Optional[str] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "loan_id": 1,
                "borrower_id": 7,
                "copy_id": 12,
                "title_id": 3,
                "issue_date": "2025-01-01",
                "due_date": "2025-01-15",
                "return_date": None,
                "status": "overdue",
                "renewal_count": 0,
                "renewals_left": 2,
                "days_overdue": 3,
                "fine": "15.00",
                "fine_settled": False,
                "fine_waived": False,
                "due_soon": False,
                "book_condition": None
            }
        }

    @classmethod
    def from_view(cls, view):
        data = {k: getattr(view, k) for k in cls.model_fields}
        data["status"] = view.status.value
        return cls(**data)

class LoanResult(BaseModel):
    loan: Loan
    warnings: List[str] = []

class ReturnResult(LoanResult):
    fine: Decimal
    promoted_reservation_id: Optional[int] = None
