from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date, datetime

class BorrowerRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    role: str = "student"

class TitleRequest(BaseModel):
    title: str = Field(..., min_length=1)
    author: Optional[str] = None
    isbn: Optional[str] = None
    copies: int = Field(1, ge=1)

class IssueRequest(BaseModel):
    borrower_id: int
    copy_id: int
    issue_date: Optional[date] = None
    period_days: Optional[int] = None

class RenewRequest(BaseModel):
    as_of: Optional[date] = None

class ReturnRequest(BaseModel):
    return_date: Optional[date] = None
    book_condition: str = "good"
    fine_paid: bool = False
    waive_fine: bool = False

class ReserveRequest(BaseModel):
    borrower_id: int
    title_id: int
    priority: str = "normal"
    requested_at: Optional[datetime] = None
