from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

class Borrower(BaseModel):
    id: int
    name: str
    email: EmailStr
    role: str
    status: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, borrower):
        return cls(
            id=borrower.id,
            name=borrower.name,
            email=borrower.email,
            role=borrower.role,
            status=borrower.status.value,
            created_at=borrower.created_at,
        )
