from pydantic import BaseModel
from typing import Optional
from datetime import date, datetime

class Reservation(BaseModel):
    reservation_id: int
    borrower_id: int
    title_id: int
    requested_at: datetime
    priority: str
    status: str
    position: Optional[int] = None
    estimated_available: Optional[date] = None
    ready_at: Optional[datetime] = None
    held_copy_id: Optional[int] = None

    @classmethod
    def from_position(cls, entry):
        r = entry.reservation
        return cls(
            reservation_id=r.id,
            borrower_id=r.borrower_id,
            title_id=r.title_id,
            requested_at=r.requested_at,
            priority=r.priority.value,
            status=r.status.value,
            position=entry.position,
            estimated_available=entry.estimated_available,
            ready_at=r.ready_at,
            held_copy_id=r.held_copy_id,
        )
