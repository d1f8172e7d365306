from pydantic import BaseModel
from typing import Optional, Dict, Any

class Notice(BaseModel):
    type: str
    borrower_id: int
    message: str
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def from_event(cls, event):
        return cls(
            type=event.type,
            borrower_id=event.borrower_id,
            message=event.message(),
            data=event.to_dict(),
        )
