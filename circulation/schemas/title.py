from pydantic import BaseModel
from typing import List, Optional

class Copy(BaseModel):
    id: int
    accession_number: str
    available: bool

    class Config:
        from_attributes = True

class Title(BaseModel):
    id: int
    title: str
    author: Optional[str] = None
    isbn: Optional[str] = None
    total_copies: int
    available_copies: int
    copies: List[Copy] = []

    class Config:
        from_attributes = True
