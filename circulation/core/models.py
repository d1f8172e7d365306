#!/usr/bin/env python

"""
    Circulation Models,
    including borrowers, titles and their copies, loans, reservations
    and the notifications emitted about them.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

from sqlalchemy import (
    Column, String, Boolean, Integer, Date, DateTime, ForeignKey,
    Enum as SQLAlchemyEnum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.ext.hybrid import hybrid_property
from circulation.core.db import Base
from circulation.core.exceptions import InvalidPriority
import enum


class BorrowerStatus(enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class LoanStatus(enum.Enum):
    ACTIVE = "active"
    OVERDUE = "overdue"  # projected on read, never stored
    RETURNED = "returned"


class ReservationStatus(enum.Enum):
    WAITING = "waiting"
    READY = "ready"
    CANCELLED = "cancelled"
    FULFILLED = "fulfilled"


class Priority(enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"

    @property
    def rank(self):
        return {"low": 0, "normal": 1, "high": 2}[self.value]

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidPriority(f"Unknown priority {value!r}")


BOOK_CONDITIONS = ("excellent", "good", "fair", "poor", "damaged")


class Borrower(Base):
    __tablename__ = 'borrowers'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(String(20), default="student", nullable=False)
    status = Column(SQLAlchemyEnum(BorrowerStatus), default=BorrowerStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime, default=func.now())

    loans = relationship('Loan', back_populates='borrower')

    @hybrid_property
    def is_active(self):
        return self.status == BorrowerStatus.ACTIVE


class BookTitle(Base):
    __tablename__ = 'titles'

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    author = Column(String)
    isbn = Column(String(20))
    created_at = Column(DateTime, default=func.now())

    copies = relationship('BookCopy', back_populates='title', order_by='BookCopy.id')

    @property
    def total_copies(self):
        return len(self.copies)

    @property
    def available_copies(self):
        """Number of copies on the shelf right now."""
        return sum(1 for c in self.copies if c.available)


class BookCopy(Base):
    __tablename__ = 'copies'

    id = Column(Integer, primary_key=True)
    title_id = Column(Integer, ForeignKey('titles.id'), nullable=False)
    accession_number = Column(String(50), unique=True, nullable=False)
    available = Column(Boolean, default=True, nullable=False)

    title = relationship('BookTitle', back_populates='copies')


class Loan(Base):
    __tablename__ = 'loans'

    id = Column(Integer, primary_key=True)
    borrower_id = Column(Integer, ForeignKey('borrowers.id'), nullable=False)
    copy_id = Column(Integer, ForeignKey('copies.id'), nullable=False)
    issue_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False)
    period_days = Column(Integer, nullable=False)
    renewal_count = Column(Integer, default=0, nullable=False)
    status = Column(SQLAlchemyEnum(LoanStatus), default=LoanStatus.ACTIVE, nullable=False)
    return_date = Column(Date, nullable=True)
    book_condition = Column(String(20))
    fine_settled = Column(Boolean, default=False, nullable=False)
    fine_waived = Column(Boolean, default=False, nullable=False)
    overdue_notified = Column(Boolean, default=False, nullable=False)
    last_reminder_days = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=func.now())

    borrower = relationship('Borrower', back_populates='loans')
    copy = relationship('BookCopy')

    @hybrid_property
    def is_returned(self):
        return self.status == LoanStatus.RETURNED

    @property
    def title_id(self):
        return self.copy.title_id

    def status_on(self, today):
        """Stored status with the time-driven Overdue projection applied."""
        if self.status == LoanStatus.RETURNED:
            return LoanStatus.RETURNED
        if self.due_date < today:
            return LoanStatus.OVERDUE
        return LoanStatus.ACTIVE

    def is_overdue(self, today):
        return self.status_on(today) == LoanStatus.OVERDUE


class Reservation(Base):
    __tablename__ = 'reservations'

    id = Column(Integer, primary_key=True)
    borrower_id = Column(Integer, ForeignKey('borrowers.id'), nullable=False)
    title_id = Column(Integer, ForeignKey('titles.id'), nullable=False)
    requested_at = Column(DateTime, nullable=False)
    priority = Column(SQLAlchemyEnum(Priority), default=Priority.NORMAL, nullable=False)
    status = Column(SQLAlchemyEnum(ReservationStatus), default=ReservationStatus.WAITING, nullable=False)
    ready_at = Column(DateTime, nullable=True)
    held_copy_id = Column(Integer, ForeignKey('copies.id'), nullable=True)
    closed_at = Column(DateTime, nullable=True)

    borrower = relationship('Borrower')
    title = relationship('BookTitle')

    @property
    def queue_key(self):
        """High priority first, then oldest request, then first registered."""
        return (-self.priority.rank, self.requested_at, self.id)


class Notification(Base):
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, autoincrement=True)
    borrower_id = Column(Integer, ForeignKey('borrowers.id', ondelete='CASCADE'), nullable=False)
    type = Column(String(50), nullable=False)
    message = Column(String, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
