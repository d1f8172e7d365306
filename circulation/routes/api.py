#!/usr/bin/env python

"""
    API routes for Circulation,
    a thin HTTP layer over the loan lifecycle engine.

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import logging
from typing import Generator, List, Optional
from datetime import date
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    status,
)
from circulation.core.db import session as db, transaction
from circulation.core.engine import LoanLifecycleEngine
from circulation.core.exceptions import CirculationError
from circulation.core.models import BorrowerStatus
from circulation.core.reports import defaulters, fine_summary
from circulation.routes.schemas import (
    BorrowerRequest,
    TitleRequest,
    IssueRequest,
    RenewRequest,
    ReturnRequest,
    ReserveRequest,
)
from circulation.schemas.borrower import Borrower
from circulation.schemas.loan import Loan, LoanResult, ReturnResult
from circulation.schemas.notification import Notice
from circulation.schemas.policy import Policy, FineSummary, Defaulter
from circulation.schemas.reservation import Reservation
from circulation.schemas.title import Title

logger = logging.getLogger(__name__)

router = APIRouter()


def get_engine() -> Generator[LoanLifecycleEngine, None, None]:
    engine = LoanLifecycleEngine(db=db)
    try:
        yield engine
    finally:
        db.remove()


def http_error(e: CirculationError) -> HTTPException:
    if e.status_code >= 500:
        logger.error(f"{e.code}: {e.message}")
    else:
        logger.info(f"Rejected ({e.code}): {e.message}")
    return HTTPException(status_code=e.status_code, detail=e.to_dict())


def _warning_codes(warnings):
    return [w.code for w in warnings]


@router.get("/policy", response_model=Policy)
async def get_policy(engine: LoanLifecycleEngine = Depends(get_engine)):
    return Policy.from_policy(engine.policy)

# Borrowers

@router.post("/borrowers", status_code=status.HTTP_201_CREATED, response_model=Borrower)
async def create_borrower(body: BorrowerRequest, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        with transaction(engine.db):
            borrower = engine.directory.add(body.name, body.email, body.role)
        return Borrower.from_model(borrower)
    except CirculationError as e:
        raise http_error(e)

@router.post("/borrowers/{borrower_id}/{action}", response_model=Borrower)
async def set_borrower_status(borrower_id: int, action: str, engine: LoanLifecycleEngine = Depends(get_engine)):
    statuses = {"suspend": BorrowerStatus.SUSPENDED, "activate": BorrowerStatus.ACTIVE}
    if action not in statuses:
        raise HTTPException(status_code=404, detail="Unknown action")
    try:
        with engine.locks.hold(("borrower", borrower_id)), transaction(engine.db):
            borrower = engine.directory.set_status(borrower_id, statuses[action])
        return Borrower.from_model(borrower)
    except CirculationError as e:
        raise http_error(e)

@router.get("/borrowers/{borrower_id}/loans", response_model=List[Loan])
async def borrower_history(borrower_id: int, as_of: Optional[date] = None,
                           engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return [Loan.from_view(v) for v in engine.borrower_history(borrower_id, as_of=as_of)]
    except CirculationError as e:
        raise http_error(e)

# Titles

@router.post("/titles", status_code=status.HTTP_201_CREATED, response_model=Title)
async def create_title(body: TitleRequest, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        with transaction(engine.db):
            title = engine.inventory.add_title(
                body.title, author=body.author, isbn=body.isbn, copies=body.copies)
        return Title.model_validate(title)
    except CirculationError as e:
        raise http_error(e)

@router.get("/titles/{title_id}", response_model=Title)
async def get_title(title_id: int, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return Title.model_validate(engine.inventory.title(title_id))
    except CirculationError as e:
        raise http_error(e)

@router.get("/titles/{title_id}/queue", response_model=List[Reservation])
async def title_queue(title_id: int, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return [Reservation.from_position(p) for p in engine.reservations.queue(title_id)]
    except CirculationError as e:
        raise http_error(e)

# Loans

@router.post("/loans", status_code=status.HTTP_201_CREATED, response_model=LoanResult)
async def issue_loan(body: IssueRequest, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        result = engine.issue_book(
            body.borrower_id, body.copy_id,
            issue_date=body.issue_date, period_days=body.period_days)
        return LoanResult(
            loan=Loan.from_view(engine.view_loan(result.loan.id)),
            warnings=_warning_codes(result.warnings))
    except CirculationError as e:
        raise http_error(e)

@router.get("/loans/overdue", response_model=List[Loan])
async def overdue_loans(as_of: Optional[date] = None, engine: LoanLifecycleEngine = Depends(get_engine)):
    return [Loan.from_view(v) for v in engine.overdue_loans(as_of=as_of)]

@router.get("/loans/{loan_id}", response_model=Loan)
async def get_loan(loan_id: int, as_of: Optional[date] = None, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return Loan.from_view(engine.view_loan(loan_id, as_of=as_of))
    except CirculationError as e:
        raise http_error(e)

@router.post("/loans/{loan_id}/renew", response_model=LoanResult)
async def renew_loan(loan_id: int, body: Optional[RenewRequest] = None,
                     engine: LoanLifecycleEngine = Depends(get_engine)):
    body = body or RenewRequest()
    try:
        loan = engine.renew_loan(loan_id, as_of=body.as_of)
        return LoanResult(loan=Loan.from_view(engine.view_loan(loan.id, as_of=body.as_of)))
    except CirculationError as e:
        raise http_error(e)

@router.post("/loans/{loan_id}/return", response_model=ReturnResult)
async def return_loan(loan_id: int, body: Optional[ReturnRequest] = None,
                      engine: LoanLifecycleEngine = Depends(get_engine)):
    body = body or ReturnRequest()
    try:
        result = engine.return_book(
            loan_id,
            return_date=body.return_date,
            book_condition=body.book_condition,
            fine_paid=body.fine_paid,
            waive_fine=body.waive_fine,
        )
        return ReturnResult(
            loan=Loan.from_view(engine.view_loan(loan_id)),
            fine=result.fine,
            promoted_reservation_id=result.promoted.id if result.promoted else None,
            warnings=_warning_codes(result.warnings),
        )
    except CirculationError as e:
        raise http_error(e)

# Reservations

@router.post("/reservations", status_code=status.HTTP_201_CREATED, response_model=Reservation)
async def reserve(body: ReserveRequest, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        position = engine.reservations.reserve(
            body.borrower_id, body.title_id,
            requested_at=body.requested_at, priority=body.priority)
        return Reservation.from_position(position)
    except CirculationError as e:
        raise http_error(e)

@router.get("/reservations/{reservation_id}", response_model=Reservation)
async def get_reservation(reservation_id: int, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return Reservation.from_position(engine.reservations.position(reservation_id))
    except CirculationError as e:
        raise http_error(e)

@router.delete("/reservations/{reservation_id}", response_model=Reservation)
async def cancel_reservation(reservation_id: int, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        engine.reservations.cancel(reservation_id)
        return Reservation.from_position(engine.reservations.position(reservation_id))
    except CirculationError as e:
        raise http_error(e)

# Reports and notices

@router.get("/reports/fines", response_model=FineSummary)
async def fines_report(as_of: Optional[date] = None, engine: LoanLifecycleEngine = Depends(get_engine)):
    return FineSummary.model_validate(fine_summary(engine, as_of=as_of))

@router.get("/reports/defaulters", response_model=List[Defaulter])
async def defaulters_report(as_of: Optional[date] = None, engine: LoanLifecycleEngine = Depends(get_engine)):
    return [Defaulter.model_validate(d) for d in defaulters(engine, as_of=as_of)]

@router.post("/notices", response_model=List[Notice])
async def send_notices(as_of: Optional[date] = None, engine: LoanLifecycleEngine = Depends(get_engine)):
    try:
        return [Notice.from_event(e) for e in engine.send_notices(as_of=as_of)]
    except CirculationError as e:
        raise http_error(e)
