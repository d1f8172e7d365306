
class CirculationError(Exception):
    """Base for every expected, caller-recoverable circulation failure."""

    code = "circulation_error"
    status_code = 400

    def __init__(self, message=None, **details):
        self.message = message or self.__doc__ or self.code
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message, **self.details}


# Policy violations

class BorrowLimitExceeded(CirculationError):
    """Borrower already holds the maximum number of books."""
    code = "borrow_limit_exceeded"
    status_code = 409

class RenewalLimitReached(CirculationError):
    """Loan has already been renewed the maximum number of times."""
    code = "renewal_limit_reached"
    status_code = 409

class BookReserved(CirculationError):
    """Another borrower is queued for this title."""
    code = "book_reserved"
    status_code = 409

class LoanOverdue(CirculationError):
    """Overdue loans must be returned before they can be renewed."""
    code = "loan_overdue"
    status_code = 409

class BorrowerSuspended(CirculationError):
    """Borrower is suspended."""
    code = "borrower_suspended"
    status_code = 409

# Resource conflicts

class CopyUnavailable(CirculationError):
    """Copy is not available for issue."""
    code = "copy_unavailable"
    status_code = 409

class ReservedForOther(CirculationError):
    """Copy is held for another borrower's reservation."""
    code = "reserved_for_other"
    status_code = 409

class AlreadyBorrowed(CirculationError):
    """Borrower already has a copy of this title issued."""
    code = "already_borrowed"
    status_code = 409

class AlreadyReserved(CirculationError):
    """Borrower is already in the queue for this title."""
    code = "already_reserved"
    status_code = 409

# Financial gate

class FineUnpaid(CirculationError):
    """Outstanding fine must be paid or waived first."""
    code = "fine_unpaid"
    status_code = 402

# State errors

class LoanNotFound(CirculationError):
    """Loan not found."""
    code = "loan_not_found"
    status_code = 404

class AlreadyReturned(CirculationError):
    """Loan has already been returned."""
    code = "already_returned"
    status_code = 409

class InvalidTransition(CirculationError):
    """Operation is not valid for the loan's current state."""
    code = "invalid_transition"
    status_code = 409

class ReservationNotFound(CirculationError):
    """Reservation not found."""
    code = "reservation_not_found"
    status_code = 404

class BorrowerNotFound(CirculationError):
    """Borrower not found."""
    code = "borrower_not_found"
    status_code = 404

class CopyNotFound(CirculationError):
    """Book copy not found."""
    code = "copy_not_found"
    status_code = 404

class TitleNotFound(CirculationError):
    """Book title not found."""
    code = "title_not_found"
    status_code = 404

# Invalid input

class InvalidLoanPeriod(CirculationError):
    """Loan period is not one of the allowed options."""
    code = "invalid_loan_period"

class InvalidPriority(CirculationError):
    """Unknown reservation priority."""
    code = "invalid_priority"

class InvalidBookCondition(CirculationError):
    """Unknown book condition."""
    code = "invalid_book_condition"

class DatabaseInsertError(CirculationError):
    code = "database_error"
    status_code = 500


# Advisories ride along with successful results instead of blocking them

class CirculationWarning(UserWarning):
    code = "circulation_warning"

    def __init__(self, message=None):
        super().__init__(message or self.__doc__)

    @property
    def message(self):
        return self.args[0]

class HasOverdueWarning(CirculationWarning):
    """Borrower has overdue loans."""
    code = "has_overdue"

class ClockSkewWarning(CirculationWarning):
    """Operation date is inconsistent with the clock or the loan dates."""
    code = "clock_skew"
