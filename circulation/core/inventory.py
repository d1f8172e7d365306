import logging

from circulation.core.exceptions import CopyNotFound, CopyUnavailable, TitleNotFound
from circulation.core.models import BookCopy, BookTitle

logger = logging.getLogger(__name__)


class Inventory:
    """Shelf counts per copy, backed by the `copies` table.

    Each copy counts as one; a title's available count is the number of its
    copies on the shelf.
    """

    def __init__(self, db):
        self.db = db

    def copy(self, copy_id):
        if copy := self.db.get(BookCopy, copy_id):
            return copy
        raise CopyNotFound(f"Copy {copy_id} not found.", copy_id=copy_id)

    def title(self, title_id):
        if title := self.db.get(BookTitle, title_id):
            return title
        raise TitleNotFound(f"Title {title_id} not found.", title_id=title_id)

    def title_of(self, copy_id):
        return self.copy(copy_id).title_id

    def decrement_available(self, copy_id):
        copy = self.copy(copy_id)
        self.db.refresh(copy)
        if not copy.available:
            raise CopyUnavailable(
                f"Copy {copy.accession_number} is already out.", copy_id=copy_id)
        copy.available = False
        self.db.add(copy)
        self.db.flush()
        return copy

    def increment_available(self, copy_id):
        copy = self.copy(copy_id)
        self.db.refresh(copy)
        if copy.available:
            logger.warning(f"Copy {copy.accession_number} returned while already on the shelf")
        copy.available = True
        self.db.add(copy)
        self.db.flush()
        return copy

    def add_title(self, title, author=None, isbn=None, copies=1):
        book = BookTitle(title=title, author=author, isbn=isbn)
        self.db.add(book)
        self.db.flush()
        for n in range(copies):
            book.copies.append(BookCopy(accession_number=f"T{book.id}-C{n + 1}"))
        self.db.flush()
        return book
