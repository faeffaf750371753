import logging
from typing import Any, Callable, Dict, List, Optional, Union

from library_catalog.book import Book
from library_catalog.errors import (
    CatalogError,
    ConflictError,
    DuplicateError,
    InvalidKeyError,
    NotFoundError,
    Result,
)
from library_catalog.patron import Patron
from library_catalog.validators import KeyValidator, TextValidator

logger = logging.getLogger(__name__)


class Catalog:
    """Owns the book and patron collections and enforces the rules spanning both.

    Books are keyed by ISBN and patrons by ID. Reads hand out copies, so the
    only way to change a stored entry is through the methods below.
    """

    def __init__(self) -> None:
        self._books: Dict[str, Book] = {}
        self._patrons: Dict[str, Patron] = {}

    # ------------------------- Books ------------------------- #
    def add_book(self, book: Book) -> Book:
        """Add a book, always stored as available. Returns a copy of the stored entry."""
        isbn = KeyValidator.normalize_key(book.isbn)
        if not KeyValidator.is_valid_key(isbn):
            logger.warning("Rejected book with empty ISBN")
            raise InvalidKeyError("ISBN cannot be empty")
        if isbn in self._books:
            logger.warning(f"Rejected duplicate book: {isbn}")
            raise DuplicateError(f"Book with ISBN {isbn} already exists")

        stored = Book(isbn=isbn, title=book.title, author=book.author, available=True)
        self._books[isbn] = stored
        logger.info(f"Book added: {isbn}")
        return stored.copy()

    def remove_book(self, isbn: str) -> None:
        book = self._find_book(isbn)
        if not book.available:
            logger.warning(f"Rejected removal of borrowed book: {isbn}")
            raise ConflictError(f"Cannot remove book {isbn}: it is currently borrowed")
        del self._books[book.isbn]
        logger.info(f"Book removed: {isbn}")

    def get_book(self, isbn: str) -> Book:
        return self._find_book(isbn).copy()

    def list_books(self) -> List[Book]:
        return [book.copy() for book in self._books.values()]

    def search_by_title(self, query: str) -> List[Book]:
        """Case-insensitive substring search over titles. Result order is unspecified."""
        return [b.copy() for b in self._books.values() if TextValidator.contains(b.title, query)]

    def search_by_author(self, query: str) -> List[Book]:
        """Case-insensitive substring search over authors. Result order is unspecified."""
        return [b.copy() for b in self._books.values() if TextValidator.contains(b.author, query)]

    def holder_of(self, isbn: str) -> Optional[str]:
        """Return the ID of the patron holding the book, or None when it is on the shelf."""
        book = self._find_book(isbn)
        if book.available:
            return None
        for patron in self._patrons.values():
            if patron.has_borrowed(book.isbn):
                return patron.id
        return None

    # ------------------------- Patrons ------------------------- #
    def add_patron(self, patron: Patron) -> Patron:
        """Register a patron with no loans. Returns a copy of the stored entry."""
        patron_id = KeyValidator.normalize_key(patron.id)
        if not KeyValidator.is_valid_key(patron_id):
            logger.warning("Rejected patron with empty ID")
            raise InvalidKeyError("Patron ID cannot be empty")
        if patron_id in self._patrons:
            logger.warning(f"Rejected duplicate patron: {patron_id}")
            raise DuplicateError(f"Patron with ID {patron_id} already exists")

        stored = Patron(patron_id=patron_id, name=patron.name)
        self._patrons[patron_id] = stored
        logger.info(f"Patron added: {patron_id}")
        return stored.copy()

    def remove_patron(self, patron_id: str) -> None:
        patron = self._find_patron(patron_id)
        if patron.borrowed:
            logger.warning(f"Rejected removal of patron with loans: {patron_id}")
            raise ConflictError(
                f"Cannot remove patron {patron_id}: {patron.borrowed_count} book(s) still borrowed"
            )
        del self._patrons[patron.id]
        logger.info(f"Patron removed: {patron_id}")

    def get_patron(self, patron_id: str) -> Patron:
        return self._find_patron(patron_id).copy()

    def list_patrons(self) -> List[Patron]:
        return [patron.copy() for patron in self._patrons.values()]

    def borrowed_by(self, patron_id: str) -> List[Book]:
        patron = self._find_patron(patron_id)
        return [self._books[isbn].copy() for isbn in patron.list_borrowed() if isbn in self._books]

    # ------------------------- Loans ------------------------- #
    def borrow_book(self, patron_id: str, isbn: str) -> None:
        patron = self._find_patron(patron_id)
        book = self._find_book(isbn)
        if not book.available:
            logger.warning(f"Rejected borrow of unavailable book {isbn} by {patron_id}")
            raise ConflictError(f"Book {isbn} is not available")

        # Both keys are validated, so neither step below can fail
        book.set_available(False)
        patron.borrow(book.isbn)
        logger.info(f"Book {isbn} borrowed by {patron_id}")

    def return_book(self, patron_id: str, isbn: str) -> None:
        patron = self._find_patron(patron_id)
        book = self._find_book(isbn)
        if not patron.has_borrowed(book.isbn):
            logger.warning(f"Rejected return of {isbn} by {patron_id}: not borrowed by this patron")
            raise ConflictError(f"Patron {patron_id} did not borrow book {isbn}")

        patron.release(book.isbn)
        book.set_available(True)
        logger.info(f"Book {isbn} returned by {patron_id}")

    # ------------------------- Reporting ------------------------- #
    def get_statistics(self) -> Dict[str, Any]:
        borrowed = sum(1 for b in self._books.values() if not b.available)
        return {
            "total_books": len(self._books),
            "available_books": len(self._books) - borrowed,
            "borrowed_books": borrowed,
            "unique_authors": len({b.author for b in self._books.values()}),
            "total_patrons": len(self._patrons),
            "active_patrons": sum(1 for p in self._patrons.values() if p.borrowed),
        }

    def check_invariants(self) -> None:
        """Raise ConflictError if a book's availability disagrees with the patrons' loans."""
        holders: Dict[str, List[str]] = {}
        for patron in self._patrons.values():
            for isbn in patron.borrowed:
                if isbn not in self._books:
                    raise ConflictError(f"Patron {patron.id} holds unknown book {isbn}")
                holders.setdefault(isbn, []).append(patron.id)

        for isbn, book in self._books.items():
            count = len(holders.get(isbn, []))
            if count > 1:
                raise ConflictError(f"Book {isbn} is held by {count} patrons")
            if book.available != (count == 0):
                raise ConflictError(f"Book {isbn} availability does not match its loans")

    def attempt(self, operation: Union[str, Callable[..., Any]], *args: Any, **kwargs: Any) -> Result:
        """Run a catalog call and report its outcome as a Result instead of raising.

        ``operation`` may be a bound method or the method's name, e.g.
        ``catalog.attempt("borrow_book", "U001", "ISBN-001")``.
        """
        if isinstance(operation, str):
            operation = getattr(self, operation)
        try:
            return Result(value=operation(*args, **kwargs))
        except CatalogError as e:
            return Result(error=e)

    # ------------------------- Utilities ------------------------- #
    def _find_book(self, isbn: str) -> Book:
        book = self._books.get(KeyValidator.normalize_key(isbn))
        if book is None:
            raise NotFoundError(f"Book {isbn} not found")
        return book

    def _find_patron(self, patron_id: str) -> Patron:
        patron = self._patrons.get(KeyValidator.normalize_key(patron_id))
        if patron is None:
            raise NotFoundError(f"Patron {patron_id} not found")
        return patron
