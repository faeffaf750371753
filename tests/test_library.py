import pytest

from library_catalog.book import Book
from library_catalog.errors import (
    CatalogError,
    ConflictError,
    DuplicateError,
    ErrorKind,
    InvalidKeyError,
    NotFoundError,
)
from library_catalog.patron import Patron


def assert_consistent(catalog):
    """Every book is unavailable exactly when one patron holds it."""
    catalog.check_invariants()
    patrons = catalog.list_patrons()
    for book in catalog.list_books():
        holders = [p.id for p in patrons if p.has_borrowed(book.isbn)]
        assert len(holders) <= 1
        assert book.available == (not holders)


# ------------------------- Books ------------------------- #
def test_add_and_get_book(catalog):
    assert catalog.list_books() == []

    catalog.add_book(Book("ISBN-001", "Ulysses", "James Joyce"))

    book = catalog.get_book("ISBN-001")
    assert book.title == "Ulysses"
    assert book.author == "James Joyce"
    assert book.available is True
    assert len(catalog.list_books()) == 1


def test_add_book_always_stored_available(catalog):
    catalog.add_book(Book("ISBN-001", "Ulysses", "James Joyce", available=False))
    assert catalog.get_book("ISBN-001").available is True
    assert_consistent(catalog)


def test_add_book_empty_isbn(catalog):
    with pytest.raises(InvalidKeyError, match="ISBN cannot be empty"):
        catalog.add_book(Book("", "Untitled", "Nobody"))
    with pytest.raises(InvalidKeyError):
        catalog.add_book(Book("   ", "Untitled", "Nobody"))
    assert catalog.list_books() == []


def test_add_duplicate_isbn_keeps_original(catalog):
    catalog.add_book(Book("ISBN-001", "Original", "First Author"))

    with pytest.raises(DuplicateError, match="Book with ISBN ISBN-001 already exists"):
        catalog.add_book(Book("ISBN-001", "Impostor", "Second Author"))

    assert len(catalog.list_books()) == 1
    assert catalog.get_book("ISBN-001").title == "Original"


def test_duplicate_does_not_touch_borrowed_state(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-001")
    with pytest.raises(DuplicateError):
        sample_catalog.add_book(Book("ISBN-001", "Impostor", "Someone"))
    assert sample_catalog.get_book("ISBN-001").available is False
    assert_consistent(sample_catalog)


def test_added_book_is_not_shared_with_caller(catalog):
    book = Book("ISBN-001", "Ulysses", "James Joyce")
    catalog.add_book(book)
    book.title = "Changed outside"
    book.set_available(False)
    assert catalog.get_book("ISBN-001").title == "Ulysses"
    assert catalog.get_book("ISBN-001").available is True


def test_get_book_returns_copy(sample_catalog):
    book = sample_catalog.get_book("ISBN-001")
    book.set_available(False)
    assert sample_catalog.get_book("ISBN-001").available is True


def test_get_book_not_found(catalog):
    with pytest.raises(NotFoundError, match="Book ISBN-404 not found"):
        catalog.get_book("ISBN-404")


def test_remove_book(sample_catalog):
    sample_catalog.remove_book("ISBN-003")
    with pytest.raises(NotFoundError):
        sample_catalog.get_book("ISBN-003")
    with pytest.raises(NotFoundError):
        sample_catalog.remove_book("ISBN-003")


def test_remove_borrowed_book_conflict(sample_catalog):
    sample_catalog.borrow_book("U002", "ISBN-002")

    with pytest.raises(ConflictError, match="currently borrowed"):
        sample_catalog.remove_book("ISBN-002")

    assert sample_catalog.get_book("ISBN-002").available is False
    assert sample_catalog.get_patron("U002").has_borrowed("ISBN-002")

    sample_catalog.return_book("U002", "ISBN-002")
    sample_catalog.remove_book("ISBN-002")
    assert {b.isbn for b in sample_catalog.list_books()} == {"ISBN-001", "ISBN-003"}


# ------------------------- Search ------------------------- #
def test_search_by_title_case_insensitive(sample_catalog):
    result = sample_catalog.search_by_title("c++")
    assert [b.isbn for b in result] == ["ISBN-001"]

    result = sample_catalog.search_by_title("IN")
    assert {b.isbn for b in result} == {"ISBN-001", "ISBN-002", "ISBN-003"}


def test_search_empty_query_matches_everything_once(sample_catalog):
    isbns = [b.isbn for b in sample_catalog.search_by_title("")]
    assert sorted(isbns) == ["ISBN-001", "ISBN-002", "ISBN-003"]
    assert len(sample_catalog.search_by_author("")) == 3


def test_search_by_author(sample_catalog):
    assert {b.isbn for b in sample_catalog.search_by_author("sedge")} == {"ISBN-003"}
    assert {b.isbn for b in sample_catalog.search_by_author("o")} == {"ISBN-001", "ISBN-002", "ISBN-003"}
    assert sample_catalog.search_by_author("tolkien") == []


def test_search_results_are_copies(sample_catalog):
    for book in sample_catalog.search_by_title(""):
        book.set_available(False)
    assert all(b.available for b in sample_catalog.list_books())


# ------------------------- Patrons ------------------------- #
def test_add_and_get_patron(catalog):
    catalog.add_patron(Patron("U001", "Alice"))
    patron = catalog.get_patron("U001")
    assert patron.name == "Alice"
    assert patron.borrowed == set()


def test_add_patron_drops_preexisting_loans(catalog):
    catalog.add_patron(Patron("U001", "Alice", borrowed=["ISBN-001"]))
    assert catalog.get_patron("U001").borrowed == set()


def test_add_patron_invalid_and_duplicate(sample_catalog):
    with pytest.raises(InvalidKeyError, match="Patron ID cannot be empty"):
        sample_catalog.add_patron(Patron("", "Nobody"))
    with pytest.raises(DuplicateError):
        sample_catalog.add_patron(Patron("U001", "Someone Else"))
    assert sample_catalog.get_patron("U001").name == "Alice"


def test_get_patron_returns_copy(sample_catalog):
    patron = sample_catalog.get_patron("U001")
    patron.borrow("ISBN-001")
    assert sample_catalog.get_patron("U001").borrowed == set()
    assert sample_catalog.get_book("ISBN-001").available is True


def test_remove_patron(sample_catalog):
    sample_catalog.remove_patron("U002")
    with pytest.raises(NotFoundError, match="Patron U002 not found"):
        sample_catalog.get_patron("U002")
    with pytest.raises(NotFoundError):
        sample_catalog.remove_patron("U002")


def test_remove_patron_with_loans_conflict(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-003")
    with pytest.raises(ConflictError, match="still borrowed"):
        sample_catalog.remove_patron("U001")
    assert sample_catalog.get_patron("U001").list_borrowed() == ["ISBN-003"]

    sample_catalog.return_book("U001", "ISBN-003")
    sample_catalog.remove_patron("U001")
    assert [p.id for p in sample_catalog.list_patrons()] == ["U002"]


# ------------------------- Borrow / return ------------------------- #
def test_borrow_and_return_round_trip(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-001")
    assert sample_catalog.get_book("ISBN-001").available is False
    assert sample_catalog.get_patron("U001").has_borrowed("ISBN-001")
    assert sample_catalog.holder_of("ISBN-001") == "U001"
    assert_consistent(sample_catalog)

    sample_catalog.return_book("U001", "ISBN-001")
    assert sample_catalog.get_book("ISBN-001").available is True
    assert not sample_catalog.get_patron("U001").has_borrowed("ISBN-001")
    assert sample_catalog.holder_of("ISBN-001") is None
    assert_consistent(sample_catalog)

    with pytest.raises(ConflictError, match="did not borrow"):
        sample_catalog.return_book("U001", "ISBN-001")


def test_borrow_unavailable_book(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-001")
    with pytest.raises(ConflictError, match="not available"):
        sample_catalog.borrow_book("U002", "ISBN-001")
    with pytest.raises(ConflictError):
        sample_catalog.borrow_book("U001", "ISBN-001")
    assert sample_catalog.get_patron("U002").borrowed == set()
    assert_consistent(sample_catalog)


@pytest.mark.parametrize("patron_id, isbn, missing", [
    ("U999", "ISBN-001", "Patron U999"),
    ("U001", "ISBN-999", "Book ISBN-999"),
    ("U999", "ISBN-999", "Patron U999"),
])
def test_borrow_missing_keys(sample_catalog, patron_id, isbn, missing):
    with pytest.raises(NotFoundError, match=missing):
        sample_catalog.borrow_book(patron_id, isbn)
    assert all(b.available for b in sample_catalog.list_books())


def test_return_by_wrong_patron(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-002")
    with pytest.raises(ConflictError):
        sample_catalog.return_book("U002", "ISBN-002")
    assert sample_catalog.holder_of("ISBN-002") == "U001"


def test_return_missing_keys(sample_catalog):
    with pytest.raises(NotFoundError, match="Patron U999"):
        sample_catalog.return_book("U999", "ISBN-001")
    with pytest.raises(NotFoundError, match="Book ISBN-999"):
        sample_catalog.return_book("U001", "ISBN-999")


def test_borrowed_by_lists_patron_books(sample_catalog):
    sample_catalog.borrow_book("U001", "ISBN-003")
    sample_catalog.borrow_book("U001", "ISBN-001")
    assert [b.isbn for b in sample_catalog.borrowed_by("U001")] == ["ISBN-001", "ISBN-003"]
    assert sample_catalog.borrowed_by("U002") == []
    with pytest.raises(NotFoundError):
        sample_catalog.borrowed_by("U999")


def test_holder_of_missing_book(sample_catalog):
    with pytest.raises(NotFoundError):
        sample_catalog.holder_of("ISBN-999")


def test_reference_scenario(sample_catalog):
    lib = sample_catalog
    assert [b.isbn for b in lib.search_by_title("c++")] == ["ISBN-001"]

    lib.borrow_book("U001", "ISBN-001")
    assert lib.get_book("ISBN-001").available is False
    with pytest.raises(ConflictError):
        lib.borrow_book("U002", "ISBN-001")

    lib.return_book("U001", "ISBN-001")
    assert lib.get_book("ISBN-001").available is True
    with pytest.raises(CatalogError):
        lib.return_book("U002", "ISBN-002")
    with pytest.raises(NotFoundError):
        lib.remove_book("ISBN-999")

    lib.borrow_book("U002", "ISBN-002")
    with pytest.raises(ConflictError):
        lib.remove_book("ISBN-002")
    lib.return_book("U002", "ISBN-002")
    lib.remove_book("ISBN-002")
    assert_consistent(lib)


# ------------------------- Reporting ------------------------- #
def test_statistics(sample_catalog):
    sample_catalog.borrow_book("U002", "ISBN-003")
    assert sample_catalog.get_statistics() == {
        "total_books": 3,
        "available_books": 2,
        "borrowed_books": 1,
        "unique_authors": 3,
        "total_patrons": 2,
        "active_patrons": 1,
    }


def test_check_invariants_detects_drift(sample_catalog):
    sample_catalog.check_invariants()
    # Reach into storage to simulate a half-applied loan
    sample_catalog._books["ISBN-001"].set_available(False)
    with pytest.raises(ConflictError, match="ISBN-001"):
        sample_catalog.check_invariants()


# ------------------------- Result wrapper ------------------------- #
def test_attempt_success(sample_catalog):
    result = sample_catalog.attempt(sample_catalog.get_book, "ISBN-001")
    assert result.ok
    assert result.kind is None
    assert result.unwrap().title == "Introduction to C++"


def test_attempt_failure_kinds(sample_catalog):
    assert sample_catalog.attempt("add_book", Book("", "x", "y")).kind is ErrorKind.INVALID_KEY
    assert sample_catalog.attempt("add_patron", Patron("U001", "Alice")).kind is ErrorKind.DUPLICATE
    assert sample_catalog.attempt("get_patron", "U404").kind is ErrorKind.NOT_FOUND

    sample_catalog.borrow_book("U001", "ISBN-001")
    result = sample_catalog.attempt("borrow_book", "U002", "ISBN-001")
    assert not result.ok
    assert result.kind is ErrorKind.CONFLICT
    assert result.to_dict() == {"ok": False, "kind": "Conflict", "message": "Book ISBN-001 is not available"}
    with pytest.raises(ConflictError):
        result.unwrap()


def test_error_kinds_map_to_builtin_families():
    assert issubclass(NotFoundError, LookupError)
    assert issubclass(DuplicateError, ValueError)
    assert issubclass(InvalidKeyError, ValueError)
    assert ConflictError("x").kind is ErrorKind.CONFLICT
    # Only the concrete subclasses carry a kind
    assert not hasattr(CatalogError, "kind")
