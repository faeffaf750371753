"""Library Catalog - Core Application Package

This package contains the core application modules including:
- Data models (book.py, patron.py)
- Catalog management logic (library.py)
- Error taxonomy (errors.py)
- CLI interface (main.py)
- Configuration and display helpers (config.py, ui_helpers.py)
"""
from library_catalog.book import Book
from library_catalog.errors import (
    CatalogError,
    ConflictError,
    DuplicateError,
    ErrorKind,
    InvalidKeyError,
    NotFoundError,
    Result,
)
from library_catalog.library import Catalog
from library_catalog.patron import Patron

__all__ = [
    "Book",
    "Catalog",
    "CatalogError",
    "ConflictError",
    "DuplicateError",
    "ErrorKind",
    "InvalidKeyError",
    "NotFoundError",
    "Patron",
    "Result",
]
