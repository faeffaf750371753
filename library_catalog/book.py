from __future__ import annotations


class Book:
    """Represents a single book held by the catalog."""

    def __init__(self, isbn: str, title: str, author: str, available: bool = True) -> None:
        self.isbn = (isbn or "").strip()
        self.title = (title or "").strip()
        self.author = (author or "").strip()
        self.available = bool(available)

    def set_available(self, value: bool) -> None:
        self.available = bool(value)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} (ISBN: {self.isbn})"

    def __repr__(self) -> str:
        return f"Book(isbn={self.isbn!r}, title={self.title!r}, available={self.available})"

    def display(self) -> str:
        return (
            f"ISBN: {self.isbn}, Title: {self.title}, Author: {self.author}, "
            f"Available: {'Yes' if self.available else 'No'}"
        )

    def copy(self) -> "Book":
        return Book.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {
            "isbn": self.isbn,
            "title": self.title,
            "author": self.author,
            "available": self.available,
        }

    @staticmethod
    def from_dict(data: dict) -> "Book":
        return Book(
            isbn=data["isbn"],
            title=data.get("title", ""),
            author=data.get("author", ""),
            available=data.get("available", True),
        )
