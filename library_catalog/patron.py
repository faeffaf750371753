from __future__ import annotations

from typing import Iterable, List, Optional, Set


class Patron:
    """A library user and the set of ISBNs they currently hold.

    The patron does not check that an ISBN exists; the Catalog owns that rule.
    """

    def __init__(self, patron_id: str, name: str, borrowed: Optional[Iterable[str]] = None) -> None:
        self.id = (patron_id or "").strip()
        self.name = (name or "").strip()
        self.borrowed: Set[str] = set(borrowed or ())

    def has_borrowed(self, isbn: str) -> bool:
        return isbn in self.borrowed

    def borrow(self, isbn: str) -> None:
        self.borrowed.add(isbn)

    def release(self, isbn: str) -> None:
        self.borrowed.discard(isbn)

    def list_borrowed(self) -> List[str]:
        return sorted(self.borrowed)

    @property
    def borrowed_count(self) -> int:
        return len(self.borrowed)

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.name} ({self.id})"

    def __repr__(self) -> str:
        return f"Patron(id={self.id!r}, name={self.name!r}, borrowed={self.list_borrowed()!r})"

    def display(self) -> str:
        return f"User ID: {self.id}, Name: {self.name}, Borrowed count: {self.borrowed_count}"

    def copy(self) -> "Patron":
        return Patron.from_dict(self.to_dict())

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "borrowed": self.list_borrowed()}

    @staticmethod
    def from_dict(data: dict) -> "Patron":
        return Patron(
            patron_id=data["id"],
            name=data.get("name", ""),
            borrowed=data.get("borrowed") or [],
        )
