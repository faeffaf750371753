from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(Enum):
    """Kinds of contract violation the catalog reports."""
    INVALID_KEY = "InvalidKey"
    DUPLICATE = "Duplicate"
    NOT_FOUND = "NotFound"
    CONFLICT = "Conflict"


class CatalogError(Exception):
    """Base class for every failure raised by the Catalog."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class InvalidKeyError(CatalogError, ValueError):
    kind = ErrorKind.INVALID_KEY


class DuplicateError(CatalogError, ValueError):
    kind = ErrorKind.DUPLICATE


class NotFoundError(CatalogError, LookupError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(CatalogError):
    kind = ErrorKind.CONFLICT


@dataclass
class Result:
    """Outcome of a catalog call: either a value or the error that stopped it."""
    value: Any = None
    error: Optional[CatalogError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "kind": self.error.kind.value, "message": self.error.message}
        return {"ok": True}
