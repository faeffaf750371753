from typing import Optional


class KeyValidator:
    """Checks for the identifiers used as catalog keys (ISBNs and patron IDs)."""

    @staticmethod
    def normalize_key(raw: Optional[str]) -> str:
        if raw is None:
            return ""
        return raw.strip()

    @staticmethod
    def is_valid_key(key: Optional[str]) -> bool:
        return bool(KeyValidator.normalize_key(key))


class TextValidator:
    """Text helpers shared by the search operations."""

    @staticmethod
    def fold(text: Optional[str]) -> str:
        if text is None:
            return ""
        return text.lower()

    @staticmethod
    def contains(haystack: Optional[str], needle: Optional[str]) -> bool:
        # Empty needle matches everything
        return TextValidator.fold(needle) in TextValidator.fold(haystack)
