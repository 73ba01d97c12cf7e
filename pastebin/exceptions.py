"""
Error types raised by the paste core and its stores.
"""
from typing import Optional


class PastebinError(Exception):
    """Base class for all pastebin errors."""


class PasteValidationError(PastebinError, ValueError):
    """Creation or expiration input violates a constraint (client error)."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class IdExhaustionError(PastebinError):
    """No unique paste ID was found within the retry bound."""

    def __init__(self, attempts: int):
        super().__init__(f"Failed to generate unique paste ID after {attempts} attempts")
        self.attempts = attempts


class UniqueViolation(PastebinError):
    """A paste with the same ID is already stored."""

    def __init__(self, paste_id: str):
        super().__init__(f"Paste {paste_id} already exists")
        self.paste_id = paste_id


class StoreError(PastebinError):
    """The paste store is unavailable or failed unexpectedly."""
