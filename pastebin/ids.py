"""
Paste ID generation.

IDs are short random strings drawn from a URL-safe alphabet that leaves out
visually ambiguous characters (0, O, l, 1). With the default 56-character
alphabet and 8 characters there are ~9.7e13 possible IDs.
"""
import re
import secrets
from typing import Optional

DEFAULT_ALPHABET = "abcdefghijkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"
DEFAULT_LENGTH = 8

_URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


class IdGenerator:
    """Generates random paste IDs from a fixed alphabet."""

    def __init__(self, alphabet: str = DEFAULT_ALPHABET, length: int = DEFAULT_LENGTH):
        """
        Args:
            alphabet: Characters IDs are drawn from (must be URL-safe, no duplicates)
            length: Number of characters per ID
        """
        if length < 1:
            raise ValueError("ID length must be at least 1")
        if not alphabet or not _URL_SAFE.match(alphabet):
            raise ValueError("ID alphabet must be non-empty and URL-safe")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("ID alphabet must not contain duplicate characters")
        self.alphabet = alphabet
        self.length = length

    def generate(self) -> str:
        """Return one candidate ID (uniqueness is checked by the caller)."""
        return "".join(secrets.choice(self.alphabet) for _ in range(self.length))

    @property
    def id_space(self) -> int:
        return len(self.alphabet) ** self.length


def is_valid_paste_id(
    paste_id: Optional[str],
    alphabet: str = DEFAULT_ALPHABET,
    length: int = DEFAULT_LENGTH,
    min_length: int = 6,
    max_length: int = 20,
) -> bool:
    """
    Check that a client-supplied ID has the shape of a paste ID.

    ASCII alphanumerics are always accepted, plus any other character of the
    configured alphabet. The length bounds widen to include the configured
    ID length.
    """
    if not isinstance(paste_id, str):
        return False
    if not min(min_length, length) <= len(paste_id) <= max(max_length, length):
        return False
    return all((c.isascii() and c.isalnum()) or c in alphabet for c in paste_id)

