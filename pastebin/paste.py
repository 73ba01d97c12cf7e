"""
Paste record and its derived-state queries.

The queries are plain functions over a Paste value and an explicit "now", so
they can be evaluated without a store.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pastebin.expiration import ExpirationType, format_remaining_time

DEFAULT_TITLE = "Untitled"
DEFAULT_SYNTAX = "plaintext"


class ExpiryReason(str, Enum):
    TIME = "time"
    VIEWS = "views"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Paste:
    """A stored paste. Only view_count (and updated_at) change after creation."""

    id: str
    content: str
    title: str = DEFAULT_TITLE
    syntax: str = DEFAULT_SYNTAX
    expiration_type: ExpirationType = ExpirationType.NEVER
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None
    view_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


def is_time_expired(paste: Paste, now: Optional[datetime] = None) -> bool:
    if paste.expires_at is None:
        return False
    return (now or utcnow()) > paste.expires_at


def is_view_expired(paste: Paste) -> bool:
    if paste.max_views is None:
        return False
    return paste.view_count >= paste.max_views


def is_expired(paste: Paste, now: Optional[datetime] = None) -> bool:
    """Expiry predicate shared by reads and statistics."""
    return is_time_expired(paste, now) or is_view_expired(paste)


def is_sweepable(paste: Paste, now: Optional[datetime] = None) -> bool:
    """Cleanup selection: a deadline at or before now counts, unlike reads."""
    if paste.expires_at is not None and paste.expires_at <= (now or utcnow()):
        return True
    return is_view_expired(paste)


def expiry_reason(paste: Paste, now: Optional[datetime] = None) -> Optional[ExpiryReason]:
    """Classify an expired paste; time is checked before views."""
    if is_time_expired(paste, now):
        return ExpiryReason.TIME
    if is_view_expired(paste):
        return ExpiryReason.VIEWS
    return None


def remaining_views(paste: Paste) -> Optional[int]:
    if paste.max_views is None:
        return None
    return max(0, paste.max_views - paste.view_count)


def remaining_time(paste: Paste, now: Optional[datetime] = None) -> Optional[timedelta]:
    if paste.expires_at is None:
        return None
    return max(timedelta(0), paste.expires_at - (now or utcnow()))


def paste_view(
    paste: Paste, now: Optional[datetime] = None, include_content: bool = True
) -> Dict[str, Any]:
    """
    Project a paste into its public representation.

    Args:
        paste: Paste record
        now: Reference time for the time-based fields
        include_content: False for metadata reads (the key is left out entirely)

    Returns:
        Dict with the PasteView fields; time_remaining is in milliseconds
    """
    now = now or utcnow()
    left = remaining_time(paste, now)

    view: Dict[str, Any] = {"id": paste.id}
    if include_content:
        view["content"] = paste.content
    view.update(
        title=paste.title,
        syntax=paste.syntax,
        expiration_type=paste.expiration_type.value,
        expires_at=paste.expires_at,
        max_views=paste.max_views,
        view_count=paste.view_count,
        remaining_views=remaining_views(paste),
        time_remaining=None if left is None else int(left.total_seconds() * 1000),
        time_remaining_text=format_remaining_time(left),
        created_at=paste.created_at,
        is_expired=is_expired(paste, now),
    )
    return view
