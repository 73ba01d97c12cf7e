"""
Expiration policy: turns a requested expiration configuration into concrete
expiry state (absolute deadline and/or view cap) and validates it.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from pastebin.exceptions import PasteValidationError

Number = Union[int, float]

MINUTES_PER_YEAR = 525600


class ExpirationType(str, Enum):
    NEVER = "never"
    TIME = "time"
    VIEWS = "views"
    BOTH = "both"

    @property
    def uses_time(self) -> bool:
        return self in (ExpirationType.TIME, ExpirationType.BOTH)

    @property
    def uses_views(self) -> bool:
        return self in (ExpirationType.VIEWS, ExpirationType.BOTH)


@dataclass(frozen=True)
class ExpirySettings:
    """Concrete expiry state derived from a validated configuration."""

    expiration_type: ExpirationType
    expires_at: Optional[datetime] = None
    max_views: Optional[int] = None


def _is_number(value) -> bool:
    # bool is an int subclass but never a valid count
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


class ExpirationPolicy:
    """Validates expiration requests against configured ceilings."""

    def __init__(self, max_minutes: int = MINUTES_PER_YEAR, max_views: int = 1000000):
        self.max_minutes = max_minutes
        self.max_views = max_views

    def validate(
        self,
        expiration_type: Union[str, ExpirationType, None],
        minutes: Optional[Number] = None,
        max_views: Optional[Number] = None,
        now: Optional[datetime] = None,
    ) -> ExpirySettings:
        """
        Validate an expiration configuration and derive its expiry state.

        Extraneous values are ignored: for "never" neither minutes nor
        max_views is used, for "time" max_views is ignored and so on.

        Args:
            expiration_type: One of never, time, views, both
            minutes: Minutes until expiry (time/both)
            max_views: Number of permitted reads (views/both), floored
            now: Reference time for the absolute deadline (defaults to UTC now)

        Returns:
            ExpirySettings with exactly the fields the type requires

        Raises:
            PasteValidationError: If the configuration is not legal
        """
        try:
            kind = ExpirationType(expiration_type)
        except ValueError:
            valid = ", ".join(t.value for t in ExpirationType)
            raise PasteValidationError(
                f"Invalid expiration type. Must be one of: {valid}",
                field="expirationType",
            ) from None

        expires_at = None
        if kind.uses_time:
            if not _is_number(minutes) or minutes < 1:
                raise PasteValidationError(
                    "Minutes must be a positive number for time-based expiration",
                    field="expirationMinutes",
                )
            if minutes > self.max_minutes:
                raise PasteValidationError(
                    f"Expiration time cannot exceed 1 year ({self.max_minutes} minutes)",
                    field="expirationMinutes",
                )
            now = now or datetime.now(timezone.utc)
            expires_at = now + timedelta(minutes=minutes)

        views = None
        if kind.uses_views:
            if not _is_number(max_views) or math.floor(max_views) < 1:
                raise PasteValidationError(
                    "Max views must be a positive number for view-based expiration",
                    field="maxViews",
                )
            views = math.floor(max_views)
            if views > self.max_views:
                raise PasteValidationError(
                    f"Max views cannot exceed {self.max_views:,}",
                    field="maxViews",
                )

        return ExpirySettings(expiration_type=kind, expires_at=expires_at, max_views=views)


def format_remaining_time(remaining: Optional[timedelta]) -> Optional[str]:
    """
    Format a remaining duration for display, e.g. "2 hours, 30 minutes".

    Returns None when there is no time limit and "Expired" when nothing is left.
    """
    if remaining is None:
        return None

    seconds = int(remaining.total_seconds())
    if seconds <= 0:
        return "Expired"

    minutes, hours, days = seconds // 60, seconds // 3600, seconds // 86400

    def plural(count: int, unit: str) -> str:
        return f"{count} {unit}{'s' if count > 1 else ''}"

    if days > 0:
        rest = hours % 24
        return plural(days, "day") + (f", {plural(rest, 'hour')}" if rest else "")
    if hours > 0:
        rest = minutes % 60
        return plural(hours, "hour") + (f", {plural(rest, 'minute')}" if rest else "")
    if minutes > 0:
        return plural(minutes, "minute")
    return plural(seconds, "second")
