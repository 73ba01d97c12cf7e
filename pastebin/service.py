"""
Paste service: creation with collision retry, the view-counting access
protocol, metadata reads, deletion, cleanup sweep and statistics.
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional, Union

from fastapi import Depends

from pastebin.config import Settings, settings
from pastebin.database import PasteStore, get_store
from pastebin.exceptions import IdExhaustionError, PasteValidationError, UniqueViolation
from pastebin.expiration import ExpirationPolicy, ExpirationType, Number
from pastebin.ids import IdGenerator
from pastebin.paste import (
    DEFAULT_SYNTAX,
    DEFAULT_TITLE,
    ExpiryReason,
    Paste,
    expiry_reason,
    is_expired,
    is_sweepable,
    is_view_expired,
    paste_view,
    utcnow,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessResult:
    """Outcome of a read. Not-found and expired are normal outcomes, not errors."""

    found: bool
    expired: bool = False
    reason: Optional[ExpiryReason] = None
    last_view: bool = False
    data: Optional[Dict[str, Any]] = None


NOT_FOUND = AccessResult(found=False)


class PasteService:
    def __init__(
        self,
        store: PasteStore,
        id_generator: IdGenerator,
        policy: ExpirationPolicy,
        max_id_retries: int = 5,
        max_content_length: int = 512000,
        max_title_length: int = 255,
        max_syntax_length: int = 50,
    ):
        self.store = store
        self.id_generator = id_generator
        self.policy = policy
        self.max_id_retries = max_id_retries
        self.max_content_length = max_content_length
        self.max_title_length = max_title_length
        self.max_syntax_length = max_syntax_length

    @classmethod
    def from_settings(cls, store: PasteStore, config: Settings = settings) -> "PasteService":
        return cls(
            store=store,
            id_generator=IdGenerator(config.PASTE_ID_ALPHABET, config.PASTE_ID_LENGTH),
            policy=ExpirationPolicy(
                max_minutes=config.MAX_EXPIRATION_MINUTES,
                max_views=config.MAX_VIEWS_LIMIT,
            ),
            max_id_retries=config.PASTE_ID_MAX_RETRIES,
            max_content_length=config.MAX_CONTENT_LENGTH,
            max_title_length=config.MAX_TITLE_LENGTH,
            max_syntax_length=config.MAX_SYNTAX_LENGTH,
        )

    def create_paste(
        self,
        content: Optional[str],
        title: Optional[str] = None,
        syntax: Optional[str] = None,
        expiration_type: Union[str, ExpirationType, None] = None,
        expiration_minutes: Optional[Number] = None,
        max_views: Optional[Number] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Create a new paste.

        Args:
            content: Paste text, stored verbatim
            title: Optional title (trimmed, defaults to "Untitled")
            syntax: Optional syntax label (defaults to "plaintext")
            expiration_type: never, time, views or both (defaults to never)
            expiration_minutes: Minutes until expiry for time/both
            max_views: Permitted reads for views/both
            now: Creation time (defaults to UTC now)

        Returns:
            Full paste view of the stored record

        Raises:
            PasteValidationError: If content, title, syntax or expiration is invalid
            IdExhaustionError: If no unique ID was found within the retry bound
        """
        now = now or utcnow()

        if not isinstance(content, str) or not content.strip():
            raise PasteValidationError(
                "Content is required and must be a non-empty string", field="content"
            )
        if len(content) > self.max_content_length:
            raise PasteValidationError(
                f"Content exceeds maximum length of {self.max_content_length} characters",
                field="content",
            )

        title = title.strip() if title is not None else ""
        if len(title) > self.max_title_length:
            raise PasteValidationError(
                f"Title cannot exceed {self.max_title_length} characters", field="title"
            )
        syntax = syntax if syntax is not None else DEFAULT_SYNTAX
        if len(syntax) > self.max_syntax_length:
            raise PasteValidationError(
                f"Syntax cannot exceed {self.max_syntax_length} characters", field="syntax"
            )

        if expiration_type is None:
            expiration_type = ExpirationType.NEVER
        expiry = self.policy.validate(expiration_type, expiration_minutes, max_views, now=now)

        draft = Paste(
            id="",
            content=content,
            title=title or DEFAULT_TITLE,
            syntax=syntax,
            expiration_type=expiry.expiration_type,
            expires_at=expiry.expires_at,
            max_views=expiry.max_views,
            view_count=0,
            created_at=now,
            updated_at=now,
        )
        paste = self._insert_with_unique_id(draft)

        logger.info(f"Paste {paste.id} created (expiration={paste.expiration_type.value})")
        return paste_view(paste, now)

    def _insert_with_unique_id(self, draft: Paste) -> Paste:
        attempts = 1 + self.max_id_retries
        for attempt in range(1, attempts + 1):
            candidate = self.id_generator.generate()
            if self.store.exists(candidate):
                logger.warning(f"Paste ID collision on {candidate} (attempt {attempt}/{attempts})")
                continue
            try:
                return self.store.insert(replace(draft, id=candidate))
            except UniqueViolation:
                # Lost an insert race for the same candidate
                logger.warning(f"Paste ID {candidate} taken concurrently (attempt {attempt}/{attempts})")

        logger.error(f"Could not generate a unique paste ID after {attempts} attempts")
        raise IdExhaustionError(attempts)

    def get_paste(
        self, paste_id: str, now: Optional[datetime] = None, increment_view: bool = True
    ) -> AccessResult:
        """
        Read a paste, counting the view.

        Time expiry is checked before view expiry, and both before the
        increment, so a denied read is never counted. The read whose
        increment reaches max_views still gets the content and is flagged
        last_view.

        Args:
            paste_id: Paste identifier
            now: Reference time for expiry checks
            increment_view: False for metadata reads (no content, no mutation)

        Returns:
            AccessResult describing the outcome
        """
        now = now or utcnow()

        paste = self.store.get(paste_id)
        if paste is None:
            return NOT_FOUND

        reason = expiry_reason(paste, now)
        if reason is not None:
            logger.info(f"Paste {paste_id} denied: expired ({reason.value})")
            return AccessResult(found=True, expired=True, reason=reason)

        if not increment_view:
            return AccessResult(found=True, data=paste_view(paste, now, include_content=False))

        view_count = self.store.increment_view(paste_id)
        if view_count is None:
            # Another read used up the last view, or the paste was removed
            current = self.store.get(paste_id)
            if current is None:
                return NOT_FOUND
            reason = expiry_reason(current, now) or ExpiryReason.VIEWS
            logger.info(f"Paste {paste_id} denied: expired ({reason.value})")
            return AccessResult(found=True, expired=True, reason=reason)

        paste.view_count = view_count
        last_view = is_view_expired(paste)
        if last_view:
            logger.info(f"Paste {paste_id} served its last view ({view_count}/{paste.max_views})")
        return AccessResult(found=True, last_view=last_view, data=paste_view(paste, now))

    def get_paste_metadata(self, paste_id: str, now: Optional[datetime] = None) -> AccessResult:
        return self.get_paste(paste_id, now=now, increment_view=False)

    def delete_paste(self, paste_id: str) -> bool:
        """Delete a paste whether or not it has expired. False if it did not exist."""
        deleted = self.store.delete(paste_id)
        if deleted:
            logger.info(f"Paste {paste_id} deleted")
        return deleted

    def cleanup_expired_pastes(self, now: Optional[datetime] = None) -> int:
        """Remove every paste past its deadline or view cap; returns how many."""
        now = now or utcnow()
        removed = self.store.delete_where(lambda paste: is_sweepable(paste, now))
        logger.info(f"Cleanup removed {removed} expired paste(s)")
        return removed

    def get_stats(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or utcnow()
        return {
            "total": self.store.count(),
            "active": self.store.count(lambda paste: not is_expired(paste, now)),
        }


# Dependency for FastAPI
def get_paste_service(store: PasteStore = Depends(get_store)) -> PasteService:
    return PasteService.from_settings(store)
