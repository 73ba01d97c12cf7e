"""
Paste routes.
Handles create, fetch, metadata, delete and statistics operations.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from pastebin.config import settings
from pastebin.ids import is_valid_paste_id
from pastebin.models import (
    DeleteResponse,
    PasteCreate,
    PasteCreated,
    PasteMetadata,
    PasteView,
    StatsResponse,
)
from pastebin.paste import ExpiryReason
from pastebin.rate_limit import api_limiter, create_paste_limiter
from pastebin.service import AccessResult, PasteService, get_paste_service

router = APIRouter(prefix="/api/pastes", dependencies=[Depends(api_limiter)])
logger = logging.getLogger(__name__)

PASTE_NOT_FOUND = "Paste not found"
EXPIRED_MESSAGES = {
    ExpiryReason.TIME: "This paste has expired due to time limit",
    ExpiryReason.VIEWS: "This paste has reached its maximum view count",
}
LAST_VIEW_MESSAGE = "This was the last allowed view. The paste will expire after this."


def _get_current_time(x_test_now_ms: Optional[str] = None) -> datetime:
    """
    Get current time, respecting TEST_MODE for deterministic testing.

    Args:
        x_test_now_ms: Test timestamp header (milliseconds since epoch)

    Returns:
        Current datetime in UTC
    """
    if settings.TEST_MODE and x_test_now_ms:
        try:
            # Convert milliseconds to seconds
            timestamp_ms = int(x_test_now_ms)
            return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
        except (ValueError, TypeError) as e:
            logger.warning(f"Invalid x-test-now-ms header: {e}")

    return datetime.now(timezone.utc)


def current_time(x_test_now_ms: Optional[str] = Header(None)) -> datetime:
    return _get_current_time(x_test_now_ms)


def valid_paste_id(paste_id: str) -> str:
    if not is_valid_paste_id(paste_id, settings.PASTE_ID_ALPHABET, settings.PASTE_ID_LENGTH):
        raise HTTPException(status_code=400, detail="Invalid paste ID")
    return paste_id


def _raise_unavailable(result: AccessResult) -> None:
    if not result.found:
        raise HTTPException(status_code=404, detail=PASTE_NOT_FOUND)
    if result.expired:
        raise HTTPException(status_code=410, detail=EXPIRED_MESSAGES[result.reason])


@router.post(
    "",
    response_model=PasteCreated,
    status_code=201,
    dependencies=[Depends(create_paste_limiter)],
)
async def create_paste(
    paste: PasteCreate,
    service: PasteService = Depends(get_paste_service),
    now: datetime = Depends(current_time),
) -> PasteCreated:
    """
    Create a new paste.

    Args:
        paste: Content, optional title/syntax and expiration configuration

    Returns:
        Stored paste with its shareable URL

    Raises:
        PasteValidationError: Mapped to 400 by the application
    """
    data = service.create_paste(
        content=paste.content,
        title=paste.title,
        syntax=paste.syntax,
        expiration_type=paste.expiration_type,
        expiration_minutes=paste.expiration_minutes,
        max_views=paste.max_views,
        now=now,
    )

    base_url = settings.APP_DOMAIN.rstrip("/")
    return PasteCreated(**data, url=f"{base_url}/api/pastes/{data['id']}")


@router.get("/stats", response_model=StatsResponse)
async def get_stats(
    service: PasteService = Depends(get_paste_service),
    now: datetime = Depends(current_time),
) -> StatsResponse:
    return StatsResponse(**service.get_stats(now=now))


@router.get("/{paste_id}", response_model=PasteView)
async def fetch_paste(
    paste_id: str = Depends(valid_paste_id),
    service: PasteService = Depends(get_paste_service),
    now: datetime = Depends(current_time),
) -> PasteView:
    """
    Fetch a paste. Each successful fetch counts as a view.

    Raises:
        HTTPException: 404 if not found, 410 if expired by time or views
    """
    result = service.get_paste(paste_id, now=now)
    _raise_unavailable(result)

    if result.last_view:
        return PasteView(**result.data, last_view=True, message=LAST_VIEW_MESSAGE)
    return PasteView(**result.data)


@router.get("/{paste_id}/meta", response_model=PasteMetadata)
async def fetch_paste_metadata(
    paste_id: str = Depends(valid_paste_id),
    service: PasteService = Depends(get_paste_service),
    now: datetime = Depends(current_time),
) -> PasteMetadata:
    """Fetch paste metadata without content and without counting a view."""
    result = service.get_paste_metadata(paste_id, now=now)
    _raise_unavailable(result)
    return PasteMetadata(**result.data)


@router.delete("/{paste_id}", response_model=DeleteResponse)
async def delete_paste(
    paste_id: str = Depends(valid_paste_id),
    service: PasteService = Depends(get_paste_service),
) -> DeleteResponse:
    if not service.delete_paste(paste_id):
        raise HTTPException(status_code=404, detail=PASTE_NOT_FOUND)
    return DeleteResponse(id=paste_id, message="Paste deleted successfully")
