"""
Pydantic models for request/response validation.
"""
from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

from pastebin.expiration import ExpirationType


class PasteCreate(BaseModel):
    """Schema for creating a new paste (camelCase or snake_case keys)."""

    model_config = ConfigDict(populate_by_name=True)

    content: str = Field(..., description="Text content (required, non-empty)")
    title: Optional[str] = Field(None, max_length=255, description="Optional title")
    syntax: Optional[str] = Field(None, max_length=50, description="Syntax label, not interpreted")
    expiration_type: Optional[ExpirationType] = Field(
        None, alias="expirationType", description="never, time, views or both"
    )
    expiration_minutes: Optional[Union[StrictInt, StrictFloat]] = Field(
        None, alias="expirationMinutes", description="Minutes until expiry (time/both)"
    )
    max_views: Optional[Union[StrictInt, StrictFloat]] = Field(
        None, alias="maxViews", description="Permitted reads (views/both)"
    )


class PasteMetadata(BaseModel):
    """Schema for paste metadata (no content)."""

    id: str = Field(..., description="Unique paste ID")
    title: str
    syntax: str
    expiration_type: ExpirationType
    expires_at: Optional[datetime] = Field(None, description="Expiry timestamp (null if no time limit)")
    max_views: Optional[int] = Field(None, description="View limit (null if unlimited)")
    view_count: int
    remaining_views: Optional[int] = Field(None, description="Views left (null if unlimited)")
    time_remaining: Optional[int] = Field(None, description="Milliseconds left (null if no time limit)")
    time_remaining_text: Optional[str] = None
    created_at: datetime
    is_expired: bool


class PasteView(PasteMetadata):
    """Schema for viewing/fetching a paste."""

    content: str = Field(..., description="Paste text content")
    last_view: bool = Field(False, description="True if this was the final permitted read")
    message: Optional[str] = None


class PasteCreated(PasteView):
    """Schema for paste creation response."""

    url: str = Field(..., description="Shareable URL of the paste")


class DeleteResponse(BaseModel):
    id: str
    message: str


class StatsResponse(BaseModel):
    total: int = Field(..., description="All stored pastes")
    active: int = Field(..., description="Pastes that have not expired")


class HealthCheck(BaseModel):
    """Schema for health check response."""
    ok: bool = Field(..., description="Is the application healthy?")
