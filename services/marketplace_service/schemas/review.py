"""Review schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from services.marketplace_service.models import ModerationAction, ModerationStatus
from services.marketplace_service.schemas.common import PartialUpdate

# ============================================================================
# REVIEW SCHEMAS
# ============================================================================


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    images: list[str] = Field(default_factory=list)
    is_anonymous: bool = False


class ReviewUpdate(PartialUpdate):
    required_columns = frozenset({"rating", "images", "is_anonymous"})

    rating: Optional[int] = Field(None, ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)
    images: Optional[list[str]] = None
    is_anonymous: Optional[bool] = None


class ReviewDelete(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class ReviewRespond(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)


class ReviewFlag(BaseModel):
    # Emptiness is reported with the domain message rather than a 422.
    reason: str = ""
    comment: Optional[str] = Field(None, max_length=500)


class ReviewModerate(BaseModel):
    action: ModerationAction
    reason: Optional[str] = None
    message: Optional[str] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    user_id: Optional[str] = None
    store_id: uuid.UUID
    offer_id: Optional[uuid.UUID] = None
    booking_id: Optional[uuid.UUID] = None
    rating: int
    comment: Optional[str] = None
    images: list[str] = []
    is_anonymous: bool
    is_featured: bool
    helpful_count: int
    is_approved: bool
    moderation_status: ModerationStatus
    response_text: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def hide_anonymous_author(self):
        if self.is_anonymous:
            self.user_id = None
        return self


class ReviewModerationResponse(ReviewResponse):
    """Moderator view: includes flag and moderation details."""

    is_flagged: bool
    admin_attention: bool
    flag_count: int
    flags: list[dict] = []
    moderation_reason: Optional[str] = None
    moderation_message: Optional[str] = None
    moderated_by: Optional[str] = None
    moderated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def hide_anonymous_author(self):
        return self


class ReviewListResponse(BaseModel):
    """Paginated review list."""

    items: list[ReviewResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class ModerationQueueResponse(BaseModel):
    items: list[ReviewModerationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
