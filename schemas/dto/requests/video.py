"""
Request DTOs for video endpoints.

CreateVideoRequest  — POST /videos
UpdateVideoRequest  — PUT /videos/{video_id}
CommentRequest      — POST /videos/{video_id}/comments
FeedQuery           — GET /videos query parameters
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.models.video import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH

MAX_PAGE_SIZE = 50


class CreateVideoRequest(BaseModel):
    """Request body for POST /videos.

    ``video_url`` is optional at the schema level so a missing URL produces
    the service's "Video URL is required" message.
    """

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[float] = Field(default=None, ge=0)


class UpdateVideoRequest(BaseModel):
    """Request body for PUT /videos/{video_id}; only provided fields change."""

    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)


class CommentRequest(BaseModel):
    """Request body for POST /videos/{video_id}/comments."""

    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None


class FeedQuery(BaseModel):
    """Query parameters for GET /videos."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)
