"""
Response DTOs for video endpoints.

CommentResponse  — one comment
VideoResponse    — one video with like/comment counts and the viewer's like
FeedResponse     — GET /videos (200)
LikeResponse     — PUT /videos/{video_id}/like (200)

Keys are camelCase to match the mobile client (``likeCount``, ``isLiked``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field

from schemas.dto.responses.common import PaginationMeta
from schemas.models.video import CommentDoc, VideoDoc


class CommentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(alias="userId")
    username: str
    text: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @classmethod
    def from_doc(cls, comment: CommentDoc) -> "CommentResponse":
        return cls(
            id=str(comment.id),
            user_id=str(comment.user_id),
            username=comment.username,
            text=comment.text,
            created_at=comment.created_at,
        )


class VideoResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: str = Field(alias="videoUrl")
    thumbnail_url: Optional[str] = Field(default=None, alias="thumbnailUrl")
    duration: Optional[float] = None
    user_id: str = Field(alias="userId")
    username: str
    views: int
    like_count: int = Field(alias="likeCount")
    comment_count: int = Field(alias="commentCount")
    is_liked: bool = Field(alias="isLiked")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @classmethod
    def from_doc(
        cls, video: VideoDoc, viewer_id: Optional[ObjectId] = None
    ) -> "VideoResponse":
        return cls(
            id=str(video.id),
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            duration=video.duration,
            user_id=str(video.user_id),
            username=video.username,
            views=video.views,
            like_count=video.like_count,
            comment_count=video.comment_count,
            is_liked=video.is_liked_by(viewer_id),
            created_at=video.created_at,
            updated_at=video.updated_at,
        )


class VideoEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    video: VideoResponse


class FeedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    videos: list[VideoResponse]
    pagination: PaginationMeta


class LikeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    is_liked: bool = Field(alias="isLiked")
    like_count: int = Field(alias="likeCount")


class CommentEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    comment: CommentResponse


class CommentListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    comments: list[CommentResponse]
