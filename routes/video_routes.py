"""
Video endpoints.

GET    /videos                                — feed, newest first (optional auth)
GET    /videos/{video_id}                     — one video, counts a view (optional auth)
POST   /videos                                — create (auth)
PUT    /videos/{video_id}                     — update title/description (owner)
DELETE /videos/{video_id}                     — delete (owner)
PUT    /videos/{video_id}/like                — toggle the caller's like (auth)
POST   /videos/{video_id}/comments            — add a comment (auth)
GET    /videos/{video_id}/comments            — list comments
DELETE /videos/{video_id}/comments/{comment_id} — delete own comment (auth)
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from dependencies import get_video_service, optional_auth, protect
from schemas.dto.requests.video import (
    CommentRequest,
    CreateVideoRequest,
    FeedQuery,
    UpdateVideoRequest,
)
from schemas.dto.responses.common import MessageResponse
from schemas.dto.responses.video import (
    CommentEnvelope,
    CommentListResponse,
    CommentResponse,
    FeedResponse,
    LikeResponse,
    VideoEnvelope,
    VideoResponse,
)
from schemas.models.user import UserDoc
from services.video_service import VideoService

router = APIRouter(prefix="/videos", tags=["videos"])


def _viewer_id(user: Optional[UserDoc]):
    return user.id if user is not None else None


@router.get("", response_model=FeedResponse)
async def list_videos(
    query: Annotated[FeedQuery, Query()],
    user: Optional[UserDoc] = Depends(optional_auth),
    videos: VideoService = Depends(get_video_service),
) -> FeedResponse:
    """
    Paginated feed. `isLiked` reflects the caller when a bearer token is
    supplied and is false for anonymous requests.
    """
    page = await videos.list_feed(query.page, query.limit)
    viewer = _viewer_id(user)
    return FeedResponse(
        videos=[VideoResponse.from_doc(v, viewer) for v in page.videos],
        pagination=page.pagination,
    )


@router.get("/{video_id}", response_model=VideoEnvelope)
async def get_video(
    video_id: str,
    user: Optional[UserDoc] = Depends(optional_auth),
    videos: VideoService = Depends(get_video_service),
) -> VideoEnvelope:
    video = await videos.get_video(video_id)
    return VideoEnvelope(video=VideoResponse.from_doc(video, _viewer_id(user)))


@router.post("", status_code=201, response_model=VideoEnvelope)
async def create_video(
    body: CreateVideoRequest,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> VideoEnvelope:
    video = await videos.create_video(user, body)
    return VideoEnvelope(video=VideoResponse.from_doc(video, user.id))


@router.put("/{video_id}", response_model=VideoEnvelope)
async def update_video(
    video_id: str,
    body: UpdateVideoRequest,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> VideoEnvelope:
    video = await videos.update_video(video_id, user, body)
    return VideoEnvelope(video=VideoResponse.from_doc(video, user.id))


@router.delete("/{video_id}", response_model=MessageResponse)
async def delete_video(
    video_id: str,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> MessageResponse:
    await videos.delete_video(video_id, user)
    return MessageResponse(message="Video deleted successfully")


@router.put("/{video_id}/like", response_model=LikeResponse)
async def toggle_like(
    video_id: str,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> LikeResponse:
    is_liked, like_count = await videos.toggle_like(video_id, user)
    return LikeResponse(is_liked=is_liked, like_count=like_count)


@router.post("/{video_id}/comments", status_code=201, response_model=CommentEnvelope)
async def add_comment(
    video_id: str,
    body: CommentRequest,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> CommentEnvelope:
    comment = await videos.add_comment(video_id, user, body.text)
    return CommentEnvelope(comment=CommentResponse.from_doc(comment))


@router.get("/{video_id}/comments", response_model=CommentListResponse)
async def list_comments(
    video_id: str,
    videos: VideoService = Depends(get_video_service),
) -> CommentListResponse:
    comments = await videos.list_comments(video_id)
    return CommentListResponse(
        comments=[CommentResponse.from_doc(c) for c in comments]
    )


@router.delete("/{video_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    video_id: str,
    comment_id: str,
    user: UserDoc = Depends(protect),
    videos: VideoService = Depends(get_video_service),
) -> MessageResponse:
    await videos.delete_comment(video_id, comment_id, user)
    return MessageResponse(message="Comment deleted successfully")
