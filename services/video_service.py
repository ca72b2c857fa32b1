"""
VideoService — feed, video CRUD, likes and comments.

Ownership is checked against the authenticated UserDoc handed in by the
route layer; the service never looks at request headers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from bson import ObjectId

from errors import ForbiddenError, NotFoundError, ValidationError
from repositories.video_repository import VideoRepository
from schemas.dto.requests.video import CreateVideoRequest, UpdateVideoRequest
from schemas.dto.responses.common import PaginationMeta
from schemas.models.base import parse_object_id
from schemas.models.user import UserDoc
from schemas.models.video import COMMENT_MAX_LENGTH, CommentDoc, VideoDoc
from shared.datetime_utils import utcnow
from shared.logging import get_logger

log = get_logger(__name__)


@dataclass
class FeedPage:
    videos: list[VideoDoc]
    pagination: PaginationMeta


def _parse_id(value: str, label: str) -> ObjectId:
    oid = parse_object_id(value)
    if oid is None:
        raise ValidationError(f"Invalid {label} id", field=f"{label}_id")
    return oid


def _video_not_found() -> NotFoundError:
    return NotFoundError("Video not found")


class VideoService:
    def __init__(self, videos: VideoRepository) -> None:
        self._videos = videos

    async def list_feed(self, page: int = 1, limit: int = 10) -> FeedPage:
        skip = (page - 1) * limit
        videos = await self._videos.list_recent(skip, limit)
        total = await self._videos.count()
        return FeedPage(
            videos=videos,
            pagination=PaginationMeta(
                page=page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if total else 0,
            ),
        )

    async def get_video(self, video_id: str) -> VideoDoc:
        """Return the video and count the view."""
        video = await self._videos.increment_views(_parse_id(video_id, "video"))
        if video is None:
            raise _video_not_found()
        return video

    async def _load(self, video_id: str) -> VideoDoc:
        video = await self._videos.find_by_id(_parse_id(video_id, "video"))
        if video is None:
            raise _video_not_found()
        return video

    async def create_video(self, owner: UserDoc, payload: CreateVideoRequest) -> VideoDoc:
        video_url = (payload.video_url or "").strip()
        if not video_url:
            raise ValidationError("Video URL is required", field="videoUrl")

        now = utcnow()
        video = VideoDoc(
            title=payload.title,
            description=payload.description,
            video_url=video_url,
            thumbnail_url=payload.thumbnail_url,
            duration=payload.duration,
            user_id=owner.id,
            username=owner.username,
            created_at=now,
            updated_at=now,
        )
        video = await self._videos.create(video)
        log.info("video_created", video_id=str(video.id), user_id=str(owner.id))
        return video

    async def update_video(
        self, video_id: str, owner: UserDoc, payload: UpdateVideoRequest
    ) -> VideoDoc:
        video = await self._load(video_id)
        if video.user_id != owner.id:
            raise ForbiddenError("Not authorized to update this video")

        fields = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not fields:
            return video
        updated = await self._videos.update_fields(video.id, fields)
        if updated is None:
            raise _video_not_found()
        log.info("video_updated", video_id=str(video.id), fields=sorted(fields))
        return updated

    async def delete_video(self, video_id: str, owner: UserDoc) -> None:
        video = await self._load(video_id)
        if video.user_id != owner.id:
            raise ForbiddenError("Not authorized to delete this video")
        if not await self._videos.delete(video.id):
            raise _video_not_found()
        log.info("video_deleted", video_id=str(video.id), user_id=str(owner.id))

    async def toggle_like(self, video_id: str, user: UserDoc) -> tuple[bool, int]:
        """Flip the user's like; returns (is_liked, like_count)."""
        video = await self._load(video_id)
        liked = not video.is_liked_by(user.id)
        updated = await self._videos.set_like(video.id, user.id, liked)
        if updated is None:
            raise _video_not_found()
        return updated.is_liked_by(user.id), updated.like_count

    async def add_comment(
        self, video_id: str, user: UserDoc, text: Optional[str]
    ) -> CommentDoc:
        oid = _parse_id(video_id, "video")
        text = (text or "").strip()
        if not text:
            raise ValidationError("Comment text is required", field="text")
        if len(text) > COMMENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment cannot exceed {COMMENT_MAX_LENGTH} characters", field="text"
            )

        comment = CommentDoc(
            user_id=user.id,
            username=user.username,
            text=text,
            created_at=utcnow(),
        )
        updated = await self._videos.push_comment(oid, comment)
        if updated is None:
            raise _video_not_found()
        log.info("comment_added", video_id=str(oid), comment_id=str(comment.id))
        return comment

    async def list_comments(self, video_id: str) -> list[CommentDoc]:
        video = await self._load(video_id)
        return video.comments

    async def delete_comment(
        self, video_id: str, comment_id: str, user: UserDoc
    ) -> None:
        video = await self._load(video_id)
        comment = video.find_comment(_parse_id(comment_id, "comment"))
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.user_id != user.id:
            raise ForbiddenError("Not authorized to delete this comment")
        await self._videos.pull_comment(video.id, comment.id)
        log.info("comment_deleted", video_id=str(video.id), comment_id=str(comment.id))
