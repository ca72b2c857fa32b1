"""
Video document model.

Maps to the `videos` MongoDB collection.

Likes are stored as an array of user ObjectIds (toggled with $addToSet /
$pull). Comments are owned child documents with their own `_id`, so they are
addressed by id and never by array position.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from bson import ObjectId
from pydantic import Field

from schemas.models.base import MongoBaseModel, PyObjectId

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 500


class CommentDoc(MongoBaseModel):
    """Embedded comment sub-document."""

    id: PyObjectId = Field(default_factory=ObjectId, alias="_id")
    user_id: PyObjectId
    username: str
    text: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)
    created_at: Optional[datetime] = None


class VideoDoc(MongoBaseModel):
    """Document model for the `videos` collection."""

    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    video_url: str
    thumbnail_url: Optional[str] = None
    duration: Optional[float] = Field(default=None, ge=0)
    user_id: PyObjectId
    username: str
    likes: list[PyObjectId] = []
    comments: list[CommentDoc] = []
    views: int = Field(default=0, ge=0)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def is_liked_by(self, user_id: Optional[ObjectId]) -> bool:
        if user_id is None:
            return False
        return user_id in self.likes

    def find_comment(self, comment_id: ObjectId) -> Optional[CommentDoc]:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
        return None
