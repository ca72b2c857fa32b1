"""
Async repository over the `videos` collection.

Like toggles and comment pushes are single atomic updates
(find_one_and_update), so concurrent likes from different users never
overwrite each other.
"""

from __future__ import annotations

from typing import Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from schemas.models.video import CommentDoc, VideoDoc
from shared.datetime_utils import utcnow

VIDEOS_COLLECTION = "videos"


class VideoRepository:
    def __init__(self, db) -> None:
        self._col = db[VIDEOS_COLLECTION]

    async def ensure_indexes(self) -> None:
        await self._col.create_index([("created_at", DESCENDING)])
        await self._col.create_index(
            [("user_id", ASCENDING), ("created_at", DESCENDING)]
        )

    async def list_recent(self, skip: int, limit: int) -> list[VideoDoc]:
        cursor = (
            self._col.find({})
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .skip(skip)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        return [VideoDoc.from_mongo(doc) for doc in docs]

    async def count(self) -> int:
        return await self._col.count_documents({})

    async def find_by_id(self, video_id: ObjectId) -> Optional[VideoDoc]:
        return VideoDoc.from_mongo(await self._col.find_one({"_id": video_id}))

    async def increment_views(self, video_id: ObjectId) -> Optional[VideoDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": video_id},
            {"$inc": {"views": 1}},
            return_document=ReturnDocument.AFTER,
        )
        return VideoDoc.from_mongo(doc)

    async def create(self, video: VideoDoc) -> VideoDoc:
        now = utcnow()
        video.created_at = video.created_at or now
        video.updated_at = now
        result = await self._col.insert_one(video.to_mongo())
        video.id = result.inserted_id
        return video

    async def update_fields(self, video_id: ObjectId, fields: dict) -> Optional[VideoDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": video_id},
            {"$set": {**fields, "updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return VideoDoc.from_mongo(doc)

    async def delete(self, video_id: ObjectId) -> bool:
        result = await self._col.delete_one({"_id": video_id})
        return result.deleted_count == 1

    async def set_like(
        self, video_id: ObjectId, user_id: ObjectId, liked: bool
    ) -> Optional[VideoDoc]:
        operator = "$addToSet" if liked else "$pull"
        doc = await self._col.find_one_and_update(
            {"_id": video_id},
            {operator: {"likes": user_id}, "$set": {"updated_at": utcnow()}},
            return_document=ReturnDocument.AFTER,
        )
        return VideoDoc.from_mongo(doc)

    async def push_comment(
        self, video_id: ObjectId, comment: CommentDoc
    ) -> Optional[VideoDoc]:
        doc = await self._col.find_one_and_update(
            {"_id": video_id},
            {
                "$push": {"comments": comment.model_dump(by_alias=True)},
                "$set": {"updated_at": utcnow()},
            },
            return_document=ReturnDocument.AFTER,
        )
        return VideoDoc.from_mongo(doc)

    async def pull_comment(self, video_id: ObjectId, comment_id: ObjectId) -> bool:
        result = await self._col.update_one(
            {"_id": video_id},
            {
                "$pull": {"comments": {"_id": comment_id}},
                "$set": {"updated_at": utcnow()},
            },
        )
        return result.modified_count == 1
