"""Unit tests for VideoRepository over an in-memory MongoDB."""

from bson import ObjectId
from freezegun import freeze_time

from schemas.models.video import CommentDoc, VideoDoc


def _video(owner=None, **overrides) -> VideoDoc:
    base = dict(
        video_url="https://cdn.example/v.mp4",
        user_id=owner or ObjectId(),
        username="dj",
    )
    base.update(overrides)
    return VideoDoc(**base)


class TestCreateAndFind:
    async def test_create_assigns_id_and_timestamps(self, video_repo):
        video = await video_repo.create(_video(title="First"))
        assert isinstance(video.id, ObjectId)
        assert video.created_at is not None
        found = await video_repo.find_by_id(video.id)
        assert found.title == "First"

    async def test_find_missing_returns_none(self, video_repo):
        assert await video_repo.find_by_id(ObjectId()) is None


class TestListRecent:
    async def test_newest_first_with_paging(self, video_repo):
        for day in range(1, 6):
            with freeze_time(f"2024-01-0{day}T00:00:00Z"):
                await video_repo.create(_video(title=f"day{day}"))

        first_page = await video_repo.list_recent(skip=0, limit=2)
        second_page = await video_repo.list_recent(skip=2, limit=2)
        assert [v.title for v in first_page] == ["day5", "day4"]
        assert [v.title for v in second_page] == ["day3", "day2"]
        assert await video_repo.count() == 5


class TestCounters:
    async def test_increment_views(self, video_repo):
        video = await video_repo.create(_video())
        await video_repo.increment_views(video.id)
        updated = await video_repo.increment_views(video.id)
        assert updated.views == 2

    async def test_increment_views_missing(self, video_repo):
        assert await video_repo.increment_views(ObjectId()) is None

    async def test_set_like_is_idempotent(self, video_repo):
        video = await video_repo.create(_video())
        fan = ObjectId()
        await video_repo.set_like(video.id, fan, True)
        liked = await video_repo.set_like(video.id, fan, True)
        assert liked.likes == [fan]
        unliked = await video_repo.set_like(video.id, fan, False)
        assert unliked.likes == []


class TestUpdateDelete:
    async def test_update_fields(self, video_repo):
        video = await video_repo.create(_video(title="Old"))
        updated = await video_repo.update_fields(video.id, {"title": "New"})
        assert updated.title == "New"

    async def test_delete(self, video_repo):
        video = await video_repo.create(_video())
        assert await video_repo.delete(video.id) is True
        assert await video_repo.delete(video.id) is False


class TestComments:
    async def test_push_and_pull_by_id(self, video_repo):
        video = await video_repo.create(_video())
        keep = CommentDoc(user_id=ObjectId(), username="a", text="keep me")
        drop = CommentDoc(user_id=ObjectId(), username="b", text="drop me")
        await video_repo.push_comment(video.id, keep)
        with_both = await video_repo.push_comment(video.id, drop)
        assert [c.text for c in with_both.comments] == ["keep me", "drop me"]

        assert await video_repo.pull_comment(video.id, drop.id) is True
        remaining = await video_repo.find_by_id(video.id)
        assert [c.id for c in remaining.comments] == [keep.id]

    async def test_push_comment_missing_video(self, video_repo):
        comment = CommentDoc(user_id=ObjectId(), username="a", text="hi")
        assert await video_repo.push_comment(ObjectId(), comment) is None
