"""
信息流组装测试
"""

import pytest

from diary_app.services.feed_service import FeedService
from diary_app.services.store_client import COMMENTS, DIARIES, USERS
from diary_app.utils.errors import ValidationFailure
from fixtures import make_user, run

OWNER = make_user("u1", "owner")
OTHER = make_user("u2", "other")


@pytest.fixture
def feed(store, client):
    store.seed(USERS, id="u1", username="owner", email="owner@example.com", createdAt="2024-01-01T00:00:00Z")
    store.seed(USERS, id="u2", username="other", email="other@example.com", createdAt="2024-01-01T00:00:00Z")
    store.seed(DIARIES, id=1, userId="u1", title="public old", isPublic=True, likes=2,
               createdAt="2024-01-01T00:00:00Z")
    store.seed(DIARIES, id=2, userId="u1", title="private", isPublic=False, likes=1,
               createdAt="2024-02-01T00:00:00Z")
    store.seed(DIARIES, id=3, userId="u2", title="public new", isPublic=True, likes=0,
               createdAt="2024-03-01T00:00:00Z")
    store.seed(COMMENTS, id=10, diaryId=1, userId="u2", guestName="other", content="hi",
               createdAt="2024-01-05T00:00:00Z")
    store.seed(COMMENTS, id=11, diaryId=2, userId=None, guestName="Anonymous", content="secret",
               createdAt="2024-02-05T00:00:00Z")
    return FeedService(client)


class TestListVisible:
    
    def test_anonymous_sees_public_only(self, feed):
        items = run(feed.list_visible(None))
        assert [i.diary.title for i in items] == ["public new", "public old"]
    
    def test_owner_sees_own_private_in_recency_order(self, feed):
        items = run(feed.list_visible(OWNER))
        assert [i.diary.title for i in items] == ["public new", "private", "public old"]
    
    def test_other_user_does_not_see_private(self, feed):
        items = run(feed.list_visible(OTHER))
        assert all(i.diary.is_public for i in items)
    
    def test_authors_resolved(self, feed):
        items = run(feed.list_visible(OWNER))
        assert {i.diary.title: i.author.username for i in items} == {
            "public new": "other",
            "private": "owner",
            "public old": "owner",
        }
    
    def test_comments_only_fetched_for_public(self, store, feed):
        items = run(feed.list_visible(OWNER))
        by_title = {i.diary.title: i for i in items}
        
        assert [c.content for c in by_title["public old"].comments] == ["hi"]
        assert by_title["private"].comments == []
        comment_queries = [p for m, path, p in store.requests if path == "/comments"]
        assert {q["diaryId"] for q in comment_queries} == {"1", "3"}
    
    def test_missing_author_does_not_break_feed(self, store, feed):
        store.data[USERS] = [u for u in store.data[USERS] if u["id"] != "u2"]
        items = run(feed.list_visible(None))
        assert items[0].author is None
        assert items[1].author.username == "owner"
    
    def test_to_dict_hides_password(self, store, feed):
        store.find(USERS, "u1")["password"] = "hash"
        data = run(feed.list_visible(None))[1].to_dict()
        assert "password" not in data["author"]
        assert data["commentCount"] == 1
        assert data["diary"]["isPublic"] is True


class TestListOwned:
    
    def test_owned_includes_private(self, feed):
        diaries = run(feed.list_owned("u1"))
        assert [d.title for d in diaries] == ["private", "public old"]
    
    @pytest.mark.parametrize("visibility,titles", [
        ("public", ["public old"]),
        ("private", ["private"]),
    ])
    def test_visibility_filter(self, feed, visibility, titles):
        assert [d.title for d in run(feed.list_owned("u1", visibility))] == titles
    
    def test_unknown_filter(self, feed):
        with pytest.raises(ValidationFailure):
            run(feed.list_owned("u1", "friends"))
    
    def test_stats(self, feed):
        stats = FeedService.owned_stats(run(feed.list_owned("u1")))
        assert stats == {"total": 2, "public": 1, "private": 1, "totalLikes": 3}
