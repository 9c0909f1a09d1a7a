"""
HTTP接口测试
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from diary_app.services.interaction_service import interaction_manager
from diary_app.services.store_client import COMMENTS, DIARIES, LIKES, store_client
from main import app


@pytest.fixture
def api(store, monkeypatch):
    monkeypatch.setattr(store_client, "transport", httpx.MockTransport(store.handler))
    monkeypatch.setattr(interaction_manager, "_in_flight", {})
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login(api, seed_user):
    def _login(username):
        seed_user(username, "secret123")
        response = api.post("/api/auth/login", json={"username": username, "password": "secret123"})
        assert response.status_code == 200
        token = response.json()["data"]["token"]
        return {"Authorization": f"Bearer {token}"}
    return _login


def create_diary(api, headers, title="day one", is_public=True):
    response = api.post("/api/diaries", json={"title": title, "content": "text", "isPublic": is_public},
                        headers=headers)
    assert response.status_code == 200
    return response.json()["data"]


class TestAuthApi:
    
    def test_register_then_login(self, api):
        response = api.post("/api/auth/register", json={
            "username": "alice",
            "email": "alice@example.com",
            "password": "secret123",
            "confirmPassword": "secret123"
        })
        assert response.status_code == 200
        assert "password" not in response.json()["data"]
        
        response = api.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
        body = response.json()
        assert body["code"] == 0
        
        me = api.get("/api/auth/me", headers={"Authorization": f"Bearer {body['data']['token']}"})
        assert me.json()["data"]["username"] == "alice"
    
    def test_bad_credentials(self, api, seed_user):
        seed_user("alice", "secret123")
        response = api.post("/api/auth/login", json={"username": "alice", "password": "nope123"})
        assert response.status_code == 401
        assert response.json()["code"] == 401
    
    def test_invalid_registration(self, api):
        response = api.post("/api/auth/register", json={
            "username": "a!",
            "email": "alice@example.com",
            "password": "secret123",
            "confirmPassword": "secret123"
        })
        assert response.status_code == 400
    
    def test_me_requires_login(self, api):
        assert api.get("/api/auth/me").status_code == 401


class TestDiaryApi:
    
    def test_private_diary_hidden_from_others(self, api, login):
        owner = login("owner")
        other = login("other")
        diary = create_diary(api, owner, title="secret", is_public=False)
        
        anonymous = api.get(f"/api/diaries/{diary['id']}")
        assert anonymous.status_code == 401
        assert "secret" not in anonymous.text
        
        forbidden = api.get(f"/api/diaries/{diary['id']}", headers=other)
        assert forbidden.status_code == 403
        assert "secret" not in forbidden.text
        
        own = api.get(f"/api/diaries/{diary['id']}", headers=owner)
        assert own.status_code == 200
        assert own.json()["data"]["permissions"]["can_comment"] is False
    
    def test_feed_and_mine(self, api, login):
        owner = login("owner")
        create_diary(api, owner, title="pub", is_public=True)
        create_diary(api, owner, title="priv", is_public=False)
        
        feed = api.get("/api/diaries").json()["data"]
        assert [item["diary"]["title"] for item in feed] == ["pub"]
        
        mine = api.get("/api/diaries/mine", headers=owner).json()["data"]
        assert mine["stats"]["total"] == 2
        assert {d["title"] for d in mine["diaries"]} == {"pub", "priv"}
        
        private_only = api.get("/api/diaries/mine?visibility=private", headers=owner).json()["data"]
        assert [d["title"] for d in private_only["diaries"]] == ["priv"]
    
    def test_only_owner_edits_and_deletes(self, api, store, login):
        owner = login("owner")
        other = login("other")
        diary = create_diary(api, owner)
        
        assert api.patch(f"/api/diaries/{diary['id']}", json={"title": "hacked"}, headers=other).status_code == 403
        
        response = api.patch(f"/api/diaries/{diary['id']}", json={"title": "renamed", "isPublic": False},
                             headers=owner)
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "renamed"
        assert response.json()["data"]["isPublic"] is False
        
        assert api.delete(f"/api/diaries/{diary['id']}", headers=other).status_code == 403
        assert api.delete(f"/api/diaries/{diary['id']}", headers=owner).status_code == 200
        assert store.data[DIARIES] == []
    
    def test_delete_cascades_to_comments_and_likes(self, api, store, login):
        owner = login("owner")
        other = login("other")
        diary = create_diary(api, owner)
        api.post(f"/api/diaries/{diary['id']}/like", headers=other)
        api.post(f"/api/diaries/{diary['id']}/comments", json={"content": "hi"}, headers=other)
        
        api.delete(f"/api/diaries/{diary['id']}", headers=owner)
        
        assert store.data[COMMENTS] == []
        assert store.data[LIKES] == []
    
    def test_missing_diary(self, api):
        assert api.get("/api/diaries/999").status_code == 404
    
    def test_store_down_is_reported(self, api, store):
        store.fail.add(("GET", DIARIES))
        response = api.get("/api/diaries")
        assert response.status_code == 502
        assert response.json()["code"] == 502


class TestInteractionApi:
    
    def test_like_toggle(self, api, login):
        owner = login("owner")
        viewer = login("viewer")
        diary = create_diary(api, owner)
        
        first = api.post(f"/api/diaries/{diary['id']}/like", headers=viewer).json()["data"]
        assert first["liked"] is True and first["likes"] == 1
        
        second = api.post(f"/api/diaries/{diary['id']}/like", headers=viewer).json()["data"]
        assert second["liked"] is False and second["likes"] == 0
    
    def test_like_requires_login(self, api, login):
        diary = create_diary(api, login("owner"))
        assert api.post(f"/api/diaries/{diary['id']}/like").status_code == 401
    
    def test_comment_flow(self, api, login):
        owner = login("owner")
        viewer = login("viewer")
        third = login("third")
        diary = create_diary(api, owner)
        
        response = api.post(f"/api/diaries/{diary['id']}/comments",
                            json={"content": "hello", "anonymous": True}, headers=viewer)
        comment = response.json()["data"]
        assert comment["guestName"] == "Anonymous"
        assert comment["userId"] is None
        
        url = f"/api/diaries/{diary['id']}/comments/{comment['id']}"
        assert api.delete(url, headers=viewer).status_code == 403
        assert api.delete(url, headers=third).status_code == 403
        assert api.delete(url, headers=owner).status_code == 200
    
    def test_cannot_comment_private_diary(self, api, login):
        owner = login("owner")
        diary = create_diary(api, owner, is_public=False)
        response = api.post(f"/api/diaries/{diary['id']}/comments", json={"content": "x"}, headers=owner)
        assert response.status_code == 403
    
    def test_comment_from_other_diary_not_found(self, api, login):
        owner = login("owner")
        viewer = login("viewer")
        first = create_diary(api, owner, title="a")
        second = create_diary(api, owner, title="b")
        comment = api.post(f"/api/diaries/{first['id']}/comments", json={"content": "x"},
                           headers=viewer).json()["data"]
        
        response = api.delete(f"/api/diaries/{second['id']}/comments/{comment['id']}", headers=viewer)
        assert response.status_code == 404
