"""
测试公共夹具
"""

import os

os.environ.setdefault("LOG_FILE", "")

import httpx
import pytest
from werkzeug.security import generate_password_hash

from diary_app.services.store_client import DataStoreClient
from fixtures import FakeStore


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def client(store):
    return DataStoreClient(base_url="http://store.test", transport=httpx.MockTransport(store.handler))


@pytest.fixture
def seed_user(store):
    def _seed(username, password="secret123", **extra):
        return store.seed(
            "users",
            username=username,
            email=extra.pop("email", f"{username}@example.com"),
            password=generate_password_hash(password),
            avatar=None,
            createdAt="2024-01-01T00:00:00+00:00",
            **extra
        )
    return _seed
