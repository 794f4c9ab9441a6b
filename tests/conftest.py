from unittest.mock import patch

import httpx
import pytest
from httpx import ASGITransport
from mongomock_motor import AsyncMongoMockClient


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("MONGODB_URL", "mongodb://localhost:27017")
    monkeypatch.setenv("MONGODB_DATABASE", "test_leads")
    monkeypatch.setenv("CRAWL_PAGE_DELAY", "0")


@pytest.fixture
def mongo_client():
    mongo = AsyncMongoMockClient()
    # lifespan closes the client on shutdown
    with patch.object(mongo, "close", create=True):
        yield mongo


@pytest.fixture
def db(mongo_client):
    return mongo_client["test_leads"]


@pytest.fixture
async def client(mock_env, mongo_client):
    from app.main import app, lifespan

    with patch("app.main.AsyncIOMotorClient", return_value=mongo_client):
        async with lifespan(app):
            async with httpx.AsyncClient(
                transport=ASGITransport(app=app),
                base_url="http://test",
            ) as c:
                yield c
